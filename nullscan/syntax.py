"""
Declaration-level syntax tree built from a tree-sitter Java parse tree.

Rules do not look at raw tree-sitter nodes. Instead the parse tree is
lowered once per file into SyntaxNode objects whose kinds name the
declaration sites we care about (variables, parameters, methods,
constructors) and the pieces those sites are made of (modifier lists,
annotation uses, type references, identifiers). Everything else becomes
an OTHER node that only preserves structure and source order.

Typical usage:
    from nullscan.parser import parse_bytes
    from nullscan.syntax import lower_tree

    source = b"class A { String s; }"
    root = lower_tree(parse_bytes(source), source)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

from tree_sitter import Node as TSNode
from tree_sitter import Tree


class NodeKind(str, enum.Enum):
    """Kinds of SyntaxNode produced by lower_tree()."""

    VARIABLE_DECLARATION = "variable_declaration"
    PARAMETER = "parameter"
    METHOD_DECLARATION = "method_declaration"
    CONSTRUCTOR_DECLARATION = "constructor_declaration"
    ANNOTATION_USE = "annotation_use"
    MODIFIER_LIST = "modifier_list"
    TYPE_REFERENCE = "type_reference"
    IDENTIFIER = "identifier"
    PARAMETER_LIST = "parameter_list"
    OTHER = "other"


@dataclass(frozen=True)
class SyntaxNode:
    """
    One node of the lowered tree.

    line and column are 1-based. text is set for leaves that carry a name
    (identifiers, type references, annotation uses, keyword modifiers).
    """

    kind: NodeKind
    line: int
    column: int
    children: tuple[SyntaxNode, ...] = ()
    text: Optional[str] = None

    def find_first(self, kind: NodeKind) -> Optional[SyntaxNode]:
        """Return the first direct child of the given kind, or None."""
        for child in self.children:
            if child.kind is kind:
                return child
        return None

    def find_all(self, kind: NodeKind) -> list[SyntaxNode]:
        """Return all direct children of the given kind, in order."""
        return [child for child in self.children if child.kind is kind]


# tree-sitter-java node types mapped onto declaration kinds
VARIABLE_DECLARATION_TYPES = frozenset(
    {
        "field_declaration",
        "local_variable_declaration",
        "constant_declaration",  # interface fields
    }
)
PARAMETER_TYPES = frozenset(
    {
        "formal_parameter",
        "spread_parameter",  # varargs
        "catch_formal_parameter",
    }
)
ANNOTATION_TYPES = frozenset({"marker_annotation", "annotation"})


def node_text(source: bytes, node: TSNode) -> str:
    """Decode the source bytes covered by node (bad UTF-8 is replaced)."""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def node_position(source: bytes, node: TSNode) -> tuple[int, int]:
    """
    Return the 1-based (line, column) of node's start.

    Tree-sitter columns count bytes; the column here counts characters, so
    non-ASCII text earlier on the line does not shift it.
    """
    row, byte_col = node.start_point
    line_start = node.start_byte - byte_col
    prefix = source[line_start : node.start_byte].decode("utf-8", errors="replace")
    return row + 1, len(prefix) + 1


# A lowering plan: the slots that make up a node's children, and a function
# that turns the lowered slots into the node's output. A slot is either an
# already built SyntaxNode or a tree-sitter node still to be lowered.
_Slot = Union[SyntaxNode, TSNode]
_Finish = Callable[[list[list[SyntaxNode]]], list[SyntaxNode]]


class _Frame:
    __slots__ = ("slots", "finish", "results", "index")

    def __init__(self, slots: list[_Slot], finish: _Finish) -> None:
        self.slots = slots
        self.finish = finish
        self.results: list[list[SyntaxNode]] = []
        self.index = 0


def _flatten(results: list[list[SyntaxNode]]) -> tuple[SyntaxNode, ...]:
    return tuple(node for lowered in results for node in lowered)


class _Lowering:
    """
    Translation of tree-sitter nodes for one source buffer.

    Runs on an explicit stack: generated code and long expression chains
    nest far deeper than Python's recursion limit.
    """

    def __init__(self, source: bytes) -> None:
        self.source = source

    def lower(self, root: TSNode) -> list[SyntaxNode]:
        stack = [self._plan(root)]
        lowered: list[SyntaxNode] = []
        while stack:
            frame = stack[-1]
            if frame.index < len(frame.slots):
                slot = frame.slots[frame.index]
                frame.index += 1
                if isinstance(slot, SyntaxNode):
                    frame.results.append([slot])
                else:
                    stack.append(self._plan(slot))
                continue
            stack.pop()
            lowered = frame.finish(frame.results)
            if stack:
                stack[-1].results.append(lowered)
        return lowered

    def _plan(self, node: TSNode) -> _Frame:
        kind = node.type
        if kind in VARIABLE_DECLARATION_TYPES:
            return self._variables(node)
        if kind == "enhanced_for_statement":
            return self._enhanced_for(node)
        if kind == "method_declaration":
            return self._declaration(NodeKind.METHOD_DECLARATION, node)
        if kind == "constructor_declaration":
            return self._declaration(NodeKind.CONSTRUCTOR_DECLARATION, node)
        if kind == "spread_parameter":
            return self._spread_parameter(node)
        if kind in PARAMETER_TYPES:
            return self._declaration(NodeKind.PARAMETER, node)
        if kind == "formal_parameters":
            return self._structural(NodeKind.PARAMETER_LIST, node)
        if kind == "modifiers":
            modifiers = self._modifiers(node)
            return _Frame([], lambda results: [modifiers])
        if kind == "record_declaration":
            # Record components are not parameters of any callable.
            return self._structural(NodeKind.OTHER, node, skip=node.child_by_field_name("parameters"))
        return self._structural(NodeKind.OTHER, node)

    def _node(self, kind: NodeKind, node: TSNode, children: tuple[SyntaxNode, ...] = ()) -> SyntaxNode:
        line, column = node_position(self.source, node)
        return SyntaxNode(kind=kind, line=line, column=column, children=children)

    def _leaf(self, kind: NodeKind, node: TSNode, text: Optional[str] = None) -> SyntaxNode:
        line, column = node_position(self.source, node)
        if text is None:
            text = node_text(self.source, node)
        return SyntaxNode(kind=kind, line=line, column=column, text=text)

    def _wrap(self, kind: NodeKind, node: TSNode, slots: list[_Slot]) -> _Frame:
        return _Frame(slots, lambda results: [self._node(kind, node, _flatten(results))])

    def _structural(
        self,
        kind: NodeKind,
        node: TSNode,
        skip: Optional[TSNode] = None,
    ) -> _Frame:
        slots: list[_Slot] = [c for c in node.named_children if skip is None or c != skip]
        return self._wrap(kind, node, slots)

    def _modifiers(self, node: TSNode) -> SyntaxNode:
        children: list[SyntaxNode] = []
        for child in node.children:
            if child.type in ANNOTATION_TYPES:
                name = child.child_by_field_name("name")
                text = "".join(node_text(self.source, name).split()) if name is not None else None
                children.append(self._leaf(NodeKind.ANNOTATION_USE, child, text=text))
            else:
                children.append(self._leaf(NodeKind.OTHER, child))
        return self._node(NodeKind.MODIFIER_LIST, node, tuple(children))

    def _declaration(self, kind: NodeKind, node: TSNode) -> _Frame:
        """Plan a declaration whose type and name are direct fields of node."""
        type_node = node.child_by_field_name("type")
        name_node = node.child_by_field_name("name")
        slots: list[_Slot] = []
        for child in node.named_children:
            if child.type == "modifiers":
                slots.append(self._modifiers(child))
            elif type_node is not None and child == type_node:
                slots.append(self._leaf(NodeKind.TYPE_REFERENCE, child))
            elif name_node is not None and child == name_node:
                slots.append(self._leaf(NodeKind.IDENTIFIER, child))
            else:
                slots.append(child)
        return self._wrap(kind, node, slots)

    def _spread_parameter(self, node: TSNode) -> _Frame:
        # `@Nullable String... args`: no type/name fields, the name sits
        # inside a trailing variable_declarator.
        slots: list[_Slot] = []
        seen_type = False
        for child in node.named_children:
            if child.type == "modifiers":
                slots.append(self._modifiers(child))
            elif child.type == "variable_declarator":
                name = child.child_by_field_name("name")
                if name is not None:
                    slots.append(self._leaf(NodeKind.IDENTIFIER, name))
            elif not seen_type and child.type not in ANNOTATION_TYPES:
                slots.append(self._leaf(NodeKind.TYPE_REFERENCE, child))
                seen_type = True
            else:
                slots.append(child)
        return self._wrap(NodeKind.PARAMETER, node, slots)

    def _enhanced_for(self, node: TSNode) -> _Frame:
        # `for (@Nullable String s : xs) body`: the loop variable becomes a
        # VARIABLE_DECLARATION ahead of the iterated value and the body.
        type_node = node.child_by_field_name("type")
        name_node = node.child_by_field_name("name")
        parts: list[SyntaxNode] = []
        rest: list[_Slot] = []
        anchor: Optional[TSNode] = None
        for child in node.named_children:
            if child.type == "modifiers":
                parts.append(self._modifiers(child))
                anchor = child
            elif type_node is not None and child == type_node:
                parts.append(self._leaf(NodeKind.TYPE_REFERENCE, child))
                if anchor is None:
                    anchor = child
            elif name_node is not None and child == name_node:
                parts.append(self._leaf(NodeKind.IDENTIFIER, child))
            elif child.type != "dimensions":
                rest.append(child)
        variable = self._node(NodeKind.VARIABLE_DECLARATION, anchor if anchor is not None else node, tuple(parts))
        return self._wrap(NodeKind.OTHER, node, [variable, *rest])

    def _variables(self, node: TSNode) -> _Frame:
        """One VARIABLE_DECLARATION per declarator: `String a, b;` gives two."""
        modifiers: Optional[SyntaxNode] = None
        for child in node.named_children:
            if child.type == "modifiers":
                modifiers = self._modifiers(child)
                break
        type_node = node.child_by_field_name("type")
        type_ref = self._leaf(NodeKind.TYPE_REFERENCE, type_node) if type_node is not None else None
        shared = [c for c in (modifiers, type_ref) if c is not None]

        declarators = node.children_by_field_name("declarator")
        if not declarators:
            return _Frame([], lambda results: [self._node(NodeKind.VARIABLE_DECLARATION, node, tuple(shared))])

        # Initializers are lowered as slots; value_slots maps declarator -> slot index.
        slots: list[_Slot] = []
        value_slots: list[Optional[int]] = []
        for declarator in declarators:
            value = declarator.child_by_field_name("value")
            if value is None:
                value_slots.append(None)
            else:
                value_slots.append(len(slots))
                slots.append(value)

        def finish(results: list[list[SyntaxNode]]) -> list[SyntaxNode]:
            declarations: list[SyntaxNode] = []
            for index, declarator in enumerate(declarators):
                children = list(shared)
                name = declarator.child_by_field_name("name")
                if name is not None:
                    children.append(self._leaf(NodeKind.IDENTIFIER, name))
                slot = value_slots[index]
                if slot is not None:
                    children.extend(results[slot])
                # First declarator is reported at the statement start, later ones at their own name.
                anchor = node if index == 0 else declarator
                declarations.append(self._node(NodeKind.VARIABLE_DECLARATION, anchor, tuple(children)))
            return declarations

        return _Frame(slots, finish)


def lower_tree(tree: Union[Tree, TSNode], source: bytes) -> SyntaxNode:
    """
    Lower a tree-sitter Java tree (or subtree) into a SyntaxNode tree.

    The returned root keeps source order: a pre-order walk over it visits
    declarations top-to-bottom, left-to-right as written.
    """
    node = tree.root_node if isinstance(tree, Tree) else tree
    lowered = _Lowering(source).lower(node)
    if len(lowered) == 1:
        return lowered[0]
    # A bare declaration with several declarators: wrap them.
    line, column = node_position(source, node)
    return SyntaxNode(kind=NodeKind.OTHER, line=line, column=column, children=tuple(lowered))


def iter_nodes(node: SyntaxNode) -> Iterator[SyntaxNode]:
    """Yield node and every descendant in document order (pre-order DFS)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))
