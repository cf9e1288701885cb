# Per-file analysis context: store file path, source code, AST, and helper methods.
# Handles reading/parsing Java files, error handling for unreadable/malformed files,
# and logging of node/declaration counts so trees are ready for rules.

import logging
from pathlib import Path
from typing import Optional

from tree_sitter import Node as TSNode
from tree_sitter import Parser, Tree

from nullscan.parser import create_parser, parse_bytes
from nullscan.syntax import PARAMETER_TYPES, VARIABLE_DECLARATION_TYPES, SyntaxNode, lower_tree

logger = logging.getLogger(__name__)

_DECLARATION_TYPES = (
    VARIABLE_DECLARATION_TYPES
    | PARAMETER_TYPES
    | {"method_declaration", "constructor_declaration"}
)


def count_tree_stats(root: TSNode) -> tuple[int, int]:
    """
    Return (total node count, declaration count) for the tree.

    Useful for logging how much was parsed. Walks with a TreeCursor, so
    deeply nested expressions do not hit the recursion limit.
    """
    nodes = 0
    declarations = 0
    cursor = root.walk()
    while True:
        node = cursor.node
        nodes += 1
        if node.is_named and node.type in _DECLARATION_TYPES:
            declarations += 1
        if cursor.goto_first_child():
            continue
        while not cursor.goto_next_sibling():
            if not cursor.goto_parent():
                return nodes, declarations


class FileContext:
    """
    Per-file state for static analysis: path, raw source bytes, and AST.

    Rules use context.path, context.lines and context.syntax_root. The
    lowered syntax tree and the decoded source lines are built on first
    access and then reused, so several rules can share them.
    """

    def __init__(
        self,
        path: Path,
        source: bytes,
        tree: Tree,
        *,
        has_parse_errors: bool = False,
    ) -> None:
        self.path = path
        self.source = source
        self.tree = tree
        self.has_parse_errors = has_parse_errors
        self._syntax_root: Optional[SyntaxNode] = None
        self._lines: Optional[list[str]] = None

    @property
    def syntax_root(self) -> SyntaxNode:
        """Declaration-level tree (see nullscan.syntax)."""
        if self._syntax_root is None:
            self._syntax_root = lower_tree(self.tree, self.source)
        return self._syntax_root

    @property
    def lines(self) -> list[str]:
        """Decoded source lines; lines[0] is line 1."""
        if self._lines is None:
            text = self.source.decode("utf-8", errors="replace")
            self._lines = [line.rstrip("\r") for line in text.split("\n")]
        return self._lines


def create_context(
    path: Path,
    parser: Optional[Parser] = None,
) -> Optional[FileContext]:
    """
    Read a Java file and parse it into a FileContext.

    - Unreadable file (permission, missing): returns None and logs error.
    - Malformed Java (syntax errors): still returns a FileContext with the
      tree and sets has_parse_errors=True, so the rest of the file is
      checked on a best-effort basis.
    """
    if parser is None:
        parser = create_parser()

    try:
        source = path.read_bytes()
    except OSError as e:
        logger.error("Failed to read file %s: %s", path, e)
        return None

    tree = parse_bytes(source, parser=parser)
    has_errors = tree.root_node.has_error
    if has_errors:
        logger.warning("File %s parsed with syntax errors; AST may be incomplete", path)

    node_count, decl_count = count_tree_stats(tree.root_node)
    logger.info(
        "Parsed %s: %d nodes, %d declaration(s)%s",
        path,
        node_count,
        decl_count,
        " (with parse errors)" if has_errors else "",
    )

    return FileContext(
        path=path,
        source=source,
        tree=tree,
        has_parse_errors=has_errors,
    )
