# Nullability annotation presence: flags fields, locals, parameters and non-void method
# return types that carry neither @NonNull nor @Nullable (or a configured equivalent).

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from nullscan.findings.models import Finding, FindingSink, Location
from nullscan.rules.annotations import AnnotationMatcher
from nullscan.rules.base import Rule
from nullscan.syntax import NodeKind, SyntaxNode

if TYPE_CHECKING:
    from nullscan.config import Config
    from nullscan.context import FileContext

logger = logging.getLogger(__name__)

VARIABLE_MESSAGE = "Variable '{name}' should be annotated with @NonNull or @Nullable."
PARAMETER_MESSAGE = "Parameter '{name}' should be annotated with @NonNull or @Nullable."
METHOD_MESSAGE = "Method '{name}' return type should be annotated with @NonNull or @Nullable."

UNKNOWN_NAME = "unknown"


def _declared_name(node: SyntaxNode) -> str:
    ident = node.find_first(NodeKind.IDENTIFIER)
    if ident is None or not ident.text:
        return UNKNOWN_NAME
    return ident.text


def _source_line(lines: Optional[Sequence[str]], line: int) -> Optional[str]:
    """Return the 1-based source line, or None if unavailable."""
    if lines is None or not 1 <= line <= len(lines):
        return None
    return lines[line - 1]


class AnnotationPresenceRule(Rule):
    """
    Requires a nullability annotation on every declaration site.

    visit() decides for one node; walk() drives visit() over a whole tree in
    source order and hands each finding to a sink as soon as it is made.
    The rule keeps no per-file state, so one instance can be shared.
    """

    id = "nullability-annotation"
    name = "Missing nullability annotation"

    def __init__(
        self,
        matcher: Optional[AnnotationMatcher] = None,
        severity: str = "warning",
    ) -> None:
        self.matcher = matcher if matcher is not None else AnnotationMatcher()
        self.severity = severity

    def visit(
        self,
        node: SyntaxNode,
        path: Optional[Path] = None,
        lines: Optional[Sequence[str]] = None,
    ) -> list[Finding]:
        """Return the findings for a single node (empty for non-declarations)."""
        kind = node.kind
        if kind is NodeKind.VARIABLE_DECLARATION:
            return self._check_variable(node, path, lines)
        if kind is NodeKind.PARAMETER:
            return self._check_parameter(node, path, lines)
        if kind is NodeKind.METHOD_DECLARATION:
            return self._check_method(node, path, lines)
        if kind is NodeKind.CONSTRUCTOR_DECLARATION:
            return self._check_constructor(node, path, lines)
        return []

    def walk(
        self,
        root: SyntaxNode,
        sink: FindingSink,
        path: Optional[Path] = None,
        lines: Optional[Sequence[str]] = None,
    ) -> None:
        """Visit root and its descendants depth-first, emitting findings to sink."""
        stack = [root]
        while stack:
            node = stack.pop()
            for finding in self.visit(node, path, lines):
                sink(finding)
            children = node.children
            if node.kind is NodeKind.CONSTRUCTOR_DECLARATION:
                # Constructor parameters were already reported by the constructor itself.
                children = tuple(c for c in children if c.kind is not NodeKind.PARAMETER_LIST)
            stack.extend(reversed(children))

    def run(self, context: FileContext, config: Optional[Config] = None) -> list[Finding]:
        findings: list[Finding] = []
        self.walk(context.syntax_root, findings.append, path=context.path, lines=context.lines)
        logger.debug("%s: %d finding(s) in %s", self.id, len(findings), context.path)
        return findings

    def _check_variable(self, node: SyntaxNode, path: Optional[Path], lines: Optional[Sequence[str]]) -> list[Finding]:
        if self.matcher.has_nullability_annotation(node.find_first(NodeKind.MODIFIER_LIST)):
            return []
        return [self._finding(node, VARIABLE_MESSAGE, path, lines)]

    def _check_parameter(self, node: SyntaxNode, path: Optional[Path], lines: Optional[Sequence[str]]) -> list[Finding]:
        if self.matcher.has_nullability_annotation(node.find_first(NodeKind.MODIFIER_LIST)):
            return []
        return [self._finding(node, PARAMETER_MESSAGE, path, lines)]

    def _check_method(self, node: SyntaxNode, path: Optional[Path], lines: Optional[Sequence[str]]) -> list[Finding]:
        if self.matcher.has_nullability_annotation(node.find_first(NodeKind.MODIFIER_LIST)):
            return []
        return_type = node.find_first(NodeKind.TYPE_REFERENCE)
        # No return type at all is treated like void.
        if return_type is None or return_type.text == "void":
            return []
        return [self._finding(node, METHOD_MESSAGE, path, lines)]

    def _check_constructor(self, node: SyntaxNode, path: Optional[Path], lines: Optional[Sequence[str]]) -> list[Finding]:
        parameters = node.find_first(NodeKind.PARAMETER_LIST)
        if parameters is None:
            return []
        findings: list[Finding] = []
        for parameter in parameters.find_all(NodeKind.PARAMETER):
            findings.extend(self._check_parameter(parameter, path, lines))
        return findings

    def _finding(
        self,
        node: SyntaxNode,
        template: str,
        path: Optional[Path],
        lines: Optional[Sequence[str]],
    ) -> Finding:
        return Finding(
            rule_id=self.id,
            message=template.format(name=_declared_name(node)),
            location=Location(
                path=path,
                line=node.line,
                column=node.column,
                snippet=_source_line(lines, node.line),
            ),
            severity=self.severity,
        )
