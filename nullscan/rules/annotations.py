# Nullability annotation names and the matcher that looks for them in a modifier list.

from __future__ import annotations

from typing import Iterable, Optional

from nullscan.syntax import NodeKind, SyntaxNode

# Simple names first, then fully qualified forms. Names are compared exactly;
# imports are never resolved, so a bare `Nonnull` counts whatever package it
# comes from.
DEFAULT_NULLABILITY_ANNOTATIONS: tuple[str, ...] = (
    "NonNull",
    "Nullable",
    "Nonnull",
    "org.checkerframework.checker.nullness.qual.NonNull",
    "org.checkerframework.checker.nullness.qual.Nullable",
    "javax.annotation.Nonnull",
    "javax.annotation.Nullable",
    "lombok.NonNull",
)


class AnnotationMatcher:
    """
    Decides whether a modifier list carries a recognized nullability annotation.

    The annotation set is fixed at construction. An empty set is allowed and
    simply means nothing ever matches.
    """

    def __init__(self, annotations: Iterable[str] = DEFAULT_NULLABILITY_ANNOTATIONS) -> None:
        # dict.fromkeys keeps first-seen order while dropping duplicates
        self._annotations: tuple[str, ...] = tuple(dict.fromkeys(annotations))
        self._lookup = frozenset(self._annotations)
        self._qualified = tuple(name for name in self._annotations if "." in name)

    @property
    def annotations(self) -> tuple[str, ...]:
        return self._annotations

    def matches(self, name: str) -> bool:
        """True if name is one of the configured annotation names."""
        if name in self._lookup:
            return True
        return self._is_qualified_match(name)

    def _is_qualified_match(self, name: str) -> bool:
        if "." not in name:
            return False
        return any(qualified == name for qualified in self._qualified)

    def has_nullability_annotation(self, modifiers: Optional[SyntaxNode]) -> bool:
        """
        Scan the direct children of a MODIFIER_LIST for a matching annotation.

        No modifier list at all means no annotations, so the answer is False.
        """
        if modifiers is None:
            return False
        for child in modifiers.children:
            if child.kind is not NodeKind.ANNOTATION_USE or not child.text:
                continue
            if self.matches(child.text):
                return True
        return False

    def __repr__(self) -> str:
        return f"AnnotationMatcher({list(self._annotations)!r})"
