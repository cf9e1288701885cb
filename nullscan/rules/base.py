# Rule interface (abstract base class): defines the contract all rules must implement.
# Concrete rules subclass Rule and implement run(); nullability.AnnotationPresenceRule is the
# rule shipped today.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from nullscan.config import Config
    from nullscan.context import FileContext
    from nullscan.findings.models import Finding


class Rule(ABC):
    """
    Abstract base class for all static analysis rules.

    Subclasses must define:
    - id: str, unique rule identifier (e.g. "nullability-annotation")
    - name: str, human-readable rule name
    - run(context, config) -> list[Finding], analyze one file and return findings

    The scanner calls run() once per file; context holds path, source bytes,
    the tree-sitter tree and the lowered declaration tree. Rules must not keep
    per-file state on self so that one instance can serve every file.
    """

    id: str
    name: str

    @abstractmethod
    def run(self, context: FileContext, config: Optional[Config]) -> list[Finding]:
        """
        Analyze one file and return any findings.

        Args:
            context: Per-file state. Use context.syntax_root to walk the
                     declaration tree and context.source for snippets.
            config: Scanner config, or None when a rule is run directly.

        Returns:
            List of Finding objects in source order; empty if no issues.
        """
        ...
