# Tree-sitter setup for Java: build parsers and turn source bytes into parse trees.

import logging
from pathlib import Path
from typing import Optional, Union

import tree_sitter
from tree_sitter import Language
from tree_sitter import Node as TSNode
from tree_sitter_java import language as _java_language_capsule

logger = logging.getLogger(__name__)

_JAVA_LANGUAGE = Language(_java_language_capsule())


def get_java_language() -> Language:
    """Return the Tree-sitter Language object for Java."""
    return _JAVA_LANGUAGE


def create_parser() -> tree_sitter.Parser:
    """Create a Tree-sitter Parser bound to the Java grammar."""
    return tree_sitter.Parser(_JAVA_LANGUAGE)


def count_error_nodes(node: TSNode) -> int:
    """Count ERROR and MISSING nodes under node (inclusive)."""
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_error or current.is_missing:
            count += 1
        if current.has_error:
            stack.extend(current.children)
    return count


def parse_bytes(
    source: Union[bytes, str],
    parser: Optional[tree_sitter.Parser] = None,
) -> tree_sitter.Tree:
    """
    Parse Java source into a tree-sitter tree.

    Args:
        source: Java source code; str is encoded as UTF-8.
        parser: Optional parser instance; if None, a new one is created.

    Returns:
        The parse tree. Tree-sitter always produces one; syntax errors show
        up as ERROR/MISSING nodes and tree.root_node.has_error.
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    if parser is None:
        parser = create_parser()
    tree = parser.parse(source)
    root = tree.root_node
    if root.has_error:
        logger.warning(
            "Parse completed with %d error node(s): root=%s",
            count_error_nodes(root),
            root.type,
        )
    else:
        logger.debug("Parse succeeded: root=%s, %d byte(s)", root.type, len(source))
    return tree


def parse_file(path: Path, parser: Optional[tree_sitter.Parser] = None) -> Optional[tree_sitter.Tree]:
    """
    Parse a .java file. Returns None (and logs) if the file cannot be read.
    """
    try:
        source = path.read_bytes()
    except OSError as e:
        logger.error("Failed to read file %s: %s", path, e)
        return None
    tree = parse_bytes(source, parser=parser)
    logger.info("Parsed file %s: success=%s", path, not tree.root_node.has_error)
    return tree
