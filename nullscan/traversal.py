"""
File system traversal: walk directories and collect Java source files.

Typical usage:
    from pathlib import Path
    from nullscan.traversal import find_java_files

    java_files = find_java_files(Path("./my_project"))

    # Custom ignore set
    sources = find_java_files(Path("./my_project"), ignore_dirs={"target", "legacy"})
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)

# Default directories to ignore during traversal. The set is matched at any
# depth, so it only holds names that cannot be Java package segments
# (a package such as com.acme.build must still be scanned).
DEFAULT_IGNORE_DIRS: Set[str] = {
    # Maven / Gradle build output and tool state
    "target",
    ".gradle",
    ".mvn",
    "generated-sources",

    # Version control
    ".git",
    ".svn",
    ".hg",

    # IDE and editor directories
    ".idea",
    ".vscode",
    ".settings",
    ".cache",
}


def is_java_file(path: Path) -> bool:
    """
    Check if a file is a Java source file (.java extension).

    Examples:
        >>> is_java_file(Path("Main.java"))
        True
        >>> is_java_file(Path("Main.class"))
        False
    """
    return path.suffix.lower() == ".java"


def should_ignore_directory(dir_path: Path, ignore_dirs: Set[str]) -> bool:
    """
    Check if a directory should be ignored during traversal.

    Only the directory name is compared (case-sensitive), not the full path.

    Examples:
        >>> should_ignore_directory(Path("target"), {"target", "build"})
        True
        >>> should_ignore_directory(Path("src"), {"target", "build"})
        False
    """
    return dir_path.name in ignore_dirs


def find_source_files(
    root: Path,
    ignore_dirs: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> list[Path]:
    """
    Recursively find all Java source files in a directory tree.

    Args:
        root: Root directory to start traversal from.
        ignore_dirs: Set of directory names to skip. If None, uses DEFAULT_IGNORE_DIRS.
        follow_symlinks: If True, follow symbolic links during traversal.
                         If False (default), symlinks are skipped.
        filter_fn: Optional additional filter; only files for which
                   filter_fn(path) returns True are included.

    Returns:
        Sorted list of matching .java files.

    Raises:
        FileNotFoundError: If the root directory does not exist.
        NotADirectoryError: If root is not a directory.

    Notes:
        - Permission errors on subdirectories are logged but do not stop traversal.
        - The root path is resolved to an absolute path before traversal.
    """
    if ignore_dirs is None:
        ignore_dirs = DEFAULT_IGNORE_DIRS

    root = root.resolve()

    if not root.exists():
        logger.error("Root directory does not exist: %s", root)
        raise FileNotFoundError(f"Root directory does not exist: {root}")

    if not root.is_dir():
        logger.error("Root path is not a directory: %s", root)
        raise NotADirectoryError(f"Root path is not a directory: {root}")

    logger.info("Starting traversal from: %s", root)
    logger.debug(
        "Traversal config: follow_symlinks=%s, ignore_dirs=%s",
        follow_symlinks,
        sorted(ignore_dirs),
    )

    collected_files: list[Path] = []

    def _walk_directory(current_dir: Path) -> None:
        try:
            for entry in current_dir.iterdir():
                if entry.is_symlink() and not follow_symlinks:
                    logger.debug("Skipping symlink: %s", entry)
                    continue

                if entry.is_dir():
                    if should_ignore_directory(entry, ignore_dirs):
                        logger.debug("Ignoring directory: %s", entry)
                        continue
                    _walk_directory(entry)

                elif entry.is_file() and is_java_file(entry):
                    if filter_fn is not None and not filter_fn(entry):
                        logger.debug("Filtered out by custom filter: %s", entry)
                        continue
                    logger.debug("Found source file: %s", entry)
                    collected_files.append(entry)

        except PermissionError as e:
            logger.warning("Permission denied accessing directory %s: %s", current_dir, e)
        except OSError as e:
            logger.warning("Error accessing directory %s: %s", current_dir, e)

    _walk_directory(root)

    collected_files.sort()

    logger.info(
        "Traversal complete: found %d source file(s) in %s",
        len(collected_files),
        root,
    )

    return collected_files


def find_java_files(
    root: Path,
    ignore_dirs: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
) -> list[Path]:
    """
    Recursively find all .java files in a directory tree, skipping
    package-info.java and module-info.java (they declare no variables
    or methods).
    """
    return find_source_files(
        root=root,
        ignore_dirs=ignore_dirs,
        follow_symlinks=follow_symlinks,
        filter_fn=lambda p: p.name not in ("package-info.java", "module-info.java"),
    )
