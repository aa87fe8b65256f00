"""
File system traversal: walk directories and collect JavaScript source files.

Typical usage:
    from pathlib import Path
    from lintbridge.traversal import find_js_files

    files = find_js_files(Path("./my_project"))

    # Custom ignore patterns
    files = find_js_files(Path("./my_project"), ignore_dirs={"dist", "vendor"})
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)

JS_EXTENSIONS = frozenset({".js", ".mjs", ".cjs", ".jsx"})

# Default directories to ignore during traversal
DEFAULT_IGNORE_DIRS: Set[str] = {
    # Build output
    "build",
    "dist",
    "out",
    "coverage",
    # Dependencies
    "node_modules",
    "bower_components",
    "vendor",
    "third_party",
    # Version control
    ".git",
    ".svn",
    ".hg",
    # Editors and caches
    ".vscode",
    ".idea",
    ".cache",
    ".next",
    "__pycache__",
}


def is_js_file(path: Path) -> bool:
    """
    Check if a file is a JavaScript source file.

    Examples:
        >>> is_js_file(Path("main.js"))
        True
        >>> is_js_file(Path("lib.MJS"))
        True
        >>> is_js_file(Path("types.ts"))
        False
    """
    return path.suffix.lower() in JS_EXTENSIONS


def should_ignore_directory(dir_path: Path, ignore_dirs: Set[str]) -> bool:
    """True if the directory name (not the full path) is in ignore_dirs."""
    return dir_path.name in ignore_dirs


def find_js_files(
    root: Path,
    ignore_dirs: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> list[Path]:
    """
    Recursively find all JavaScript files in a directory tree.

    Args:
        root: Root directory to start traversal from.
        ignore_dirs: Directory names to skip. If None, uses DEFAULT_IGNORE_DIRS.
        follow_symlinks: If True, follow symbolic links during traversal.
        filter_fn: Optional extra predicate; only files for which it returns
                   True are collected.

    Returns:
        Sorted list of matching files.

    Raises:
        FileNotFoundError: If root does not exist.
        NotADirectoryError: If root is not a directory.

    Permission errors on subdirectories are logged and skipped.
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
    collected: list[Path] = []

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
                elif entry.is_file() and is_js_file(entry):
                    if filter_fn is not None and not filter_fn(entry):
                        logger.debug("Filtered out by custom filter: %s", entry)
                        continue
                    collected.append(entry)
        except PermissionError as e:
            logger.warning("Permission denied accessing directory %s: %s", current_dir, e)
        except OSError as e:
            logger.warning("Error accessing directory %s: %s", current_dir, e)

    _walk_directory(root)
    collected.sort()
    logger.info("Traversal complete: found %d file(s) in %s", len(collected), root)
    return collected
