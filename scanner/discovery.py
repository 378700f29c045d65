"""File discovery utilities for collecting Lua sources to lint."""

from pathlib import Path
from typing import Iterator, Optional, Set


DEFAULT_EXTENSIONS = {".lua"}
DEFAULT_EXCLUDE_DIRS = {
    ".git", ".hg", ".svn",
    "node_modules", ".idea", ".vscode",
}


def iter_files(
    target: Path,
    include_ext: Optional[Set[str]] = None,
    exclude_dirs: Optional[Set[str]] = None,
    max_depth: Optional[int] = None,
) -> Iterator[Path]:
    """
    Iterate over the Lua files named by a command-line target.

    Args:
        target: A file or a directory. A file is yielded as-is, whatever
                its extension; a directory is walked recursively.
        include_ext: Set of file extensions to include.
                    If None, uses DEFAULT_EXTENSIONS.
        exclude_dirs: Set of directory names to skip.
                     If None, uses DEFAULT_EXCLUDE_DIRS.
        max_depth: Maximum depth to descend. None means unlimited.

    Yields:
        Path objects in sorted order within each directory.
    """
    if include_ext is None:
        include_ext = DEFAULT_EXTENSIONS
    if exclude_dirs is None:
        exclude_dirs = DEFAULT_EXCLUDE_DIRS

    if not target.is_dir():
        yield target
        return

    def _walk(current: Path, depth: int) -> Iterator[Path]:
        if max_depth is not None and depth > max_depth:
            return

        try:
            entries = sorted(current.iterdir())
        except PermissionError:
            return

        for entry in entries:
            if entry.is_dir():
                if entry.name in exclude_dirs:
                    continue
                yield from _walk(entry, depth + 1)
            elif entry.is_file():
                if entry.suffix.lower() in include_ext:
                    yield entry

    yield from _walk(target, 0)
