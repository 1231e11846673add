"""
ResultClassifier - Turns a checked-out path into a file or directory result.

Listings are deterministic: depth-first, entries sorted by name within
each directory, every path relative to the checkout root. Listing
"guide" in a checkout holding guide/intro.md and guide/api/index.md
yields:

    ["guide/api", "guide/api/index.md", "guide/intro.md"]

File contents are returned as bytes. Deciding whether they are text is
left to whoever renders the result.
"""

import errno
import os
from pathlib import Path

from workspace_browser.errors import PathNotFoundError, StorageError
from workspace_browser.results import DirectoryResult, FileResult, QueryResult
from workspace_browser.services.sanitizer import WorkspacePath, WorkspaceSecurityError

# Lookup failures that only mean "no such path in this checkout"
_MISSING_ERRNOS = {errno.ENOENT, errno.ENOTDIR, errno.ENAMETOOLONG}


def _display_name(path: str) -> str:
    """Tree entries may not be UTF-8; escape those bytes instead of failing."""
    return os.fsencode(path).decode("utf-8", "backslashreplace")


def list_tree(checkout_root: Path, directory: Path) -> list[str]:
    """Recursively list ``directory`` as paths relative to ``checkout_root``."""
    entries = []
    with os.scandir(directory) as it:
        children = sorted(it, key=lambda entry: entry.name)

    for child in children:
        entries.append(_display_name(Path(child.path).relative_to(checkout_root).as_posix()))
        if child.is_dir(follow_symlinks=False):
            entries.extend(list_tree(checkout_root, Path(child.path)))

    return entries


class ResultClassifier:
    """
    Inspects a path inside a checkout.

    Usage:
        classifier = ResultClassifier(workdir)
        result = classifier.classify(sanitize_path("guide"))
    """

    def __init__(self, checkout_root: Path):
        self.checkout_root = checkout_root.resolve()

    def classify(self, path: WorkspacePath) -> QueryResult:
        """
        Read a file or list a directory.

        Returns:
            FileResult for regular files, DirectoryResult for directories

        Raises:
            PathNotFoundError: If nothing exists at the path
            StorageError: If the checkout cannot be read
        """
        try:
            location = path.join(self.checkout_root)
        except WorkspaceSecurityError:
            raise PathNotFoundError(f"path '{path}' does not exist")

        try:
            is_file = location.is_file()
            is_dir = not is_file and location.is_dir()
        except OSError as e:
            if e.errno in _MISSING_ERRNOS:
                raise PathNotFoundError(f"path '{path}' does not exist")
            raise StorageError(f"Cannot inspect '{path}' in checkout: {e}")

        if not (is_file or is_dir):
            raise PathNotFoundError(f"path '{path}' does not exist")

        try:
            if is_file:
                return FileResult(
                    path=path.as_posix(),
                    contents=location.read_bytes(),
                )

            return DirectoryResult(
                path=path.as_posix(),
                entries=list_tree(self.checkout_root, location),
            )
        except OSError as e:
            raise StorageError(f"Cannot read '{path}' from checkout: {e}")
