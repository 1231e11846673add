"""
RepositoryHandle - Read-only access to one workspace's git repository.

Workspaces live under a configured root, one repository per directory:

    <workspaces_root>/
        docs/        <- workspace "docs" (bare or with a working tree)
        handbook/

The handle wraps a dulwich ``Repo`` and exposes only the read operations
the query engine needs. Nothing here writes to the repository, so any
number of handles may be open on the same workspace at once.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

from dulwich.errors import NotGitRepository
from dulwich.objects import ShaFile
from dulwich.repo import Repo

from workspace_browser.errors import WorkspaceNotFoundError
from workspace_browser.services.sanitizer import WorkspaceName, WorkspaceSecurityError

logger = logging.getLogger(__name__)


class RepositoryHandle:
    """
    An open, exclusively owned reference to a workspace repository.

    Usage:
        with open_repository(root, name) as repo:
            snapshot = RevisionResolver(repo).resolve("main")

    Attributes:
        name: The workspace this repository belongs to
        path: Absolute path of the repository directory
    """

    def __init__(self, name: WorkspaceName, path: Path, repo: Repo):
        self.name = name
        self.path = path
        self._repo = repo

    def ref_names(self) -> set[bytes]:
        """All reference names, HEAD included when present."""
        return set(self._repo.refs.allkeys())

    def read_ref(self, name: bytes) -> Optional[bytes]:
        """
        Follow a reference (and any symbolic references) to an object id.

        Returns:
            Hex object id, or None when the reference is unborn or missing
        """
        try:
            return self._repo.refs[name]
        except KeyError:
            return None

    def is_empty(self) -> bool:
        """True when no reference resolves, i.e. nothing was ever committed."""
        return all(self.read_ref(name) is None for name in self.ref_names())

    def get_object(self, object_id: bytes) -> ShaFile:
        """
        Load an object from the object store.

        Raises:
            KeyError: If the object is not present
        """
        return self._repo.object_store[object_id]

    def iter_object_ids(self) -> Iterator[bytes]:
        """Every object id in the store, loose and packed."""
        return iter(self._repo.object_store)

    def close(self) -> None:
        """Release pack files and other open resources."""
        self._repo.close()

    def __enter__(self) -> "RepositoryHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<RepositoryHandle name='{self.name}' path='{self.path}'>"


def open_repository(workspaces_root: Path, name: WorkspaceName) -> RepositoryHandle:
    """
    Open the repository for a workspace.

    Args:
        workspaces_root: Directory holding one repository per workspace
        name: Sanitized workspace name

    Returns:
        An open RepositoryHandle; close it (or use ``with``) when done

    Raises:
        WorkspaceNotFoundError: If there is no repository for the name
    """
    try:
        path = name.join(workspaces_root)
    except WorkspaceSecurityError:
        raise WorkspaceNotFoundError(
            f"workspace '{name}' does not exist",
            workspace=str(name),
        )

    try:
        if not path.is_dir():
            raise WorkspaceNotFoundError(
                f"workspace '{name}' does not exist",
                workspace=str(name),
            )
        repo = Repo(str(path))
    except NotGitRepository:
        raise WorkspaceNotFoundError(
            f"workspace '{name}' is not a repository",
            workspace=str(name),
        )
    except OSError as e:
        logger.warning("Cannot open workspace %s at %s: %s", name, path, e)
        raise WorkspaceNotFoundError(
            f"workspace '{name}' cannot be opened",
            workspace=str(name),
        )

    logger.debug("Opened workspace %s at %s", name, path)
    return RepositoryHandle(name, path, repo)
