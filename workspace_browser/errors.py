"""
Error taxonomy for workspace queries.

Each expected failure of a query has its own exception class with a
fixed ``kind``. Services raise them; the query engine turns them into
``QueryError`` values so nothing escapes to the caller uncontrolled.
"""

import enum
from typing import Optional


class QueryErrorKind(str, enum.Enum):
    """
    Why a workspace query failed.

    The first five are expected and user-actionable. INTERNAL_ERROR is
    everything else (disk full, permission denied, corrupt objects).
    """
    BAD_REQUEST = "bad_request"
    WORKSPACE_NOT_FOUND = "workspace_not_found"
    EMPTY_WORKSPACE = "empty_workspace"
    REVISION_NOT_FOUND = "revision_not_found"
    PATH_NOT_FOUND = "path_not_found"
    INTERNAL_ERROR = "internal_error"


class WorkspaceQueryError(Exception):
    """Base exception for workspace query errors."""
    kind: QueryErrorKind = QueryErrorKind.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        workspace: Optional[str] = None,
        revision: Optional[str] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.workspace = workspace
        self.revision = revision
        self.path = path


class BadRequestError(WorkspaceQueryError):
    """Raised when input contains NUL bytes or control characters."""
    kind = QueryErrorKind.BAD_REQUEST


class WorkspaceNotFoundError(WorkspaceQueryError):
    """Raised when no repository exists for a workspace name."""
    kind = QueryErrorKind.WORKSPACE_NOT_FOUND


class EmptyWorkspaceError(WorkspaceQueryError):
    """Raised when the repository exists but has no commits yet."""
    kind = QueryErrorKind.EMPTY_WORKSPACE


class RevisionNotFoundError(WorkspaceQueryError):
    """Raised when a revision matches no reference and no unique commit."""
    kind = QueryErrorKind.REVISION_NOT_FOUND


class PathNotFoundError(WorkspaceQueryError):
    """Raised when the resolved tree does not contain the requested path."""
    kind = QueryErrorKind.PATH_NOT_FOUND


class StorageError(WorkspaceQueryError):
    """Raised when repository storage or the scratch filesystem fails."""
    kind = QueryErrorKind.INTERNAL_ERROR
