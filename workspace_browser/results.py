"""
Query results.

A workspace query produces exactly one of:
1. FileResult - the path named a file; carries its bytes
2. DirectoryResult - the path named a directory; carries a listing
3. QueryError - something went wrong; carries the kind and context

Results are plain frozen dataclasses so the engine, the HTTP layer and
tests can compare and pattern-match on them.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from workspace_browser.errors import QueryErrorKind, WorkspaceQueryError


@dataclass(frozen=True)
class FileResult:
    """
    Contents of a file as of the resolved revision.

    Attributes:
        path: Sanitized path of the file, relative to the tree root
        contents: Raw file bytes (not necessarily valid text)
        commit_id: The commit the file was read from
    """
    path: str
    contents: bytes
    commit_id: Optional[str] = None


@dataclass(frozen=True)
class DirectoryResult:
    """
    Recursive listing of a directory as of the resolved revision.

    Attributes:
        path: Sanitized path of the directory; "" for the tree root
        entries: Every descendant, relative to the tree root, depth-first
        commit_id: The commit the listing was taken from
    """
    path: str
    entries: list[str] = field(default_factory=list)
    commit_id: Optional[str] = None


@dataclass(frozen=True)
class QueryError:
    """
    A failed query.

    Attributes:
        kind: Which failure this is
        message: Human readable description
        workspace: Sanitized workspace name, when known
        revision: Requested revision, when known
        path: Sanitized path, when known
    """
    kind: QueryErrorKind
    message: str
    workspace: Optional[str] = None
    revision: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def from_exception(cls, error: WorkspaceQueryError) -> "QueryError":
        return cls(
            kind=error.kind,
            message=error.message,
            workspace=error.workspace,
            revision=error.revision,
            path=error.path,
        )


QueryResult = Union[FileResult, DirectoryResult]
QueryOutcome = Union[FileResult, DirectoryResult, QueryError]
