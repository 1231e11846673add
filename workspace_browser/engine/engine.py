"""
Workspace Query Engine - Answers (workspace, revision, path) queries.

This is the HEART of the system. For every query it:
1. Rejects malformed input and sanitizes the rest
2. Opens the workspace repository
3. Resolves the revision to a commit
4. Checks the commit out into a private scratch directory
5. Reads the file or lists the directory at the requested path
6. Removes the scratch directory again

Design Principles:
- Stateless: a query never mutates the engine, so one instance serves
  any number of concurrent queries
- Read-only: only the query's own scratch directory is written
- Errors are values: query() returns QueryError instead of raising
- Blocking: run it in a worker thread when serving async requests
"""

import dataclasses
import logging
from pathlib import Path

from workspace_browser.config import Settings
from workspace_browser.errors import (
    BadRequestError,
    QueryErrorKind,
    WorkspaceQueryError,
)
from workspace_browser.results import QueryError, QueryOutcome, QueryResult
from workspace_browser.services.checkout import CheckoutMaterializer, scratch_directory
from workspace_browser.services.classifier import ResultClassifier
from workspace_browser.services.repository import open_repository
from workspace_browser.services.resolver import RevisionResolver
from workspace_browser.services.sanitizer import (
    WorkspaceName,
    WorkspacePath,
    find_malformed,
    sanitize_name,
    sanitize_path,
    sanitize_revision,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Unexpected error while querying the workspace"


class WorkspaceQueryEngine:
    """
    Orchestrates sanitizing, resolution, checkout and classification.

    Usage:
        engine = WorkspaceQueryEngine(workspaces_root, scratch_root)

        result = engine.query("docs", "main", "guide/intro.md")
        if isinstance(result, FileResult):
            print(result.contents)
        elif isinstance(result, QueryError):
            print(result.kind, result.message)
    """

    def __init__(self, workspaces_root: Path, scratch_root: Path):
        """
        Initialize the engine.

        Args:
            workspaces_root: Directory holding one repository per workspace
            scratch_root: Directory under which checkouts are created
        """
        self.workspaces_root = Path(workspaces_root).resolve()
        self.scratch_root = Path(scratch_root).resolve()

    @classmethod
    def from_settings(cls, settings: Settings) -> "WorkspaceQueryEngine":
        return cls(settings.workspaces_path, settings.scratch_path)

    def query(self, raw_name: str, raw_revision: str, raw_path: str) -> QueryOutcome:
        """
        Look up a file or directory of a workspace at a revision.

        Args:
            raw_name: Untrusted workspace name
            raw_revision: Branch, tag or commit id prefix
            raw_path: Untrusted path inside the revision; "" for the root

        Returns:
            FileResult, DirectoryResult or QueryError - never raises
        """
        name, revision, path = WorkspaceName(""), "", WorkspacePath()

        try:
            raw = (raw_name, raw_revision, raw_path)
            if not all(isinstance(value, str) for value in raw):
                raise BadRequestError("Workspace name, revision and path must be strings")

            name = sanitize_name(raw_name)
            revision = sanitize_revision(raw_revision)
            path = sanitize_path(raw_path)

            if any(find_malformed(value) for value in raw):
                raise BadRequestError("Input contains control characters")

            return self._run(name, revision, path)

        except WorkspaceQueryError as e:
            if e.kind == QueryErrorKind.INTERNAL_ERROR:
                logger.error(
                    "Query %s@%s:%r failed: %s", name, revision, str(path), e.message
                )
                message = INTERNAL_ERROR_MESSAGE
            else:
                logger.info("Query %s@%s:%r -> %s", name, revision, str(path), e.kind.value)
                message = e.message

            return QueryError(
                kind=e.kind,
                message=message,
                workspace=e.workspace or str(name),
                revision=e.revision or revision,
                path=e.path or path.as_posix(),
            )

        except Exception:
            logger.exception("Query %s@%s:%r failed unexpectedly", name, revision, str(path))
            return QueryError(
                kind=QueryErrorKind.INTERNAL_ERROR,
                message=INTERNAL_ERROR_MESSAGE,
                workspace=str(name),
                revision=revision,
                path=path.as_posix(),
            )

    def _run(self, name: WorkspaceName, revision: str, path: WorkspacePath) -> QueryResult:
        with open_repository(self.workspaces_root, name) as repo:
            snapshot = RevisionResolver(repo).resolve(revision)

            with scratch_directory(self.scratch_root) as workdir:
                CheckoutMaterializer(repo).materialize(snapshot, workdir)

                logger.info(
                    "Query workspace=%s revision=%r commit=%s path=%r "
                    "workspace_mount=%s workdir=%s",
                    name,
                    revision,
                    snapshot.commit_id,
                    path.as_posix(),
                    repo.path,
                    workdir,
                )

                # Results are fully read before the scratch directory goes away
                result = ResultClassifier(workdir).classify(path)

        return dataclasses.replace(result, commit_id=snapshot.commit_id)
