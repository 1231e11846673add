"""
FastAPI routes for workspace queries.

These routes expose the WorkspaceQueryEngine via REST API.
All routes are prefixed with /v1/workspaces.
"""

from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool

from workspace_browser.api.schemas import (
    DirectoryResponse,
    ErrorDetail,
    ErrorResponse,
    FileResponse,
)
from workspace_browser.config import get_settings
from workspace_browser.engine import WorkspaceQueryEngine
from workspace_browser.errors import QueryErrorKind
from workspace_browser.results import FileResult, QueryError
from workspace_browser.services.sanitizer import sanitize_name


router = APIRouter(prefix="/v1/workspaces", tags=["Workspaces"])

# "latest" only exists at this boundary; the resolver sees HEAD,
# which is the tip of the repository's primary branch
LATEST_REVISION = "latest"
PRIMARY_BRANCH_TIP = "HEAD"

ERROR_STATUS = {
    QueryErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    QueryErrorKind.WORKSPACE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    QueryErrorKind.REVISION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    QueryErrorKind.PATH_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    QueryErrorKind.EMPTY_WORKSPACE: status.HTTP_409_CONFLICT,
    QueryErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_engine() -> WorkspaceQueryEngine:
    """Get the query engine for the configured roots."""
    return WorkspaceQueryEngine.from_settings(get_settings())


def to_engine_revision(revision: str) -> str:
    """Map the boundary-level "latest" alias onto the primary branch tip."""
    if revision.strip() == LATEST_REVISION:
        return PRIMARY_BRANCH_TIP
    return revision


def error_to_http(error: QueryError) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=ErrorDetail(
            error=error.kind.value,
            message=error.message,
            workspace=error.workspace,
            revision=error.revision,
            path=error.path,
        ).model_dump(),
    )


# ===================
# Query Workspace
# ===================

@router.get(
    "/{workspace_name}",
    response_model=Union[FileResponse, DirectoryResponse],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def query_workspace(
    workspace_name: str,
    revision: Optional[str] = Query(
        default=None,
        description="Branch, tag or commit id prefix (default: latest)",
    ),
    version: Optional[str] = Query(
        default=None,
        description="Alias of revision",
    ),
    path: str = Query(
        default="",
        description="Path inside the revision (default: the root)",
    ),
    engine: WorkspaceQueryEngine = Depends(get_engine),
):
    """
    Get a file or a directory listing of a workspace at a revision.

    Files come back with their contents; directories with every path
    below them. The checkout behind each request is private to it and
    removed before the response is sent.
    """
    requested = revision or version or LATEST_REVISION

    # Checkout is blocking I/O, keep it off the event loop
    result = await run_in_threadpool(
        engine.query, workspace_name, to_engine_revision(requested), path
    )

    if isinstance(result, QueryError):
        raise error_to_http(result)

    workspace = str(sanitize_name(workspace_name))
    if isinstance(result, FileResult):
        return FileResponse.from_result(workspace, requested, result)

    return DirectoryResponse.from_result(workspace, requested, result)
