"""
Pydantic schemas for API responses.

These schemas define the data contract for the REST API.
They handle serialization and documentation.
"""

import base64
from typing import Literal, Optional

from pydantic import BaseModel, Field

from workspace_browser.results import DirectoryResult, FileResult


# ===================
# Response Schemas
# ===================

class FileResponse(BaseModel):
    """A file as of the requested revision."""
    type: Literal["file"] = "file"
    workspace: str
    revision: str
    commit_id: Optional[str] = None
    path: str = Field(..., examples=["guide/intro.md"])
    encoding: Literal["utf-8", "base64"] = Field(
        ...,
        description="utf-8 for text files, base64 for anything else",
    )
    contents: str
    size: int = Field(..., description="Size of the file in bytes")

    @classmethod
    def from_result(cls, workspace: str, revision: str, result: FileResult) -> "FileResponse":
        try:
            contents = result.contents.decode("utf-8")
            encoding = "utf-8"
        except UnicodeDecodeError:
            contents = base64.b64encode(result.contents).decode("ascii")
            encoding = "base64"

        return cls(
            workspace=workspace,
            revision=revision,
            commit_id=result.commit_id,
            path=result.path,
            encoding=encoding,
            contents=contents,
            size=len(result.contents),
        )


class DirectoryResponse(BaseModel):
    """A recursive directory listing as of the requested revision."""
    type: Literal["directory"] = "directory"
    workspace: str
    revision: str
    commit_id: Optional[str] = None
    path: str = Field(..., description="Listed directory; empty for the root")
    entries: list[str] = Field(
        default=[],
        description="Descendant paths relative to the tree root, depth-first",
        examples=[["guide", "guide/intro.md", "README.md"]],
    )

    @classmethod
    def from_result(
        cls, workspace: str, revision: str, result: DirectoryResult
    ) -> "DirectoryResponse":
        return cls(
            workspace=workspace,
            revision=revision,
            commit_id=result.commit_id,
            path=result.path,
            entries=list(result.entries),
        )


class ErrorDetail(BaseModel):
    """Why a query failed, with the context it failed in."""
    error: str = Field(..., examples=["revision_not_found"])
    message: str
    workspace: Optional[str] = None
    revision: Optional[str] = None
    path: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response, as produced by HTTPException."""
    detail: ErrorDetail


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    workspaces_root: str
