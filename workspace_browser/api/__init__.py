"""
API package - FastAPI routes and Pydantic schemas.
"""

from workspace_browser.api.routes import router
from workspace_browser.api.schemas import (
    DirectoryResponse,
    ErrorDetail,
    ErrorResponse,
    FileResponse,
    HealthResponse,
)

__all__ = [
    "router",
    "DirectoryResponse",
    "ErrorDetail",
    "ErrorResponse",
    "FileResponse",
    "HealthResponse",
]
