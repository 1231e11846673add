"""
Engine package - Workspace query orchestration.

The WorkspaceQueryEngine ties together the sanitizer, resolver,
checkout and classifier services to answer one query at a time.
"""

from workspace_browser.engine.engine import INTERNAL_ERROR_MESSAGE, WorkspaceQueryEngine

__all__ = [
    "INTERNAL_ERROR_MESSAGE",
    "WorkspaceQueryEngine",
]
