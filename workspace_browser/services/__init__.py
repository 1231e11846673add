"""
Services package - The stages of a workspace query.

Contains the sanitizer, repository handle, revision resolver,
checkout materializer and result classifier.
"""

from workspace_browser.services.checkout import CheckoutMaterializer, scratch_directory
from workspace_browser.services.classifier import ResultClassifier
from workspace_browser.services.repository import RepositoryHandle, open_repository
from workspace_browser.services.resolver import ResolvedSnapshot, RevisionResolver
from workspace_browser.services.sanitizer import (
    WorkspaceName,
    WorkspacePath,
    WorkspaceSecurityError,
    sanitize_name,
    sanitize_path,
    sanitize_revision,
)

__all__ = [
    "CheckoutMaterializer",
    "scratch_directory",
    "ResultClassifier",
    "RepositoryHandle",
    "open_repository",
    "ResolvedSnapshot",
    "RevisionResolver",
    "WorkspaceName",
    "WorkspacePath",
    "WorkspaceSecurityError",
    "sanitize_name",
    "sanitize_path",
    "sanitize_revision",
]
