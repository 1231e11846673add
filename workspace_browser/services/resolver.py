"""
RevisionResolver - Maps a revision string to an immutable snapshot.

Resolution order (first match wins):
1. Short reference name - branch, tag, remote branch or HEAD
2. Prefix of a commit id - "3f2a9c1" or the full 40 characters
3. Otherwise RevisionNotFoundError

Names are tried first, so a branch called "cafe" shadows every commit
whose id starts with "cafe". That is a tie-break rule, not an error.
A repository without any commit is reported as EmptyWorkspaceError
instead, because the fix (push something) is different.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from dulwich.objects import Commit, Tag

from workspace_browser.errors import EmptyWorkspaceError, RevisionNotFoundError
from workspace_browser.services.repository import RepositoryHandle

logger = logging.getLogger(__name__)

# Same lookup rules git uses to expand a short name
_REF_RULES = (
    "{}",
    "refs/{}",
    "refs/tags/{}",
    "refs/heads/{}",
    "refs/remotes/{}",
    "refs/remotes/{}/HEAD",
)

_COMMIT_PREFIX = re.compile(r"^[0-9a-fA-F]{4,40}$")

# Annotated tags may point at other tags
_MAX_PEEL_DEPTH = 16


@dataclass(frozen=True)
class ResolvedSnapshot:
    """
    A commit selected for a query, and the tree it roots.

    Objects are content-addressed, so a snapshot never changes even if
    the branch it was resolved from moves on.
    """
    commit_id: str
    tree_id: str
    revision: str


class RevisionResolver:
    """
    Resolves revision strings against one repository.

    Usage:
        resolver = RevisionResolver(repo)
        snapshot = resolver.resolve("main")
        snapshot = resolver.resolve("3f2a9c1")
    """

    def __init__(self, repo: RepositoryHandle):
        self.repo = repo

    def resolve(self, revision: str) -> ResolvedSnapshot:
        """
        Resolve a revision to a snapshot.

        Raises:
            EmptyWorkspaceError: If the repository has no commits yet
            RevisionNotFoundError: If nothing matches, or a prefix is ambiguous
        """
        workspace = str(self.repo.name)

        if self.repo.is_empty():
            raise EmptyWorkspaceError(
                f"workspace '{workspace}' has no commits yet",
                workspace=workspace,
                revision=revision,
            )

        commit = self._from_reference(revision) or self._from_prefix(revision)
        if commit is None:
            raise RevisionNotFoundError(
                f"version '{revision}' does not exist in workspace '{workspace}'",
                workspace=workspace,
                revision=revision,
            )

        snapshot = ResolvedSnapshot(
            commit_id=commit.id.decode("ascii"),
            tree_id=commit.tree.decode("ascii"),
            revision=revision,
        )
        logger.info("Version: %r -> Commit: %s", revision, snapshot.commit_id)
        return snapshot

    def _from_reference(self, revision: str) -> Optional[Commit]:
        if not revision:
            return None

        existing = self.repo.ref_names()
        for rule in _REF_RULES:
            name = rule.format(revision).encode("utf-8")
            if name not in existing:
                continue

            # The first existing name decides, even if it cannot be peeled
            object_id = self.repo.read_ref(name)
            commit = self._peel(object_id) if object_id else None
            if commit is None:
                logger.warning(
                    "Reference %s in workspace %s does not lead to a commit",
                    name.decode("utf-8", "replace"),
                    self.repo.name,
                )
            return commit

        return None

    def _from_prefix(self, revision: str) -> Optional[Commit]:
        if not _COMMIT_PREFIX.match(revision):
            return None

        prefix = revision.lower().encode("ascii")
        # Objects can be both loose and packed
        matches = {}
        for object_id in self.repo.iter_object_ids():
            if not object_id.startswith(prefix):
                continue
            obj = self._load(object_id)
            if isinstance(obj, Commit):
                matches[obj.id] = obj

        if len(matches) > 1:
            workspace = str(self.repo.name)
            raise RevisionNotFoundError(
                f"version '{revision}' is ambiguous in workspace '{workspace}' "
                f"({len(matches)} commits match)",
                workspace=workspace,
                revision=revision,
            )

        return next(iter(matches.values()), None)

    def _peel(self, object_id: bytes) -> Optional[Commit]:
        """Follow annotated tags down to a commit."""
        obj = self._load(object_id)
        for _ in range(_MAX_PEEL_DEPTH):
            if not isinstance(obj, Tag):
                break
            _, target_id = obj.object
            obj = self._load(target_id)

        return obj if isinstance(obj, Commit) else None

    def _load(self, object_id: bytes):
        try:
            return self.repo.get_object(object_id)
        except KeyError:
            return None
