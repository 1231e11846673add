"""
Sanitizer - Security boundary for untrusted workspace input.

Every query carries three untrusted strings: a workspace name, a
revision and a path inside that revision. This module turns them into
values that are safe to join onto a root directory:
- Workspace names can never reach outside the workspaces root
- Paths can never reach outside a checkout (../../etc/passwd)

Sanitizing never fails. Traversal segments are dropped instead of
rejected, so the worst a hostile path can do is name a file that does
not exist.

Usage:
    name = sanitize_name("../../etc")      # WorkspaceName("etc")
    path = sanitize_path("/guide/../intro") # WorkspacePath(("guide", "intro"))

    checkout_file = path.join(scratch_dir)
"""

import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path


class WorkspaceSecurityError(Exception):
    """Raised when a joined path would escape its root."""
    pass


# Both separators are split on, whatever the host platform
_SEPARATORS = re.compile(r"[\\/]+")
_DROPPED_SEGMENTS = {"", ".", ".."}


def _segments(raw: str) -> tuple[str, ...]:
    """Split on path separators and drop empty/current/parent segments."""
    return tuple(
        segment
        for segment in _SEPARATORS.split(raw)
        if segment not in _DROPPED_SEGMENTS
    )


def _confine(root: Path, *parts: str) -> Path:
    root = root.resolve()
    full_path = root.joinpath(*parts).resolve()

    try:
        full_path.relative_to(root)
    except ValueError:
        raise WorkspaceSecurityError(
            f"Path '{'/'.join(parts)}' escapes boundary: {root}"
        )

    return full_path


def find_malformed(raw: str) -> bool:
    """
    Check for NUL bytes and other control characters.

    Such input is never a legitimate workspace name, revision or path,
    so the engine rejects it up front instead of sanitizing it.
    """
    return any(unicodedata.category(char) == "Cc" for char in raw)


@dataclass(frozen=True)
class WorkspaceName:
    """
    A workspace name that is safe to join onto the workspaces root.

    Attributes:
        value: A single path segment, or "" when nothing usable was left
    """
    value: str

    def __bool__(self) -> bool:
        return bool(self.value)

    def __str__(self) -> str:
        return self.value

    def join(self, root: Path) -> Path:
        """
        Locate the workspace under ``root``.

        Raises:
            WorkspaceSecurityError: If the name is empty or the result escapes root
        """
        if not self.value:
            raise WorkspaceSecurityError("Empty workspace name")
        return _confine(root, self.value)


@dataclass(frozen=True)
class WorkspacePath:
    """
    A path relative to the root of a revision's tree.

    Attributes:
        segments: Ordered path segments; empty means the tree root
    """
    segments: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.segments

    def as_posix(self) -> str:
        """The path as a POSIX string; "" for the tree root."""
        return "/".join(self.segments)

    def __str__(self) -> str:
        return self.as_posix()

    def join(self, root: Path) -> Path:
        """
        Locate this path inside a checkout rooted at ``root``.

        Raises:
            WorkspaceSecurityError: If the result escapes root
        """
        return _confine(root, *self.segments)


def sanitize_name(raw: str) -> WorkspaceName:
    """
    Normalize an untrusted workspace name.

    Separator-delimited pieces that survive sanitizing are joined with
    "-" so the result is always a single directory name.

    Examples:
        sanitize_name("docs")          # "docs"
        sanitize_name("../../etc")     # "etc"
        sanitize_name("team/docs")     # "team-docs"
        sanitize_name("..")            # "" (never opens anything)
    """
    return WorkspaceName("-".join(_segments(raw.strip())))


def sanitize_path(raw: str) -> WorkspacePath:
    """
    Normalize an untrusted in-repository path.

    Examples:
        sanitize_path("guide/intro.md")   # ("guide", "intro.md")
        sanitize_path("../../secret")     # ("secret",)
        sanitize_path("/")                # () - the tree root
    """
    return WorkspacePath(_segments(raw))


def sanitize_revision(raw: str) -> str:
    """Revisions are only trimmed; the resolver decides what they mean."""
    return raw.strip()
