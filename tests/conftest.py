"""
Configuration and fixtures for pytest.

Workspaces are built object by object with dulwich so tests control
branch names, tags, file modes and commit ids exactly.
"""

import stat
from pathlib import Path
from typing import Union

import pytest
from dulwich.objects import Blob, Commit, Tag, Tree
from dulwich.repo import Repo

from workspace_browser.engine import WorkspaceQueryEngine

REGULAR = 0o100644
EXECUTABLE = 0o100755
SYMLINK = 0o120000
GITLINK = 0o160000

AUTHOR = b"Test <test@example.com>"

FileSpec = Union[bytes, tuple[int, bytes]]


class WorkspaceBuilder:
    """
    Writes trees, commits, branches and tags into a bare repository.

    Usage:
        ws = WorkspaceBuilder.create(root / "docs")
        c1 = ws.commit({"hello.txt": b"hi", "guide/intro.md": b"# Intro"})
        ws.branch("main", c1)
    """

    def __init__(self, repo: Repo):
        self.repo = repo
        self._clock = 1_700_000_000

    @classmethod
    def create(cls, path: Path, head: str = "main") -> "WorkspaceBuilder":
        repo = Repo.init_bare(str(path), mkdir=True)
        repo.refs.set_symbolic_ref(b"HEAD", f"refs/heads/{head}".encode())
        return cls(repo)

    @property
    def path(self) -> Path:
        return Path(self.repo.path)

    def tree(self, files: dict[str, FileSpec]) -> bytes:
        children: dict[str, Union[FileSpec, dict]] = {}
        for path, spec in files.items():
            head, _, rest = path.partition("/")
            if rest:
                children.setdefault(head, {})[rest] = spec
            else:
                children[head] = spec

        tree = Tree()
        for name, spec in children.items():
            if isinstance(spec, dict):
                tree.add(name.encode(), stat.S_IFDIR, self.tree(spec))
                continue

            mode, data = spec if isinstance(spec, tuple) else (REGULAR, spec)
            if mode == GITLINK:
                tree.add(name.encode(), mode, data)
                continue
            blob = Blob.from_string(data)
            self.repo.object_store.add_object(blob)
            tree.add(name.encode(), mode, blob.id)

        self.repo.object_store.add_object(tree)
        return tree.id

    def commit(self, files: dict[str, FileSpec], message: str = "commit", parents=()) -> bytes:
        return self.commit_tree(self.tree(files), message, parents)

    def commit_tree(self, tree_id: bytes, message: str = "commit", parents=()) -> bytes:
        self._clock += 60

        commit = Commit()
        commit.tree = tree_id
        commit.parents = list(parents)
        commit.author = commit.committer = AUTHOR
        commit.author_time = commit.commit_time = self._clock
        commit.author_timezone = commit.commit_timezone = 0
        commit.encoding = b"UTF-8"
        commit.message = message.encode()

        self.repo.object_store.add_object(commit)
        return commit.id

    def branch(self, name: str, commit_id: bytes) -> None:
        self.repo.refs[f"refs/heads/{name}".encode()] = commit_id

    def tag(self, name: str, commit_id: bytes, annotated: bool = False) -> None:
        target = commit_id
        if annotated:
            tag = Tag()
            tag.tagger = AUTHOR
            tag.message = f"Release {name}".encode()
            tag.name = name.encode()
            tag.object = (Commit, commit_id)
            tag.tag_time = self._clock
            tag.tag_timezone = 0
            self.repo.object_store.add_object(tag)
            target = tag.id
        self.repo.refs[f"refs/tags/{name}".encode()] = target

    def set_ref(self, name: str, object_id: bytes) -> None:
        self.repo.refs[name.encode()] = object_id


DOCS_V1 = {
    "hello.txt": b"hi",
    "guide/intro.md": b"# Intro\n",
}

DOCS_V2 = {
    "hello.txt": b"hello again",
    "guide/intro.md": b"# Intro\n",
    "guide/api/index.md": b"# API\n",
    "bin/run.sh": (EXECUTABLE, b"#!/bin/sh\necho run\n"),
    "logo.png": b"\x89PNG\r\n\x1a\n\x00\xff\xfe",
}


@pytest.fixture
def workspaces_root(tmp_path: Path) -> Path:
    root = tmp_path / "workspaces"
    root.mkdir()
    return root


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def docs(workspaces_root: Path) -> WorkspaceBuilder:
    """
    Workspace "docs": main has two commits, v1.0 tags the first one.
    """
    ws = WorkspaceBuilder.create(workspaces_root / "docs")
    first = ws.commit(DOCS_V1, "first")
    second = ws.commit(DOCS_V2, "second", parents=[first])
    ws.branch("main", second)
    ws.tag("v1.0", first)
    yield ws
    ws.repo.close()


@pytest.fixture
def empty_workspace(workspaces_root: Path) -> WorkspaceBuilder:
    ws = WorkspaceBuilder.create(workspaces_root / "empty")
    yield ws
    ws.repo.close()


@pytest.fixture
def engine(workspaces_root: Path, scratch_root: Path) -> WorkspaceQueryEngine:
    return WorkspaceQueryEngine(workspaces_root, scratch_root)


@pytest.fixture
def make_workspace(workspaces_root: Path):
    """Factory for extra workspaces; repositories are closed afterwards."""
    created = []

    def _make(name: str, head: str = "main") -> WorkspaceBuilder:
        ws = WorkspaceBuilder.create(workspaces_root / name, head=head)
        created.append(ws)
        return ws

    yield _make
    for ws in created:
        ws.repo.close()
