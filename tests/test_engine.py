"""
End-to-end queries against real repositories.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import WorkspaceBuilder
from workspace_browser.engine import INTERNAL_ERROR_MESSAGE
from workspace_browser.errors import QueryErrorKind
from workspace_browser.results import DirectoryResult, FileResult, QueryError


def test_hello_round_trip(engine, make_workspace):
    ws = make_workspace("greetings")
    commit_id = ws.commit({"hello.txt": b"hi"})
    ws.branch("main", commit_id)

    result = engine.query("greetings", "main", "hello.txt")

    assert result == FileResult(path="hello.txt", contents=b"hi", commit_id=commit_id.decode())


def test_directory_scenario(engine, make_workspace):
    ws = make_workspace("docs")
    ws.branch("main", ws.commit({"guide/intro.md": b"# Intro\n", "README.md": b"r"}))

    result = engine.query("docs", "main", "guide")

    assert isinstance(result, DirectoryResult)
    assert result.path == "guide"
    assert result.entries == ["guide/intro.md"]


def test_root_lists_whole_tree(engine, docs):
    result = engine.query("docs", "main", "")

    assert isinstance(result, DirectoryResult)
    assert result.path == ""
    assert result.entries == [
        "bin",
        "bin/run.sh",
        "guide",
        "guide/api",
        "guide/api/index.md",
        "guide/intro.md",
        "hello.txt",
        "logo.png",
    ]


def test_binary_file(engine, docs):
    result = engine.query("docs", "main", "logo.png")

    assert isinstance(result, FileResult)
    assert result.contents == b"\x89PNG\r\n\x1a\n\x00\xff\xfe"


def test_tag_and_commit_prefix(engine, docs):
    first = docs.repo.refs[b"refs/tags/v1.0"].decode()

    by_tag = engine.query("docs", "v1.0", "hello.txt")
    by_prefix = engine.query("docs", first[:7], "hello.txt")

    assert by_tag == by_prefix == FileResult(path="hello.txt", contents=b"hi", commit_id=first)


def test_identical_queries_are_idempotent(engine, docs):
    assert engine.query("docs", "main", "") == engine.query("docs", "main", "")
    assert engine.query("docs", "main", "hello.txt") == engine.query("docs", "main", "hello.txt")


def test_unknown_revision(engine, docs):
    result = engine.query("docs", "does-not-exist-ref", "")

    assert isinstance(result, QueryError)
    assert result.kind == QueryErrorKind.REVISION_NOT_FOUND
    assert result.workspace == "docs"
    assert result.revision == "does-not-exist-ref"


def test_traversal_path_is_harmless(engine, docs, workspaces_root):
    (workspaces_root / "secret").write_text("top secret")

    result = engine.query("docs", "main", "../../secret")

    assert isinstance(result, QueryError)
    assert result.kind == QueryErrorKind.PATH_NOT_FOUND
    assert result.path == "secret"


def test_traversal_segments_are_dropped_not_followed(engine, docs):
    result = engine.query("docs", "main", "../hello.txt")

    assert isinstance(result, FileResult)
    assert result.path == "hello.txt"
    assert result.contents == b"hello again"


def test_missing_path_carries_context(engine, docs):
    result = engine.query("docs", "v1.0", "bin/run.sh")

    assert result == QueryError(
        kind=QueryErrorKind.PATH_NOT_FOUND,
        message="path 'bin/run.sh' does not exist",
        workspace="docs",
        revision="v1.0",
        path="bin/run.sh",
    )


@pytest.mark.parametrize("name", ["nope", "", "..", "../workspaces/docs/.."])
def test_unknown_workspace(engine, docs, name):
    result = engine.query(name, "main", "")

    assert isinstance(result, QueryError)
    assert result.kind == QueryErrorKind.WORKSPACE_NOT_FOUND


def test_directory_that_is_not_a_repository(engine, workspaces_root):
    (workspaces_root / "plain").mkdir()

    result = engine.query("plain", "main", "")

    assert result.kind == QueryErrorKind.WORKSPACE_NOT_FOUND


def test_name_cannot_escape_workspaces_root(engine, tmp_path):
    # A repository next to the workspaces root, not inside it
    outside = WorkspaceBuilder.create(tmp_path / "outside")
    outside.branch("main", outside.commit({"secret.txt": b"top secret"}))
    outside.repo.close()

    result = engine.query("../outside", "main", "secret.txt")

    assert result.kind == QueryErrorKind.WORKSPACE_NOT_FOUND
    assert result.workspace == "outside"


def test_empty_workspace(engine, empty_workspace):
    result = engine.query("empty", "main", "")

    assert isinstance(result, QueryError)
    assert result.kind == QueryErrorKind.EMPTY_WORKSPACE


@pytest.mark.parametrize("name,revision,path", [
    ("docs\x00", "main", ""),
    ("docs", "main\n", ""),
    ("docs", "main", "hello.txt\x00.png"),
])
def test_control_characters_are_bad_requests(engine, docs, name, revision, path):
    result = engine.query(name, revision, path)

    assert result.kind == QueryErrorKind.BAD_REQUEST


def test_storage_failure_is_internal_error(engine, make_workspace, caplog):
    ws = make_workspace("broken")
    commit_id = ws.commit({"a.txt": b"a"})
    ws.branch("main", commit_id)
    blob_id = ws.repo[ws.repo[commit_id].tree][b"a.txt"][1]
    (ws.path / "objects" / blob_id[:2].decode() / blob_id[2:].decode()).unlink()

    with caplog.at_level(logging.ERROR, logger="workspace_browser"):
        result = engine.query("broken", "main", "a.txt")

    assert result.kind == QueryErrorKind.INTERNAL_ERROR
    assert result.message == INTERNAL_ERROR_MESSAGE
    assert "missing" in caplog.text


def test_unexpected_exception_is_internal_error(engine, docs, monkeypatch):
    def explode(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(
        "workspace_browser.engine.engine.RevisionResolver.resolve", explode
    )

    result = engine.query("docs", "main", "")

    assert result.kind == QueryErrorKind.INTERNAL_ERROR
    assert result.message == INTERNAL_ERROR_MESSAGE


@pytest.mark.parametrize("path", ["hello.txt", "missing.txt", ""])
def test_scratch_directories_are_always_released(engine, docs, scratch_root, path):
    engine.query("docs", "main", path)
    engine.query("docs", "nope", path)

    assert list(scratch_root.iterdir()) == []


def test_engine_is_stateless(engine, docs):
    before = dict(vars(engine))

    engine.query("docs", "main", "hello.txt")
    engine.query("nope", "main", "")

    assert vars(engine) == before


@pytest.mark.parametrize("name,revision,path", [
    (None, "main", ""),
    ("docs", None, ""),
    ("docs", "main", None),
    (["docs"], "main", ""),
])
def test_non_string_input_is_bad_request(engine, docs, name, revision, path):
    result = engine.query(name, revision, path)

    assert isinstance(result, QueryError)
    assert result.kind == QueryErrorKind.BAD_REQUEST


@pytest.mark.parametrize("path", ["a" * 300, "guide/" + "a" * 300, "hello.txt/" + "a" * 300])
def test_path_beyond_name_limit_is_not_found(engine, docs, path):
    result = engine.query("docs", "main", path)

    assert result.kind == QueryErrorKind.PATH_NOT_FOUND
    assert result.path == path


def test_workspace_name_beyond_name_limit_is_not_found(engine, docs):
    result = engine.query("w" * 300, "main", "")

    assert result.kind == QueryErrorKind.WORKSPACE_NOT_FOUND


def test_concurrent_queries_do_not_interfere(engine, docs, scratch_root):
    queries = [
        ("docs", "main", "hello.txt"),
        ("docs", "v1.0", "hello.txt"),
        ("docs", "main", "guide"),
        ("docs", "v1.0", "guide"),
        ("docs", "v1.0", "bin/run.sh"),
        ("docs", "nope", ""),
        ("docs", "main", ""),
    ] * 8
    expected = [engine.query(*query) for query in queries]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda query: engine.query(*query), queries))

    assert results == expected
    assert results[0].contents == b"hello again"
    assert results[1].contents == b"hi"
    assert results[2].entries == ["guide/api", "guide/api/index.md", "guide/intro.md"]
    assert results[3].entries == ["guide/intro.md"]
    assert results[4].kind == QueryErrorKind.PATH_NOT_FOUND
    assert results[5].kind == QueryErrorKind.REVISION_NOT_FOUND
    assert list(scratch_root.iterdir()) == []
