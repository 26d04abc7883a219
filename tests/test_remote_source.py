"""Tests for the aiohttp client of a remote diff server."""

import pytest
from aiohttp import test_utils, web

from diffview.errors import FetchFailure, InvalidRequest
from diffview.models.changes import ChangeGroup, ChangeMode
from diffview.services.remote_source import RemoteChangeSource


def _make_app(seen: dict, sample_diff: str) -> web.Application:
    async def changes(request):
        seen["changes"] = dict(request.query)
        return web.json_response(
            [{"path": "vibe-docs/spec/a.md", "status": "??", "group": "Untracked"}]
        )

    async def diff_file(request):
        seen["file"] = dict(request.query)
        if request.query["path"] == "missing.py":
            return web.json_response({"error": "not in a git repository"}, status=400)
        if request.query["path"] == "broken.py":
            return web.Response(status=503, text="upstream down")
        return web.json_response(
            {"path": request.query["path"], "mode": request.query["mode"], "diff": sample_diff}
        )

    app = web.Application()
    app.router.add_get("/api/diff/changes", changes)
    app.router.add_get("/api/diff/file", diff_file)
    return app


@pytest.fixture
async def remote(sample_diff):
    seen = {}
    async with test_utils.TestServer(_make_app(seen, sample_diff)) as server:
        yield RemoteChangeSource(f"http://{server.host}:{server.port}/"), seen


async def test_list_changes_sends_filters(remote):
    source, seen = remote

    [item] = await source.list_changes(ChangeMode.WORKTREE, True)

    assert seen["changes"] == {"mode": "worktree", "specOnly": "1"}
    assert item.group == ChangeGroup.UNTRACKED


async def test_fetch_diff_returns_raw_text(remote, sample_diff):
    source, seen = remote

    assert await source.fetch_diff("app.py", ChangeMode.STAGED) == sample_diff
    assert seen["file"] == {"path": "app.py", "mode": "staged", "view": "raw"}


async def test_server_error_message_is_surfaced(remote):
    source, _ = remote

    with pytest.raises(FetchFailure) as excinfo:
        await source.fetch_diff("missing.py", ChangeMode.ALL)
    assert excinfo.value.message == "not in a git repository"
    assert excinfo.value.status_code == 502


async def test_non_json_error_gets_generic_message(remote):
    source, _ = remote

    with pytest.raises(FetchFailure) as excinfo:
        await source.fetch_diff("broken.py", ChangeMode.ALL)
    assert excinfo.value.message == "Remote server returned HTTP 503"


async def test_empty_path_is_rejected_before_fetching(remote):
    source, seen = remote

    with pytest.raises(InvalidRequest):
        await source.fetch_diff("   ", ChangeMode.ALL)
    assert "file" not in seen


async def test_unreachable_server_is_a_fetch_failure():
    source = RemoteChangeSource("http://127.0.0.1:1", timeout=2.0)

    with pytest.raises(FetchFailure):
        await source.list_changes(ChangeMode.ALL, False)
