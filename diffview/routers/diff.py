"""Diff API endpoints"""

from __future__ import annotations

import logging
from typing import Union

from fastapi import APIRouter, Depends

from ..models.changes import (
    ChangeItem,
    ChangeMode,
    DiffFileResponse,
    RenderRequest,
    RenderResponse,
)
from ..models.diff import AlignmentPolicy, ViewMode
from ..services.config_manager import ConfigManager
from ..services.diff_parser import parse_diff
from ..services.git_changes import NO_DIFF_NOTE, GitChangeSource
from ..services.remote_source import RemoteChangeSource
from ..services.renderers import render_files

logger = logging.getLogger(__name__)

router = APIRouter()

ChangeSource = Union[GitChangeSource, RemoteChangeSource]


def get_change_source() -> ChangeSource:
    """Remote server when one is configured, otherwise the local git work tree"""
    config = ConfigManager.get_instance().get_config()
    if config.get("remote", {}).get("baseUrl"):
        return RemoteChangeSource.from_config(config)
    return GitChangeSource.from_config(config)


def parse_mode(value: str) -> ChangeMode:
    """Unknown or empty modes mean `all`"""
    try:
        return ChangeMode(value.strip().lower())
    except ValueError:
        return ChangeMode.ALL


def parse_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true")


def configured_view(config: dict) -> ViewMode:
    value = config.get("view", {}).get("default", ViewMode.SPLIT.value)
    try:
        return ViewMode(value)
    except ValueError:
        logger.warning("Unknown default view %r, using split", value)
        return ViewMode.SPLIT


def configured_alignment(config: dict) -> AlignmentPolicy:
    value = config.get("view", {}).get("alignment", AlignmentPolicy.POSITIONAL.value)
    try:
        return AlignmentPolicy(value)
    except ValueError:
        logger.warning("Unknown alignment policy %r, using positional", value)
        return AlignmentPolicy.POSITIONAL


@router.get("/changes", response_model=list[ChangeItem])
async def list_changes(
    mode: str = "",
    specOnly: str = "0",
    source: ChangeSource = Depends(get_change_source),
) -> list[ChangeItem]:
    """List changed paths, grouped Staged, Unstaged, Untracked"""
    return await source.list_changes(parse_mode(mode), parse_flag(specOnly))


@router.get("/file", response_model=DiffFileResponse)
async def diff_file(
    path: str = "",
    mode: str = "",
    view: ViewMode | None = None,
    source: ChangeSource = Depends(get_change_source),
) -> DiffFileResponse:
    """Unified diff of one path, with rendered rows unless view=raw"""
    config = ConfigManager.get_instance().get_config()
    change_mode = parse_mode(mode)
    view = view or configured_view(config)

    raw = await source.fetch_diff(path, change_mode)
    files = []
    if view != ViewMode.RAW:
        files = render_files(parse_diff(raw), view, configured_alignment(config))

    return DiffFileResponse(
        path=path.strip().replace("\\", "/"),
        mode=change_mode,
        diff=raw,
        note=None if raw.strip() else NO_DIFF_NOTE,
        files=files,
    )


@router.post("/render", response_model=RenderResponse)
async def render_diff(request: RenderRequest) -> RenderResponse:
    """Render caller-supplied diff text; any text is accepted"""
    config = ConfigManager.get_instance().get_config()
    alignment = request.alignment or configured_alignment(config)

    files = []
    if request.view != ViewMode.RAW:
        files = render_files(parse_diff(request.diff), request.view, alignment)
    return RenderResponse(view=request.view, files=files)
