"""Changeset and diff API data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .diff import AlignmentPolicy, FileView, ViewMode


class ChangeMode(str, Enum):
    """Which side of the working tree a changeset query covers"""

    ALL = "all"
    STAGED = "staged"
    WORKTREE = "worktree"


class ChangeGroup(str, Enum):
    """Grouping of a changed path, in display order"""

    STAGED = "Staged"
    UNSTAGED = "Unstaged"
    UNTRACKED = "Untracked"

    @property
    def order(self) -> int:
        return list(ChangeGroup).index(self)


class ChangeItem(BaseModel):
    """A changed path as reported by the VCS"""

    path: str
    status: str  # porcelain XY code
    group: ChangeGroup


class DiffFileResponse(BaseModel):
    """Diff of a single path, optionally with server-side rendered rows"""

    path: str
    mode: ChangeMode
    diff: str
    note: str | None = None
    files: list[FileView] = []


class RenderRequest(BaseModel):
    """Request to render caller-supplied diff text"""

    diff: str
    view: ViewMode = ViewMode.SPLIT
    alignment: AlignmentPolicy | None = None


class RenderResponse(BaseModel):
    """Rendered files of a diff"""

    view: ViewMode
    files: list[FileView]
