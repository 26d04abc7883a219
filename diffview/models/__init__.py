"""Models module - Pydantic data models"""

from .diff import (
    AlignmentPolicy,
    DiffLine,
    FileDiff,
    FileStatus,
    FileView,
    Hunk,
    LineKind,
    SideKind,
    SplitRow,
    UnifiedRow,
    ViewMode,
)
from .changes import (
    ChangeGroup,
    ChangeItem,
    ChangeMode,
    DiffFileResponse,
    RenderRequest,
    RenderResponse,
)

__all__ = [
    # Diff models
    "AlignmentPolicy",
    "DiffLine",
    "FileDiff",
    "FileStatus",
    "FileView",
    "Hunk",
    "LineKind",
    "SideKind",
    "SplitRow",
    "UnifiedRow",
    "ViewMode",
    # Changeset models
    "ChangeGroup",
    "ChangeItem",
    "ChangeMode",
    "DiffFileResponse",
    "RenderRequest",
    "RenderResponse",
]
