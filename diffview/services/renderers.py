"""
Renderers - Project parsed diffs into the unified and split view shapes
"""

from __future__ import annotations

from ..models.diff import (
    AlignmentPolicy,
    FileDiff,
    FileView,
    LineKind,
    SplitRow,
    UnifiedRow,
    ViewMode,
)
from .split_aligner import align_file

_PREFIXES = {
    LineKind.CONTEXT: " ",
    LineKind.ADDED: "+",
    LineKind.REMOVED: "-",
    LineKind.META: "",
}


def render_unified(file_diff: FileDiff) -> list[UnifiedRow]:
    """Flatten header lines and hunks into one sequence, display prefix restored"""
    lines = list(file_diff.header_lines)
    for hunk in file_diff.hunks:
        lines.extend(hunk.lines)

    return [
        UnifiedRow(
            kind=line.kind,
            text=line.text,
            raw=_PREFIXES[line.kind] + line.text,
            left_line_no=line.left_line_no,
            right_line_no=line.right_line_no,
        )
        for line in lines
    ]


def render_split(
    file_diff: FileDiff,
    policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL,
) -> list[SplitRow]:
    """Two-column rows for a file, line numbers included"""
    return align_file(file_diff, policy)


def render_file(
    file_diff: FileDiff,
    view: ViewMode,
    policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL,
) -> FileView:
    unified = split = None
    if view == ViewMode.UNIFIED:
        unified = tuple(render_unified(file_diff))
    elif view == ViewMode.SPLIT:
        split = tuple(render_split(file_diff, policy))

    return FileView(
        old_path=file_diff.old_path,
        new_path=file_diff.new_path,
        status=file_diff.status,
        view=view,
        unified=unified,
        split=split,
    )


def render_files(
    files: list[FileDiff],
    view: ViewMode,
    policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL,
) -> list[FileView]:
    """Render every file of a diff in the requested view"""
    return [render_file(file_diff, view, policy) for file_diff in files]
