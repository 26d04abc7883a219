"""
Split Aligner Service - Pair removed and added runs into side-by-side rows
"""

from __future__ import annotations

from difflib import SequenceMatcher
from enum import Enum

from ..models.diff import (
    AlignmentPolicy,
    DiffLine,
    FileDiff,
    Hunk,
    LineKind,
    SideKind,
    SplitRow,
)


class AlignState(str, Enum):
    """Whether the aligner is between change blocks or buffering one"""

    SCANNING = "scanning"
    IN_CHANGE_BLOCK = "in_change_block"


class SplitAligner:
    """Scan one sequence of lines, buffering change blocks until they can be paired"""

    def __init__(self, policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL):
        self.policy = policy
        self.state = AlignState.SCANNING
        self.removed_run: list[DiffLine] = []
        self.added_run: list[DiffLine] = []
        self.rows: list[SplitRow] = []

    def feed(self, line: DiffLine) -> None:
        if line.kind == LineKind.REMOVED:
            self.removed_run.append(line)
            self.state = AlignState.IN_CHANGE_BLOCK
        elif line.kind == LineKind.ADDED:
            self.added_run.append(line)
            self.state = AlignState.IN_CHANGE_BLOCK
        elif line.kind == LineKind.CONTEXT:
            self.flush()
            self.rows.append(
                SplitRow(
                    left=line.text,
                    right=line.text,
                    left_kind=SideKind.CONTEXT,
                    right_kind=SideKind.CONTEXT,
                    left_line_no=line.left_line_no,
                    right_line_no=line.right_line_no,
                )
            )
        elif line.kind == LineKind.META:
            self.flush()
            self.rows.append(
                SplitRow(
                    left=line.text,
                    right=line.text,
                    left_kind=SideKind.META,
                    right_kind=SideKind.META,
                )
            )
        else:
            raise ValueError(f"Unknown line kind: {line.kind!r}")

    def flush(self) -> None:
        """Emit rows for the buffered change block and clear the buffers"""
        if self.state == AlignState.SCANNING:
            return

        if self.policy == AlignmentPolicy.MATCHED:
            self._emit_matched()
        else:
            self._emit_pairs(self.removed_run, self.added_run)

        self.removed_run = []
        self.added_run = []
        self.state = AlignState.SCANNING

    def finish(self) -> list[SplitRow]:
        self.flush()
        return self.rows

    def _emit_pairs(self, removed: list[DiffLine], added: list[DiffLine]) -> None:
        for i in range(max(len(removed), len(added))):
            left = removed[i] if i < len(removed) else None
            right = added[i] if i < len(added) else None
            self.rows.append(
                SplitRow(
                    left=left.text if left else "",
                    right=right.text if right else "",
                    left_kind=SideKind.REMOVED if left else SideKind.EMPTY,
                    right_kind=SideKind.ADDED if right else SideKind.EMPTY,
                    left_line_no=left.left_line_no if left else None,
                    right_line_no=right.right_line_no if right else None,
                )
            )

    def _emit_matched(self) -> None:
        """Pair the block along a minimal edit script instead of by position"""
        matcher = SequenceMatcher(
            None,
            [line.text for line in self.removed_run],
            [line.text for line in self.added_run],
            autojunk=False,
        )

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "delete":
                self._emit_pairs(self.removed_run[i1:i2], [])
            elif tag == "insert":
                self._emit_pairs([], self.added_run[j1:j2])
            else:  # equal, replace
                self._emit_pairs(self.removed_run[i1:i2], self.added_run[j1:j2])


def align_lines(lines, policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL) -> list[SplitRow]:
    """Align an arbitrary sequence of classified lines"""
    aligner = SplitAligner(policy)
    for line in lines:
        aligner.feed(line)
    return aligner.finish()


def align_hunk(hunk: Hunk, policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL) -> list[SplitRow]:
    """Split rows for one hunk; the hunk end always flushes"""
    return align_lines(hunk.lines, policy)


def align_file(file_diff: FileDiff, policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL) -> list[SplitRow]:
    """Split rows for a whole file: header meta rows, then each hunk"""
    rows = align_lines(file_diff.header_lines, policy)
    for hunk in file_diff.hunks:
        rows.extend(align_hunk(hunk, policy))
    return rows
