"""Diff-related data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class LineKind(str, Enum):
    """Classification of a single diff line"""

    CONTEXT = "ctx"
    ADDED = "add"
    REMOVED = "del"
    META = "meta"


class SideKind(str, Enum):
    """Classification of one side of a split row"""

    CONTEXT = "ctx"
    ADDED = "add"
    REMOVED = "del"
    META = "meta"
    EMPTY = "empty"


class FileStatus(str, Enum):
    """How a file changed between the two sides of a diff"""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class ViewMode(str, Enum):
    """Output shape requested by the presentation layer"""

    RAW = "raw"
    UNIFIED = "unified"
    SPLIT = "split"


class AlignmentPolicy(str, Enum):
    """How removed and added runs are paired in the split view"""

    POSITIONAL = "positional"
    MATCHED = "matched"


class DiffLine(BaseModel):
    """A classified line with its old/new file line numbers"""

    model_config = ConfigDict(frozen=True)

    text: str
    kind: LineKind
    left_line_no: int | None = None
    right_line_no: int | None = None


class Hunk(BaseModel):
    """One `@@ -old_start,old_lines +new_start,new_lines @@` block"""

    model_config = ConfigDict(frozen=True)

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    header: str
    lines: tuple[DiffLine, ...] = ()  # header line first, as META

    @property
    def left_end(self) -> int:
        """Left counter value after the last line of the hunk"""
        counted = sum(1 for line in self.lines if line.left_line_no is not None)
        return self.old_start + counted

    @property
    def right_end(self) -> int:
        """Right counter value after the last line of the hunk"""
        counted = sum(1 for line in self.lines if line.right_line_no is not None)
        return self.new_start + counted

    @property
    def is_complete(self) -> bool:
        """True when the line counts agree with the header"""
        return (
            self.left_end == self.old_start + self.old_lines
            and self.right_end == self.new_start + self.new_lines
        )


class FileDiff(BaseModel):
    """Parsed diff for a single file"""

    model_config = ConfigDict(frozen=True)

    old_path: str = ""
    new_path: str = ""
    status: FileStatus = FileStatus.MODIFIED
    header_lines: tuple[DiffLine, ...] = ()
    hunks: tuple[Hunk, ...] = ()

    @property
    def path(self) -> str:
        """Display path: the new path unless the file was deleted"""
        if self.status == FileStatus.DELETED:
            return self.old_path or self.new_path
        return self.new_path or self.old_path


class SplitRow(BaseModel):
    """A row of the two-column view"""

    model_config = ConfigDict(frozen=True)

    left: str
    right: str
    left_kind: SideKind
    right_kind: SideKind
    left_line_no: int | None = None
    right_line_no: int | None = None


class UnifiedRow(BaseModel):
    """A row of the flat view, with the display prefix restored in `raw`"""

    model_config = ConfigDict(frozen=True)

    kind: LineKind
    text: str
    raw: str
    left_line_no: int | None = None
    right_line_no: int | None = None


class FileView(BaseModel):
    """Rendered rows of one file, in either view"""

    model_config = ConfigDict(frozen=True)

    old_path: str
    new_path: str
    status: FileStatus
    view: ViewMode
    unified: tuple[UnifiedRow, ...] | None = None
    split: tuple[SplitRow, ...] | None = None
