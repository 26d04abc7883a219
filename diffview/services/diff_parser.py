"""
Diff Parser Service - Turn raw unified diff text into line-numbered file records

Parsing is total: any string yields a (possibly empty) list of FileDiff.
Lines that cannot be understood degrade to META instead of raising.
"""

from __future__ import annotations

import logging
import re

from ..models.diff import DiffLine, FileDiff, FileStatus, Hunk, LineKind

logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_FILE_HEADER_PREFIXES = ("diff ", "index ", "--- ", "+++ ")
_ESCAPES = {"a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v"}


def decode_diff_bytes(data: bytes) -> str:
    """Decode VCS output as UTF-8, substituting undecodable bytes"""
    return data.decode("utf-8-sig", errors="replace")


def split_lines(text: str) -> list[str]:
    """Split on any line-ending convention, dropping the final terminator"""
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def parse_hunk_header(line: str) -> tuple[int, int, int, int] | None:
    """Extract (old_start, old_lines, new_start, new_lines); counts default to 1"""
    match = _HUNK_HEADER.match(line)
    if not match:
        return None
    old_start, old_lines, new_start, new_lines = match.groups()
    return (
        int(old_start),
        int(old_lines) if old_lines is not None else 1,
        int(new_start),
        int(new_lines) if new_lines is not None else 1,
    )


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of paths with special characters"""
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    inner = path[1:-1]
    out = bytearray()
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch != "\\" or i + 1 >= len(inner):
            out.extend(ch.encode("utf-8"))
            i += 1
            continue
        nxt = inner[i + 1]
        octal = inner[i + 1:i + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            out.append(int(octal, 8) & 0xFF)
            i += 4
        else:
            out.extend(_ESCAPES.get(nxt, nxt).encode("utf-8"))
            i += 2
    return out.decode("utf-8", errors="replace")


def _strip_prefix(path: str, prefix: str) -> str:
    return path[len(prefix):] if path.startswith(prefix) else path


def _split_git_header(rest: str) -> tuple[str, str] | None:
    """Split the `a/old b/new` part of a `diff --git` line"""
    if rest.startswith('"'):
        end = rest.find('" ', 1)
        if end < 0:
            return None
        old, new = rest[:end + 1], rest[end + 2:]
        return _strip_prefix(unquote_path(old), "a/"), _strip_prefix(unquote_path(new), "b/")

    candidates = [m.start() for m in re.finditer(r" (?=\"?b/)", rest)]
    if not candidates:
        # --no-prefix output: only an unambiguous split of identical halves is usable
        half = len(rest) // 2
        if len(rest) % 2 == 1 and rest[half] == " " and rest[:half] == rest[half + 1:]:
            return rest[:half], rest[half + 1:]
        return None

    for idx in candidates:
        old = _strip_prefix(rest[:idx], "a/")
        new = _strip_prefix(unquote_path(rest[idx + 1:]), "b/")
        if old == new:
            return old, new
    idx = candidates[0]
    return _strip_prefix(rest[:idx], "a/"), _strip_prefix(unquote_path(rest[idx + 1:]), "b/")


class _HunkBuilder:
    """Stamps line numbers while a hunk is being read"""

    def __init__(self, header: str, old_start: int, old_lines: int, new_start: int, new_lines: int):
        self.header = header
        self.old_start = old_start
        self.old_lines = old_lines
        self.new_start = new_start
        self.new_lines = new_lines
        self.left = old_start
        self.right = new_start
        self.lines: list[DiffLine] = [DiffLine(text=header, kind=LineKind.META)]

    def is_exhausted(self) -> bool:
        """True once both sides have reached the line counts in the header"""
        return (
            self.left >= self.old_start + self.old_lines
            and self.right >= self.new_start + self.new_lines
        )

    def add(self, kind: LineKind, text: str) -> None:
        if kind != LineKind.META and self.is_exhausted():
            logger.debug("Line %r is past the end of hunk %r", text, self.header)
        if kind == LineKind.CONTEXT:
            line = DiffLine(text=text, kind=kind, left_line_no=self.left, right_line_no=self.right)
            self.left += 1
            self.right += 1
        elif kind == LineKind.REMOVED:
            line = DiffLine(text=text, kind=kind, left_line_no=self.left)
            self.left += 1
        elif kind == LineKind.ADDED:
            line = DiffLine(text=text, kind=kind, right_line_no=self.right)
            self.right += 1
        else:
            line = DiffLine(text=text, kind=LineKind.META)
        self.lines.append(line)

    def build(self) -> Hunk:
        if self.left != self.old_start + self.old_lines or self.right != self.new_start + self.new_lines:
            logger.debug(
                "Hunk %r ended at -%d +%d, header expects -%d +%d",
                self.header,
                self.left,
                self.right,
                self.old_start + self.old_lines,
                self.new_start + self.new_lines,
            )
        return Hunk(
            old_start=self.old_start,
            old_lines=self.old_lines,
            new_start=self.new_start,
            new_lines=self.new_lines,
            header=self.header,
            lines=tuple(self.lines),
        )


class _FileBuilder:
    """Accumulates the header lines and hunks of one file segment"""

    def __init__(self):
        self.old_path = ""
        self.new_path = ""
        self.status = FileStatus.MODIFIED
        self.header_lines: list[DiffLine] = []
        self.hunks: list[Hunk] = []
        self.current: _HunkBuilder | None = None

    @property
    def has_content(self) -> bool:
        return bool(self.header_lines or self.hunks or self.current)

    def feed(self, line: str) -> None:
        if line.startswith(_FILE_HEADER_PREFIXES):
            self._meta(line)
            return

        if line.startswith("@@"):
            counts = parse_hunk_header(line)
            if counts is None:
                logger.debug("Malformed hunk header kept as meta: %r", line)
                self._meta(line)
                return
            self._close_hunk()
            self.current = _HunkBuilder(line, *counts)
            return

        if line.startswith(" "):
            self._content(LineKind.CONTEXT, line)
        elif line.startswith("-"):
            self._content(LineKind.REMOVED, line)
        elif line.startswith("+"):
            self._content(LineKind.ADDED, line)
        elif not line.strip():
            return
        else:
            self._meta(line)

    def _content(self, kind: LineKind, line: str) -> None:
        # Content outside any hunk has nothing to number against
        if self.current is None:
            self._meta(line)
        else:
            self.current.add(kind, line[1:])

    def _meta(self, line: str) -> None:
        if self.current is not None:
            self.current.add(LineKind.META, line)
            return
        self._read_file_header(line)
        self.header_lines.append(DiffLine(text=line, kind=LineKind.META))

    def _read_file_header(self, line: str) -> None:
        if line.startswith("diff --git "):
            paths = _split_git_header(line[len("diff --git "):])
            if paths:
                self.old_path, self.new_path = paths
        elif line.startswith("--- "):
            path = unquote_path(line[4:].split("\t")[0].rstrip())
            if path == DEV_NULL:
                self.status = FileStatus.ADDED
            else:
                self.old_path = _strip_prefix(path, "a/")
        elif line.startswith("+++ "):
            path = unquote_path(line[4:].split("\t")[0].rstrip())
            if path == DEV_NULL:
                self.status = FileStatus.DELETED
            else:
                self.new_path = _strip_prefix(path, "b/")
        elif line.startswith("new file mode"):
            self.status = FileStatus.ADDED
        elif line.startswith("deleted file mode"):
            self.status = FileStatus.DELETED
        elif line.startswith("rename from "):
            self.status = FileStatus.RENAMED
            self.old_path = unquote_path(line[len("rename from "):])
        elif line.startswith("rename to "):
            self.status = FileStatus.RENAMED
            self.new_path = unquote_path(line[len("rename to "):])

    def _close_hunk(self) -> None:
        if self.current is not None:
            self.hunks.append(self.current.build())
            self.current = None

    def build(self) -> FileDiff:
        self._close_hunk()
        return FileDiff(
            old_path=self.old_path,
            new_path=self.new_path,
            status=self.status,
            header_lines=tuple(self.header_lines),
            hunks=tuple(self.hunks),
        )


def parse_diff(text: str) -> list[FileDiff]:
    """Parse unified diff text into per-file records, split at `diff ` lines"""
    files: list[FileDiff] = []
    builder = _FileBuilder()

    for line in split_lines(text):
        if line.startswith("diff ") and builder.has_content:
            files.append(builder.build())
            builder = _FileBuilder()
        builder.feed(line)

    if builder.has_content:
        files.append(builder.build())
    return files
