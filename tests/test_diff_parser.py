"""Tests for unified diff parsing and hunk line numbering."""

import logging

from diffview.models.diff import FileStatus, LineKind
from diffview.services.diff_parser import (
    decode_diff_bytes,
    parse_diff,
    parse_hunk_header,
    unquote_path,
)


def _content(hunk):
    return [line for line in hunk.lines if line.kind != LineKind.META]


def test_empty_input_parses_to_no_files():
    assert parse_diff("") == []
    assert parse_diff("\n\n\r\n") == []


def test_hunk_header_seeds_counters(sample_diff):
    [file_diff] = parse_diff(sample_diff)
    [hunk] = file_diff.hunks

    assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (10, 3, 12, 4)
    assert hunk.header == "@@ -10,3 +12,4 @@ def main():"
    assert hunk.lines[0].kind == LineKind.META
    assert hunk.lines[0].text == hunk.header

    first_left = next(l for l in hunk.lines if l.kind in (LineKind.CONTEXT, LineKind.REMOVED))
    first_right = next(l for l in hunk.lines if l.kind in (LineKind.CONTEXT, LineKind.ADDED))
    assert first_left.left_line_no == 10
    assert first_right.right_line_no == 12


def test_lines_are_classified_and_numbered(sample_diff):
    [file_diff] = parse_diff(sample_diff)
    rows = [(l.kind, l.text, l.left_line_no, l.right_line_no) for l in _content(file_diff.hunks[0])]

    assert rows == [
        (LineKind.CONTEXT, "keep one", 10, 12),
        (LineKind.REMOVED, "old two", 11, None),
        (LineKind.ADDED, "new two", None, 13),
        (LineKind.ADDED, "new three", None, 14),
        (LineKind.CONTEXT, "keep four", 12, 15),
    ]
    assert file_diff.hunks[0].is_complete


def test_line_numbers_are_contiguous_per_side(multi_file_diff, sample_diff):
    for file_diff in parse_diff(sample_diff + multi_file_diff):
        for hunk in file_diff.hunks:
            left = [l.left_line_no for l in hunk.lines if l.kind in (LineKind.CONTEXT, LineKind.REMOVED)]
            right = [l.right_line_no for l in hunk.lines if l.kind in (LineKind.CONTEXT, LineKind.ADDED)]
            assert left == list(range(hunk.old_start, hunk.old_start + len(left)))
            assert right == list(range(hunk.new_start, hunk.new_start + len(right)))
            for line in hunk.lines:
                if line.kind == LineKind.META:
                    assert line.left_line_no is None and line.right_line_no is None


def test_file_header_lines_are_meta(sample_diff):
    [file_diff] = parse_diff(sample_diff)

    assert [l.text for l in file_diff.header_lines] == [
        "diff --git a/app.py b/app.py",
        "index 83db48f..bf269f4 100644",
        "--- a/app.py",
        "+++ b/app.py",
    ]
    assert all(l.kind == LineKind.META for l in file_diff.header_lines)
    assert file_diff.old_path == "app.py"
    assert file_diff.new_path == "app.py"
    assert file_diff.status == FileStatus.MODIFIED


def test_multiple_files_split_at_diff_lines(multi_file_diff):
    added, deleted, renamed = parse_diff(multi_file_diff)

    assert added.status == FileStatus.ADDED
    assert added.new_path == "new.txt"
    assert [(l.text, l.right_line_no) for l in _content(added.hunks[0])] == [("hello", 1), ("world", 2)]

    assert deleted.status == FileStatus.DELETED
    assert deleted.path == "gone.txt"
    [hunk] = deleted.hunks
    assert (hunk.old_start, hunk.old_lines) == (1, 1)
    assert [(l.text, l.left_line_no) for l in _content(hunk)] == [("bye", 1)]

    assert renamed.status == FileStatus.RENAMED
    assert (renamed.old_path, renamed.new_path) == ("old name.txt", "new name.txt")
    assert renamed.hunks == ()
    assert len(renamed.header_lines) == 4


def test_input_without_diff_line_is_one_file():
    text = "--- a/x.txt\n+++ b/x.txt\n@@ -1 +1 @@\n-a\n+b\n"
    [file_diff] = parse_diff(text)

    assert file_diff.old_path == "x.txt"
    assert file_diff.new_path == "x.txt"
    assert len(file_diff.hunks) == 1


def test_omitted_counts_default_to_one():
    assert parse_hunk_header("@@ -5 +7 @@") == (5, 1, 7, 1)
    assert parse_hunk_header("@@ -5,0 +7,2 @@ section") == (5, 0, 7, 2)
    assert parse_hunk_header("@@ garbage @@") is None
    assert parse_hunk_header("@@@ -1,2 -1,2 +1,3 @@@") is None


def test_malformed_header_inside_hunk_keeps_counters():
    text = "@@ -1,2 +1,2 @@\n a\n@@ garbage @@\n b\n"
    [file_diff] = parse_diff(text)
    [hunk] = file_diff.hunks

    meta = [l for l in hunk.lines[1:] if l.kind == LineKind.META]
    assert [l.text for l in meta] == ["@@ garbage @@"]
    assert [(l.text, l.left_line_no, l.right_line_no) for l in _content(hunk)] == [
        ("a", 1, 1),
        ("b", 2, 2),
    ]


def test_content_before_any_hunk_degrades_to_meta():
    [file_diff] = parse_diff("@@ garbage @@\n x\n+y\n-z\n")

    assert file_diff.hunks == ()
    assert [l.text for l in file_diff.header_lines] == ["@@ garbage @@", " x", "+y", "-z"]
    assert all(l.kind == LineKind.META for l in file_diff.header_lines)


def test_arbitrary_text_never_fails():
    [file_diff] = parse_diff("not a diff at all\n\x00\x1b[31mcolor\n")

    assert file_diff.hunks == ()
    assert [l.text for l in file_diff.header_lines] == ["not a diff at all", "\x00\x1b[31mcolor"]
    assert file_diff.old_path == file_diff.new_path == ""


def test_any_line_ending_convention():
    for sep in ("\r\n", "\r", "\n"):
        text = sep.join(["@@ -1,1 +1,1 @@", "-a", "+b"]) + sep
        [file_diff] = parse_diff(text)
        assert [l.text for l in _content(file_diff.hunks[0])] == ["a", "b"]


def test_blank_lines_are_skipped_and_space_lines_are_context():
    [file_diff] = parse_diff("@@ -1,3 +1,3 @@\n a\n\n \n b\n")
    lines = _content(file_diff.hunks[0])

    assert [(l.text, l.left_line_no) for l in lines] == [("a", 1), ("", 2), ("b", 3)]


def test_no_newline_marker_does_not_touch_counters():
    text = "@@ -1,1 +1,1 @@\n-a\n\\ No newline at end of file\n+b\n"
    [file_diff] = parse_diff(text)
    hunk = file_diff.hunks[0]

    assert hunk.lines[2].kind == LineKind.META
    assert hunk.lines[3].right_line_no == 1
    assert hunk.is_complete


def test_truncated_hunk_is_tolerated():
    [file_diff] = parse_diff("@@ -1,5 +1,5 @@\n a\n")
    hunk = file_diff.hunks[0]

    assert not hunk.is_complete
    assert hunk.left_end == 2
    assert hunk.right_end == 2


def test_patch_signature_after_last_hunk_is_tolerated(caplog):
    text = "@@ -1 +1 @@\n-old\n+new\n-- \n2.40.0\n"

    with caplog.at_level(logging.DEBUG, logger="diffview.services.diff_parser"):
        [file_diff] = parse_diff(text)
    [hunk] = file_diff.hunks

    assert [(line.kind, line.text, line.left_line_no) for line in hunk.lines[-2:]] == [
        (LineKind.REMOVED, "- ", 2),
        (LineKind.META, "2.40.0", None),
    ]
    assert not hunk.is_complete
    assert "past the end of hunk" in caplog.text


def test_quoted_paths_are_unquoted():
    text = 'diff --git "a/caf\\303\\251.txt" "b/caf\\303\\251.txt"\n'
    [file_diff] = parse_diff(text)

    assert file_diff.old_path == "café.txt"
    assert file_diff.new_path == "café.txt"
    assert unquote_path('"tab\\there"') == "tab\there"
    assert unquote_path("plain.txt") == "plain.txt"


def test_header_timestamps_are_stripped():
    text = "--- a/f.c\t2024-01-01 10:00:00\n+++ b/f.c\t2024-01-02 10:00:00\n"
    [file_diff] = parse_diff(text)

    assert (file_diff.old_path, file_diff.new_path) == ("f.c", "f.c")


def test_decode_diff_bytes_substitutes_invalid_bytes():
    assert decode_diff_bytes(b"\xef\xbb\xbf+ok\n") == "+ok\n"
    assert decode_diff_bytes(b"+bad \xff\n") == "+bad �\n"
