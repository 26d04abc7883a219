"""Tests for the unified and split projections."""

from diffview.models.diff import AlignmentPolicy, FileStatus, LineKind, ViewMode
from diffview.services.diff_parser import parse_diff
from diffview.services.renderers import render_files, render_split, render_unified

ALLOWED_KINDS = {"ctx", "del", "add", "meta", "empty"}


def test_unified_restores_prefixes(sample_diff):
    [file_diff] = parse_diff(sample_diff)
    rows = render_unified(file_diff)

    assert [r.raw for r in rows] == [
        "diff --git a/app.py b/app.py",
        "index 83db48f..bf269f4 100644",
        "--- a/app.py",
        "+++ b/app.py",
        "@@ -10,3 +12,4 @@ def main():",
        " keep one",
        "-old two",
        "+new two",
        "+new three",
        " keep four",
    ]
    assert rows[6].kind == LineKind.REMOVED
    assert (rows[6].text, rows[6].left_line_no, rows[6].right_line_no) == ("old two", 11, None)
    assert (rows[9].left_line_no, rows[9].right_line_no) == (12, 15)


def test_split_rows_include_line_numbers(sample_diff):
    [file_diff] = parse_diff(sample_diff)
    rows = render_split(file_diff)
    body = rows[5:]

    assert [(r.left, r.right) for r in body] == [
        ("keep one", "keep one"),
        ("old two", "new two"),
        ("", "new three"),
        ("keep four", "keep four"),
    ]
    assert [(r.left_line_no, r.right_line_no) for r in body] == [(10, 12), (11, 13), (None, 14), (12, 15)]


def test_render_files_fills_only_the_requested_view(multi_file_diff):
    files = parse_diff(multi_file_diff)

    split = render_files(files, ViewMode.SPLIT, AlignmentPolicy.MATCHED)
    assert [f.status for f in split] == [FileStatus.ADDED, FileStatus.DELETED, FileStatus.RENAMED]
    assert all(f.split is not None and f.unified is None for f in split)

    unified = render_files(files, ViewMode.UNIFIED)
    assert all(f.unified is not None and f.split is None for f in unified)
    assert unified[2].new_path == "new name.txt"

    raw = render_files(files, ViewMode.RAW)
    assert all(f.unified is None and f.split is None for f in raw)


def test_serialized_kinds_are_restricted(sample_diff, multi_file_diff):
    files = parse_diff(sample_diff + multi_file_diff + "garbage\n")
    dumped = [f.model_dump(mode="json") for f in render_files(files, ViewMode.SPLIT)]
    dumped += [f.model_dump(mode="json") for f in render_files(files, ViewMode.UNIFIED)]

    for view in dumped:
        for row in view["split"] or []:
            assert {row["left_kind"], row["right_kind"]} <= ALLOWED_KINDS
        for row in view["unified"] or []:
            assert row["kind"] in ALLOWED_KINDS
