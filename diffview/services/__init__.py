"""Services module - Business logic layer"""

from .config_manager import ConfigManager
from .diff_parser import decode_diff_bytes, parse_diff
from .git_changes import GitChangeSource, parse_porcelain
from .remote_source import RemoteChangeSource
from .renderers import render_files, render_split, render_unified
from .split_aligner import SplitAligner, align_file, align_hunk

__all__ = [
    "ConfigManager",
    "decode_diff_bytes",
    "parse_diff",
    "GitChangeSource",
    "parse_porcelain",
    "RemoteChangeSource",
    "render_files",
    "render_split",
    "render_unified",
    "SplitAligner",
    "align_file",
    "align_hunk",
]
