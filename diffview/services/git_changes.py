"""
Git Change Source - List working tree changes and fetch per-file unified diffs
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from ..errors import FetchFailure, InvalidRequest, NotAGitRepository
from ..models.changes import ChangeGroup, ChangeItem, ChangeMode
from .config_manager import read_timeout
from .diff_parser import DEV_NULL, decode_diff_bytes, split_lines, unquote_path

logger = logging.getLogger(__name__)

NO_DIFF_NOTE = "(no diff) - file might be untracked or unchanged"


def is_spec_path(path: str, prefixes: Iterable[str], suffixes: Iterable[str]) -> bool:
    lowered = path.lower()
    return any(path.startswith(p) for p in prefixes) or any(
        lowered.endswith(s.lower()) for s in suffixes
    )


def parse_porcelain(
    text: str,
    mode: ChangeMode = ChangeMode.ALL,
    spec_only: bool = False,
    spec_prefixes: Iterable[str] = (),
    spec_suffixes: Iterable[str] = (),
) -> list[ChangeItem]:
    """Parse `git status --porcelain=1` output into filtered, sorted change items"""
    spec_prefixes = tuple(spec_prefixes)
    spec_suffixes = tuple(spec_suffixes)
    items = []

    for line in split_lines(text):
        if not line.strip() or len(line) < 3:
            continue

        # XY<space>path or XY<space>old -> new
        xy = line[:2]
        path = line[2:].strip()
        if " -> " in path:
            path = path.split(" -> ", 1)[1].strip()
        path = unquote_path(path).replace("\\", "/")

        if xy == "??":
            group = ChangeGroup.UNTRACKED
        elif xy[0] != " ":
            group = ChangeGroup.STAGED
        else:
            group = ChangeGroup.UNSTAGED

        if mode == ChangeMode.STAGED and group != ChangeGroup.STAGED:
            continue
        if mode == ChangeMode.WORKTREE and group == ChangeGroup.STAGED:
            continue
        if spec_only and not is_spec_path(path, spec_prefixes, spec_suffixes):
            continue

        items.append(ChangeItem(path=path, status=xy, group=group))

    items.sort(key=lambda it: (it.group.order, it.path.lower(), it.path, it.status))
    return items


def diff_args(path: str, mode: ChangeMode) -> list[str]:
    """Arguments for `git diff` of one path in the given mode"""
    args = ["-c", "color.ui=false", "-c", "core.pager=cat", "diff", "--no-ext-diff"]
    if mode == ChangeMode.STAGED:
        args.append("--cached")
    elif mode == ChangeMode.ALL:
        args.append("HEAD")
    # worktree: diff against the index
    args.extend(["--", path])
    return args


async def run_git(root: str, *args: str, timeout: float, ok_codes: tuple = (0,)) -> str:
    """Run `git -C root <args...>` and return decoded stdout"""
    try:
        proc = await asyncio.create_subprocess_exec(
            "git",
            "-C",
            root,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        raise FetchFailure("git executable not found")

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        logger.warning("git %s timed out after %ss in %s", " ".join(args), timeout, root)
        raise FetchFailure(f"git {args[0]} timed out after {timeout}s")

    if proc.returncode not in ok_codes:
        message = decode_diff_bytes(stderr).strip() or decode_diff_bytes(stdout).strip()
        logger.warning("git %s failed (%s): %s", " ".join(args), proc.returncode, message)
        raise FetchFailure(message or f"git exited with status {proc.returncode}")

    return decode_diff_bytes(stdout)


class GitChangeSource:
    """Changeset queries and diff fetches against a local git work tree"""

    def __init__(
        self,
        repo_dir: str = ".",
        status_timeout: float = 3.0,
        diff_timeout: float = 6.0,
        spec_prefixes: Iterable[str] = ("vibe-docs/spec/",),
        spec_suffixes: Iterable[str] = (".spec.mdx",),
    ):
        self.repo_dir = repo_dir
        self.status_timeout = status_timeout
        self.diff_timeout = diff_timeout
        self.spec_prefixes = tuple(spec_prefixes)
        self.spec_suffixes = tuple(spec_suffixes)

    @classmethod
    def from_config(cls, config: dict) -> "GitChangeSource":
        git_cfg = config.get("git", {})
        spec_cfg = config.get("specFilter", {})
        return cls(
            repo_dir=config.get("repoRoot", "."),
            status_timeout=read_timeout(git_cfg, "statusTimeout", 3.0),
            diff_timeout=read_timeout(git_cfg, "diffTimeout", 6.0),
            spec_prefixes=spec_cfg.get("prefixes", ()),
            spec_suffixes=spec_cfg.get("suffixes", ()),
        )

    async def git_root(self) -> str:
        try:
            out = await run_git(
                self.repo_dir, "rev-parse", "--show-toplevel", timeout=self.status_timeout
            )
        except FetchFailure as e:
            raise NotAGitRepository(self.repo_dir) from e
        root = out.strip()
        if not root:
            raise NotAGitRepository(self.repo_dir)
        return root

    async def list_changes(self, mode: ChangeMode, spec_only: bool) -> list[ChangeItem]:
        root = await self.git_root()
        out = await run_git(root, "status", "--porcelain=1", timeout=self.status_timeout)
        return parse_porcelain(out, mode, spec_only, self.spec_prefixes, self.spec_suffixes)

    async def fetch_diff(self, path: str, mode: ChangeMode) -> str:
        path = path.strip()
        if not path:
            raise InvalidRequest("missing path")

        root = await self.git_root()
        out = await run_git(root, *diff_args(path, mode), timeout=self.diff_timeout)
        if out.strip():
            return out

        if mode != ChangeMode.STAGED and await self._is_untracked(root, path):
            logger.debug("Diffing untracked %s against %s", path, DEV_NULL)
            return await run_git(
                root,
                "-c",
                "color.ui=false",
                "diff",
                "--no-ext-diff",
                "--no-index",
                "--",
                DEV_NULL,
                path,
                timeout=self.diff_timeout,
                ok_codes=(0, 1),
            )
        return ""

    async def _is_untracked(self, root: str, path: str) -> bool:
        out = await run_git(
            root, "status", "--porcelain=1", "--", path, timeout=self.status_timeout
        )
        return any(line.startswith("??") for line in split_lines(out))
