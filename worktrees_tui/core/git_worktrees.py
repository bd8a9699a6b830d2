"""Git working-tree enumeration and sync counters.

Every function here fails soft: a missing git binary, a failing git command
or malformed output yields an empty list / zero counters, never an exception.
"No trees" is a valid, displayable state.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Iterable, Optional, Sequence, cast

from git import Repo
from git.exc import GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError

from worktrees_tui.constants import PINNED_BRANCHES
from worktrees_tui.core.models import SortMode, SyncCounters, WorkingTree

logger = logging.getLogger(__name__)

_HEADS_PREFIX = "refs/heads/"
_COMMIT_SHORT_LEN = 7


def _dir_mtime(path: str) -> float:
    try:
        return os.stat(path).st_mtime
    except OSError:
        return 0.0


def _block_to_tree(block: dict[str, str]) -> Optional[WorkingTree]:
    path = block.get("worktree")
    if not path:
        return None
    branch = block.get("branch", "")
    if branch.startswith(_HEADS_PREFIX):
        branch = branch[len(_HEADS_PREFIX) :]
    return WorkingTree(
        path=path,
        name=os.path.basename(path.rstrip("/")) or path,
        branch=branch,
        commit_short=block.get("HEAD", "")[:_COMMIT_SHORT_LEN],
        mtime=_dir_mtime(path),
    )


def parse_porcelain_list(text: str) -> list[WorkingTree]:
    """Parse ``git worktree list --porcelain`` output.

    Groups are separated by blank lines. A group without a ``worktree`` line
    is ignored; duplicate paths keep their first occurrence.
    """
    trees: list[WorkingTree] = []
    seen: set[str] = set()
    block: dict[str, str] = {}

    def flush() -> None:
        tree = _block_to_tree(block)
        if tree and tree.path not in seen:
            seen.add(tree.path)
            trees.append(tree)
        block.clear()

    for line in text.splitlines():
        if not line.strip():
            if block:
                flush()
            continue
        key, _, value = line.partition(" ")
        block.setdefault(key, value)
    if block:
        flush()
    return trees


def list_working_trees(root: str) -> list[WorkingTree]:
    """List the working trees of the repository containing ``root``."""
    try:
        repo = Repo(root, search_parent_directories=True)
        output = cast(str, repo.git.worktree("list", "--porcelain"))
    except (InvalidGitRepositoryError, NoSuchPathError):
        logger.warning("Not a git repository: %s", root)
        return []
    except (GitCommandError, GitCommandNotFound) as exc:
        logger.warning("git worktree list failed in %s: %s", root, exc)
        return []
    return parse_porcelain_list(output)


def sort_working_trees(trees: Iterable[WorkingTree], mode: SortMode) -> list[WorkingTree]:
    """Order trees for display.

    ``main``/``master`` are always pinned first. The rest are ordered by most
    recent mtime (RECENT) or by branch name (BRANCH). ``sorted`` is stable, so
    ties keep their listing order.
    """
    items = list(trees)
    pinned = [t for t in items if t.branch in PINNED_BRANCHES]
    rest = [t for t in items if t.branch not in PINNED_BRANCHES]
    if mode is SortMode.BRANCH:
        rest = sorted(rest, key=lambda t: t.branch or t.name)
    else:
        rest = sorted(rest, key=lambda t: t.mtime, reverse=True)
    return pinned + rest


def parse_ahead_behind(text: str) -> tuple[int, int]:
    """Parse ``rev-list --left-right --count @{upstream}...HEAD`` into (ahead, behind)."""
    parts = text.split()
    if len(parts) != 2:
        return 0, 0
    try:
        behind, ahead = int(parts[0]), int(parts[1])
    except ValueError:
        return 0, 0
    return max(ahead, 0), max(behind, 0)


def parse_status(text: str) -> tuple[int, int, int]:
    """Count (staged, modified, untracked) from ``git status --porcelain``."""
    staged = modified = untracked = 0
    for line in text.splitlines():
        if len(line) < 2:
            continue
        index_col, tree_col = line[0], line[1]
        if index_col == "?" and tree_col == "?":
            untracked += 1
            continue
        if index_col not in (" ", "!"):
            staged += 1
        if tree_col not in (" ", "!"):
            modified += 1
    return staged, modified, untracked


def _git_output(repo: Repo, command: str, *args: str) -> Optional[str]:
    try:
        return cast(str, getattr(repo.git, command)(*args))
    except (GitCommandError, GitCommandNotFound) as exc:
        logger.debug("git %s failed in %s: %s", command, repo.working_dir, exc)
        return None


def read_counters(path: str) -> SyncCounters:
    """Query ahead/behind and status for one tree; each query degrades to zero on its own."""
    try:
        repo = Repo(path)
    except (InvalidGitRepositoryError, NoSuchPathError):
        logger.debug("Skipping counters for %s: not a git working tree", path)
        return SyncCounters()

    sync_out = _git_output(repo, "rev_list", "--left-right", "--count", "@{upstream}...HEAD")
    status_out = _git_output(repo, "status", "--porcelain")
    ahead, behind = parse_ahead_behind(sync_out) if sync_out else (0, 0)
    staged, modified, untracked = parse_status(status_out) if status_out else (0, 0, 0)
    return SyncCounters(ahead=ahead, behind=behind, staged=staged, modified=modified, untracked=untracked)


async def fetch_counters_for_path(path: str) -> SyncCounters:
    return await asyncio.to_thread(read_counters, path)


async def fetch_sync_counters(paths: Sequence[str]) -> dict[str, SyncCounters]:
    """Fetch counters for all paths in parallel and return the complete batch."""
    results = await asyncio.gather(
        *(fetch_counters_for_path(path) for path in paths),
        return_exceptions=True,
    )
    counters: dict[str, SyncCounters] = {}
    for path, result in zip(paths, results):
        if isinstance(result, SyncCounters):
            counters[path] = result
        else:
            logger.warning("Sync counters failed for %s: %s", path, result)
            counters[path] = SyncCounters()
    return counters
