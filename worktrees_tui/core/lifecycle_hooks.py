"""Worktree creation/removal with user lifecycle hooks.

Hooks are shell commands from the ``hooks`` config section. They receive:

    WORKTREE_ACTION   add | remove
    WORKTREE_NAME     directory name of the tree
    WORKTREE_PATH     absolute tree path
    WORKTREE_BRANCH   branch name ("" when detached)
    WORKTREE_ROOT     repository root the dashboard watches
    WORKTREE_COMMIT   short commit (only when known)

A failing before-hook aborts the operation. A failing after-hook is reported
as a partial success; the completed git operation is never rolled back.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Literal, Optional, cast

from git import Repo
from git.exc import GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError

from worktrees_tui.config.schema import HooksConfig
from worktrees_tui.core.models import WorkingTree

logger = logging.getLogger(__name__)

HookStage = Literal["before_add", "after_add", "before_remove", "after_remove"]
HOOK_TIMEOUT_S = 60


@dataclass(frozen=True)
class HookResult:
    stage: HookStage
    success: bool
    output: str = ""


@dataclass(frozen=True)
class LifecycleOutcome:
    """Result of an add/remove; ``partial`` means git succeeded but the after-hook failed."""

    success: bool
    message: str
    partial: bool = False
    path: Optional[str] = None


def hook_environment(
    action: Literal["add", "remove"],
    tree: WorkingTree,
    root: str,
) -> dict[str, str]:
    env = {
        "WORKTREE_ACTION": action,
        "WORKTREE_NAME": tree.name,
        "WORKTREE_PATH": tree.path,
        "WORKTREE_BRANCH": tree.branch,
        "WORKTREE_ROOT": root,
    }
    if tree.commit_short:
        env["WORKTREE_COMMIT"] = tree.commit_short
    return env


def run_hook(stage: HookStage, command: Optional[str], env: dict[str, str], cwd: str) -> HookResult:
    """Run one hook command. An unset hook counts as success."""
    if not command:
        return HookResult(stage, True)
    try:
        result = subprocess.run(
            command,
            shell=True,
            cwd=cwd,
            env={**os.environ, **env},
            capture_output=True,
            text=True,
            timeout=HOOK_TIMEOUT_S,
        )
    except subprocess.TimeoutExpired:
        logger.warning("%s hook timed out after %ds", stage, HOOK_TIMEOUT_S)
        return HookResult(stage, False, f"timed out after {HOOK_TIMEOUT_S}s")
    except OSError as e:
        logger.warning("%s hook failed to start: %s", stage, e)
        return HookResult(stage, False, str(e))

    output = (result.stderr or result.stdout).strip()
    if result.returncode != 0:
        logger.warning("%s hook exited %d: %s", stage, result.returncode, output)
        return HookResult(stage, False, output or f"exit {result.returncode}")
    return HookResult(stage, True, output)


def _git_error(exc: GitCommandError) -> str:
    """Pull git's own message out of GitPython's formatted ``stderr: '...'`` text."""
    stderr = str(exc.stderr or "").strip()
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:") :].strip()
        if len(stderr) >= 2 and stderr[0] == stderr[-1] == "'":
            stderr = stderr[1:-1]
    return stderr.strip() or f"exit {exc.status}"


def _git(repo: Repo, command: str, *args: str) -> tuple[bool, str]:
    try:
        output = getattr(repo.git, command)(*args)
    except GitCommandError as exc:
        return False, _git_error(exc)
    except GitCommandNotFound as exc:
        return False, str(exc)
    return True, cast(str, output).strip()


def _branch_exists(repo: Repo, branch: str) -> bool:
    ok, _ = _git(repo, "rev_parse", "--verify", "--quiet", f"refs/heads/{branch}")
    return ok


def _open_repo(root: str) -> Optional[Repo]:
    try:
        return Repo(root, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        logger.warning("Not a git repository: %s", root)
        return None


def add_working_tree(
    root: str,
    path: str,
    branch: str,
    hooks: HooksConfig,
) -> LifecycleOutcome:
    """Create a worktree at ``path`` on ``branch`` (created when missing)."""
    repo = _open_repo(root)
    if repo is None:
        return LifecycleOutcome(False, f"Cannot create worktree: {root} is not a git repository")

    path = os.path.abspath(path)
    tree = WorkingTree(path=path, name=os.path.basename(path), branch=branch, commit_short="")
    env = hook_environment("add", tree, root)

    before = run_hook("before_add", hooks.before_add, env, root)
    if not before.success:
        return LifecycleOutcome(False, f"before_add hook failed: {before.output}")

    args = ["add"]
    if not _branch_exists(repo, branch):
        args += ["-b", branch, path]
    else:
        args += [path, branch]
    ok, output = _git(repo, "worktree", *args)
    if not ok:
        return LifecycleOutcome(False, f"git worktree add failed: {output}")
    logger.info("Created worktree at %s", path)

    ok, head = _git(repo, "rev_parse", "--short=7", f"refs/heads/{branch}")
    if ok and head:
        env["WORKTREE_COMMIT"] = head

    after = run_hook("after_add", hooks.after_add, env, path)
    if not after.success:
        return LifecycleOutcome(True, f"Created {tree.name}, but after_add hook failed: {after.output}", True, path)
    return LifecycleOutcome(True, f"Created {tree.name}", path=path)


def remove_working_tree(
    root: str,
    tree: WorkingTree,
    hooks: HooksConfig,
    force: bool = False,
) -> LifecycleOutcome:
    """Remove ``tree`` with ``git worktree remove``."""
    repo = _open_repo(root)
    if repo is None:
        return LifecycleOutcome(False, f"Cannot remove worktree: {root} is not a git repository")

    env = hook_environment("remove", tree, root)

    before = run_hook("before_remove", hooks.before_remove, env, tree.path)
    if not before.success:
        return LifecycleOutcome(False, f"before_remove hook failed: {before.output}")

    args = ["remove"]
    if force:
        args.append("--force")
    args.append(tree.path)
    ok, output = _git(repo, "worktree", *args)
    if not ok:
        return LifecycleOutcome(False, f"git worktree remove failed: {output}")
    logger.info("Removed worktree at %s", tree.path)

    after = run_hook("after_remove", hooks.after_remove, env, root)
    if not after.success:
        return LifecycleOutcome(
            True, f"Removed {tree.name}, but after_remove hook failed: {after.output}", True, tree.path
        )
    return LifecycleOutcome(True, f"Removed {tree.name}", path=tree.path)
