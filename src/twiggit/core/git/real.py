"""Production Git implementation.

This module provides the real Git implementation that runs actual git
commands through a CommandExecutor and translates git's output and exit codes
into WorktreeInfo values and domain errors.
"""

import logging
from pathlib import Path

from twiggit.core.errors import (
    BranchNotMergedError,
    GitExecutionError,
    InvalidBranchFormatError,
    SourceBranchNotFoundError,
    UncommittedChangesError,
    WorktreeAlreadyExistsError,
    WorktreeNotFoundError,
    sanitize_git_message,
)
from twiggit.core.git.abc import Git, WorktreeInfo
from twiggit.core.subprocess import (
    DEFAULT_TIMEOUT_SECONDS,
    CommandExecutor,
    CommandResult,
    RealCommandExecutor,
)

logger = logging.getLogger(__name__)


def parse_worktree_porcelain(output: str) -> list[WorktreeInfo]:
    """Parse ``git worktree list --porcelain`` output.

    Blocks are separated by blank lines. Bare entries are dropped; the first
    block is always the main checkout.
    """
    worktrees: list[WorktreeInfo] = []
    block: dict[str, str] = {}
    flags: set[str] = set()
    first = True

    def flush() -> None:
        nonlocal first
        if "worktree" not in block:
            return
        is_main = first
        first = False
        if "bare" in flags:
            return
        branch_ref = block.get("branch")
        detached = "detached" in flags or branch_ref is None
        branch = None
        if not detached and branch_ref is not None:
            branch = branch_ref.removeprefix("refs/heads/")
        info = WorktreeInfo(
            path=Path(block["worktree"]),
            branch=branch,
            commit=block.get("HEAD", ""),
            detached=detached,
            is_main=is_main,
            locked="locked" in flags,
            prunable="prunable" in flags,
        )
        info.validate()
        worktrees.append(info)

    for raw in output.splitlines():
        line = raw.strip()
        if not line:
            flush()
            block = {}
            flags = set()
            continue
        key, _, value = line.partition(" ")
        if key in ("worktree", "HEAD", "branch"):
            block[key] = value
        else:
            flags.add(key)

    flush()
    return worktrees


# ============================================================================
# Production Implementation
# ============================================================================


class RealGit(Git):
    """Production implementation using the git executable.

    All git operations execute actual git commands with the configured timeout.
    """

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._executor = executor if executor is not None else RealCommandExecutor()
        self._timeout = timeout

    def _git(self, cwd: Path, *args: str) -> CommandResult:
        return self._executor.run(["git", *args], cwd=cwd, timeout=self._timeout)

    def _check(self, result: CommandResult, operation: str) -> CommandResult:
        if not result.ok:
            raise GitExecutionError(operation, sanitize_git_message(result.stderr))
        return result

    def is_git_repository(self, path: Path) -> bool:
        git_path = path / ".git"
        try:
            git_path.lstat()
        except (FileNotFoundError, NotADirectoryError):
            return False
        return git_path.is_dir() or git_path.is_file()

    def list_worktrees(self, repo_root: Path) -> list[WorktreeInfo]:
        result = self._check(
            self._git(repo_root, "worktree", "list", "--porcelain"),
            "list worktrees",
        )
        return parse_worktree_porcelain(result.stdout)

    def list_local_branches(self, repo_root: Path) -> list[str]:
        result = self._check(
            self._git(repo_root, "branch", "--format=%(refname:short)"),
            "list local branches",
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def branch_exists(self, repo_root: Path, branch: str) -> bool:
        result = self._git(repo_root, "show-ref", "--verify", "--quiet", f"refs/heads/{branch}")
        return result.ok

    def ref_exists(self, repo_root: Path, ref: str) -> bool:
        result = self._git(repo_root, "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        return result.ok

    def create_worktree(
        self, repo_root: Path, branch: str, target_path: Path, source_branch: str
    ) -> None:
        if self.branch_exists(repo_root, branch):
            logger.debug("Branch %s exists, checking it out at %s", branch, target_path)
            result = self._git(repo_root, "worktree", "add", str(target_path), branch)
        else:
            logger.debug("Creating branch %s from %s at %s", branch, source_branch, target_path)
            result = self._git(
                repo_root, "worktree", "add", "-b", branch, str(target_path), source_branch
            )
        if result.ok:
            return

        stderr = result.stderr
        message = sanitize_git_message(stderr)
        lowered = stderr.lower()
        if "is not a valid branch name" in lowered:
            raise InvalidBranchFormatError(branch, "rejected by git")
        if "already checked out" in lowered or "already used by worktree" in lowered:
            raise WorktreeAlreadyExistsError(target_path, message)
        if "already registered" in lowered or "already exists" in lowered:
            raise WorktreeAlreadyExistsError(target_path)
        if "invalid reference" in lowered or "not a valid object name" in lowered:
            raise SourceBranchNotFoundError(source_branch)
        raise GitExecutionError(f"create worktree for '{branch}'", message)

    def remove_worktree(
        self, repo_root: Path, worktree_path: Path, *, force: bool, idempotent: bool = False
    ) -> None:
        args = ["worktree", "remove"]
        if force:
            args.append("--force")
        args.append(str(worktree_path))
        result = self._git(repo_root, *args)
        if result.ok:
            return

        lowered = result.stderr.lower()
        if "contains modified or untracked files" in lowered:
            raise UncommittedChangesError(worktree_path)
        if "is not a working tree" in lowered:
            if idempotent:
                logger.debug("%s already removed", worktree_path)
                return
            raise WorktreeNotFoundError(worktree_path)
        raise GitExecutionError(
            f"remove worktree at {worktree_path}", sanitize_git_message(result.stderr)
        )

    def prune_worktree_metadata(self, repo_root: Path) -> None:
        self._check(self._git(repo_root, "worktree", "prune"), "prune worktree metadata")

    def get_worktree_status(self, worktree_path: Path) -> WorktreeInfo:
        if not worktree_path.is_dir():
            raise WorktreeNotFoundError(worktree_path)

        clean = self.is_worktree_clean(worktree_path)
        branch = self.get_current_branch(worktree_path)
        head = self._check(self._git(worktree_path, "rev-parse", "HEAD"), "read HEAD")
        info = WorktreeInfo(
            path=worktree_path,
            branch=branch,
            commit=head.stdout.strip(),
            detached=branch is None,
            is_main=(worktree_path / ".git").is_dir(),
            clean=clean,
        )
        info.validate()
        return info

    def is_worktree_clean(self, worktree_path: Path) -> bool:
        result = self._check(
            self._git(worktree_path, "status", "--porcelain"),
            f"read status of {worktree_path}",
        )
        return result.stdout.strip() == ""

    def is_branch_merged(self, repo_root: Path, branch: str, into_branch: str) -> bool:
        result = self._git(repo_root, "merge-base", "--is-ancestor", branch, into_branch)
        if result.returncode == 0:
            return True
        if result.returncode == 1:
            return False
        raise GitExecutionError(
            f"check whether '{branch}' is merged into '{into_branch}'",
            sanitize_git_message(result.stderr),
        )

    def delete_branch(self, repo_root: Path, branch: str) -> None:
        result = self._git(repo_root, "branch", "-d", branch)
        if result.ok:
            return
        if "not fully merged" in result.stderr.lower():
            raise BranchNotMergedError(branch)
        raise GitExecutionError(f"delete branch '{branch}'", sanitize_git_message(result.stderr))

    def get_current_branch(self, cwd: Path) -> str | None:
        result = self._git(cwd, "rev-parse", "--abbrev-ref", "HEAD")
        if not result.ok:
            return None
        branch = result.stdout.strip()
        if branch == "HEAD":
            return None
        return branch

    def get_commit_timestamp(self, cwd: Path) -> int | None:
        result = self._git(cwd, "log", "-1", "--format=%ct")
        if not result.ok:
            return None
        value = result.stdout.strip()
        if not value.isdigit():
            return None
        return int(value)
