"""Fake implementation of Git for testing.

FakeGit keeps branches, worktrees and merge state in memory. Operations that
twiggit expects to change the filesystem (adding and removing worktrees) also
create and delete the worktree directory, so tests that check paths on disk
behave as they would against real git.
"""

import shutil
from dataclasses import replace
from pathlib import Path

from twiggit.core.errors import (
    BranchNotMergedError,
    GitExecutionError,
    SourceBranchNotFoundError,
    TwiggitError,
    UncommittedChangesError,
    WorktreeAlreadyExistsError,
    WorktreeNotFoundError,
)
from twiggit.core.git.abc import (
    Git,
    WorktreeInfo,
    find_worktree_for_branch,
    find_worktree_for_path,
)


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    Constructor Injection:
    - All state is provided via constructor parameters
    - Mutations (create/remove/delete) are tracked via read-only properties

    Examples:
        >>> git = FakeGit(
        ...     worktrees={repo: [WorktreeInfo(path=repo, branch="main", is_main=True)]},
        ...     local_branches={repo: ["main", "feature"]},
        ...     merged_branches={repo: {"feature"}},
        ... )
        >>> git.is_branch_merged(repo, "feature", "main")
        True
    """

    def __init__(
        self,
        *,
        worktrees: dict[Path, list[WorktreeInfo]] | None = None,
        local_branches: dict[Path, list[str]] | None = None,
        current_branches: dict[Path, str | None] | None = None,
        dirty_worktrees: set[Path] | None = None,
        merged_branches: dict[Path, set[str]] | None = None,
        merge_check_failures: set[str] | None = None,
        remove_failures: dict[Path, TwiggitError] | None = None,
        commit_timestamps: dict[Path, int] | None = None,
    ) -> None:
        """Create FakeGit with pre-configured state.

        Args:
            worktrees: Mapping of repo root to its worktrees (main checkout first)
            local_branches: Mapping of repo root to its local branch names
            current_branches: Mapping of directory to the branch checked out there
            dirty_worktrees: Worktree paths with uncommitted changes
            merged_branches: Mapping of repo root to branches merged into the default
            merge_check_failures: Branch names whose merge check raises GitExecutionError
            remove_failures: Worktree paths whose removal raises the given error
            commit_timestamps: Mapping of worktree path to HEAD commit timestamp
        """
        self._worktrees = {k: list(v) for k, v in (worktrees or {}).items()}
        self._local_branches = {k: list(v) for k, v in (local_branches or {}).items()}
        self._current_branches = dict(current_branches or {})
        self._dirty_worktrees = set(dirty_worktrees or set())
        self._merged_branches = {k: set(v) for k, v in (merged_branches or {}).items()}
        self._merge_check_failures = set(merge_check_failures or set())
        self._remove_failures = dict(remove_failures or {})
        self._commit_timestamps = dict(commit_timestamps or {})

        self._created_worktrees: list[tuple[Path, str, Path, str]] = []
        self._removed_worktrees: list[Path] = []
        self._deleted_branches: list[str] = []
        self._pruned_repos: list[Path] = []

    @property
    def created_worktrees(self) -> list[tuple[Path, str, Path, str]]:
        """(repo_root, branch, target_path, source_branch) for each create_worktree call."""
        return self._created_worktrees

    @property
    def removed_worktrees(self) -> list[Path]:
        return self._removed_worktrees

    @property
    def deleted_branches(self) -> list[str]:
        return self._deleted_branches

    @property
    def pruned_repos(self) -> list[Path]:
        return self._pruned_repos

    def _find(self, path: Path) -> tuple[Path, WorktreeInfo] | None:
        for repo_root, worktrees in self._worktrees.items():
            wt = find_worktree_for_path(worktrees, path)
            if wt is not None:
                return repo_root, wt
        return None

    def is_git_repository(self, path: Path) -> bool:
        return (path / ".git").exists()

    def list_worktrees(self, repo_root: Path) -> list[WorktreeInfo]:
        return list(self._worktrees.get(repo_root, []))

    def list_local_branches(self, repo_root: Path) -> list[str]:
        return list(self._local_branches.get(repo_root, []))

    def branch_exists(self, repo_root: Path, branch: str) -> bool:
        return branch in self._local_branches.get(repo_root, [])

    def ref_exists(self, repo_root: Path, ref: str) -> bool:
        return self.branch_exists(repo_root, ref)

    def create_worktree(
        self, repo_root: Path, branch: str, target_path: Path, source_branch: str
    ) -> None:
        worktrees = self._worktrees.setdefault(repo_root, [])
        if find_worktree_for_branch(worktrees, branch) is not None:
            raise WorktreeAlreadyExistsError(target_path, f"'{branch}' is already checked out")

        branches = self._local_branches.setdefault(repo_root, [])
        if branch not in branches:
            if source_branch not in branches:
                raise SourceBranchNotFoundError(source_branch)
            branches.append(branch)

        target_path.mkdir(parents=True, exist_ok=False)
        (target_path / ".git").write_text(
            f"gitdir: {repo_root}/.git/worktrees/{target_path.name}\n", encoding="utf-8"
        )
        worktrees.append(WorktreeInfo(path=target_path, branch=branch, commit="abc1234"))
        self._created_worktrees.append((repo_root, branch, target_path, source_branch))

    def remove_worktree(
        self, repo_root: Path, worktree_path: Path, *, force: bool, idempotent: bool = False
    ) -> None:
        if worktree_path in self._remove_failures:
            raise self._remove_failures[worktree_path]

        worktrees = self._worktrees.get(repo_root, [])
        match = [wt for wt in worktrees if wt.path == worktree_path]
        if not match:
            if idempotent:
                return
            raise WorktreeNotFoundError(worktree_path)

        if worktree_path in self._dirty_worktrees and not force:
            raise UncommittedChangesError(worktree_path)

        if worktree_path.exists():
            shutil.rmtree(worktree_path)
        worktrees.remove(match[0])
        self._dirty_worktrees.discard(worktree_path)
        self._removed_worktrees.append(worktree_path)

    def prune_worktree_metadata(self, repo_root: Path) -> None:
        self._pruned_repos.append(repo_root)

    def get_worktree_status(self, worktree_path: Path) -> WorktreeInfo:
        if not worktree_path.is_dir():
            raise WorktreeNotFoundError(worktree_path)
        found = self._find(worktree_path)
        if found is None:
            raise WorktreeNotFoundError(worktree_path)
        return replace(found[1], clean=worktree_path not in self._dirty_worktrees)

    def is_worktree_clean(self, worktree_path: Path) -> bool:
        return worktree_path not in self._dirty_worktrees

    def is_branch_merged(self, repo_root: Path, branch: str, into_branch: str) -> bool:
        if branch in self._merge_check_failures:
            raise GitExecutionError(f"check whether '{branch}' is merged", "bad object")
        return branch == into_branch or branch in self._merged_branches.get(repo_root, set())

    def delete_branch(self, repo_root: Path, branch: str) -> None:
        if branch not in self._merged_branches.get(repo_root, set()):
            raise BranchNotMergedError(branch)
        branches = self._local_branches.get(repo_root, [])
        if branch in branches:
            branches.remove(branch)
        self._deleted_branches.append(branch)

    def get_current_branch(self, cwd: Path) -> str | None:
        if cwd in self._current_branches:
            return self._current_branches[cwd]
        found = self._find(cwd)
        if found is None:
            return None
        return found[1].branch

    def get_commit_timestamp(self, cwd: Path) -> int | None:
        return self._commit_timestamps.get(cwd)
