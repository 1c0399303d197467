"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
codebase more testable and maintainable.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation running git through a CommandExecutor
- FakeGit (tests/fakes/git.py): In-memory implementation for unit tests
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from twiggit.core.errors import InvalidWorktreeInfoError


@dataclass(frozen=True)
class WorktreeInfo:
    """Information about a single git worktree.

    ``clean`` is None until a status query has filled it in.
    """

    path: Path
    branch: str | None
    commit: str = ""
    detached: bool = False
    is_main: bool = False
    clean: bool | None = None
    locked: bool = False
    prunable: bool = False

    def validate(self) -> None:
        """Check structural invariants.

        Raises:
            InvalidWorktreeInfoError: If the path is empty or an attached
                worktree has no branch
        """
        if not str(self.path) or str(self.path) == ".":
            raise InvalidWorktreeInfoError("Worktree path cannot be empty")
        if not self.detached and not self.branch:
            raise InvalidWorktreeInfoError(
                f"Worktree at {self.path} is neither detached nor on a branch"
            )
        if self.detached and self.branch is not None:
            raise InvalidWorktreeInfoError(
                f"Detached worktree at {self.path} must not carry a branch"
            )


def find_worktree_for_branch(worktrees: list[WorktreeInfo], branch: str) -> WorktreeInfo | None:
    """Find the worktree that has the given branch checked out."""
    for wt in worktrees:
        if not wt.detached and wt.branch == branch:
            return wt
    return None


def find_worktree_for_path(worktrees: list[WorktreeInfo], path: Path) -> WorktreeInfo | None:
    """Find the worktree registered at ``path`` (compared after resolving)."""
    target = path.resolve()
    for wt in worktrees:
        if wt.path.resolve() == target:
            return wt
    return None


# ============================================================================
# Abstract Interface
# ============================================================================


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    @abstractmethod
    def is_git_repository(self, path: Path) -> bool:
        """Check whether ``path`` contains a ``.git`` directory or gitlink file."""
        ...

    @abstractmethod
    def list_worktrees(self, repo_root: Path) -> list[WorktreeInfo]:
        """List all worktrees in the repository.

        The first entry is the main checkout and has ``is_main=True``.
        """
        ...

    @abstractmethod
    def list_local_branches(self, repo_root: Path) -> list[str]:
        """List all local branch names in the repository."""
        ...

    @abstractmethod
    def branch_exists(self, repo_root: Path, branch: str) -> bool:
        """Check whether ``refs/heads/<branch>`` exists."""
        ...

    @abstractmethod
    def ref_exists(self, repo_root: Path, ref: str) -> bool:
        """Check whether ``ref`` resolves to a commit (branch, tag or sha)."""
        ...

    @abstractmethod
    def create_worktree(
        self, repo_root: Path, branch: str, target_path: Path, source_branch: str
    ) -> None:
        """Add a worktree for ``branch`` at ``target_path``.

        Checks out the branch if it already exists locally, otherwise creates
        it from ``source_branch``.

        Raises:
            WorktreeAlreadyExistsError: Path registered or branch checked out elsewhere
            SourceBranchNotFoundError: ``source_branch`` is not a valid reference
            InvalidBranchFormatError: git rejects the branch name
            GitExecutionError: Any other git failure
        """
        ...

    @abstractmethod
    def remove_worktree(
        self, repo_root: Path, worktree_path: Path, *, force: bool, idempotent: bool = False
    ) -> None:
        """Remove a worktree.

        Args:
            repo_root: Path to the repository root
            worktree_path: Path to the worktree to remove
            force: Remove even with uncommitted changes
            idempotent: Treat "not a working tree" as success

        Raises:
            UncommittedChangesError: Worktree is dirty and force is False
            WorktreeNotFoundError: Path is not a worktree and idempotent is False
        """
        ...

    @abstractmethod
    def prune_worktree_metadata(self, repo_root: Path) -> None:
        """Drop administrative entries for worktrees whose directories are gone."""
        ...

    @abstractmethod
    def get_worktree_status(self, worktree_path: Path) -> WorktreeInfo:
        """Describe a checked-out worktree with ``clean`` populated.

        Raises:
            WorktreeNotFoundError: If the path does not exist
        """
        ...

    @abstractmethod
    def is_worktree_clean(self, worktree_path: Path) -> bool:
        """Check that ``git status --porcelain`` reports nothing."""
        ...

    @abstractmethod
    def is_branch_merged(self, repo_root: Path, branch: str, into_branch: str) -> bool:
        """Check whether ``branch`` is an ancestor of ``into_branch``."""
        ...

    @abstractmethod
    def delete_branch(self, repo_root: Path, branch: str) -> None:
        """Safely delete a local branch (never forced).

        Raises:
            BranchNotMergedError: git refuses because the branch is not fully merged
        """
        ...

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch, or None when detached."""
        ...

    @abstractmethod
    def get_commit_timestamp(self, cwd: Path) -> int | None:
        """Get the unix timestamp of HEAD, or None if it cannot be read."""
        ...
