"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes.
"""

from twiggit.core.git.abc import (
    Git,
    WorktreeInfo,
    find_worktree_for_branch,
    find_worktree_for_path,
)
from twiggit.core.git.real import RealGit

__all__ = [
    "Git",
    "WorktreeInfo",
    "RealGit",
    "find_worktree_for_branch",
    "find_worktree_for_path",
]
