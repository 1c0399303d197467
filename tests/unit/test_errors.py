"""Tests for domain errors and git message sanitizing."""

from pathlib import Path

from twiggit.core.errors import (
    BranchNotMergedError,
    CannotInferProjectError,
    GitExecutionError,
    GitTimeoutError,
    ProjectNotFoundError,
    TwiggitError,
    WorktreeNotFoundError,
    sanitize_git_message,
)


def test_sanitize_strips_prefixes_and_hints() -> None:
    stderr = (
        "hint: Using 'master' as the name for the initial branch.\n"
        "fatal: invalid reference: nope\n"
        "error: second line\n"
    )
    assert sanitize_git_message(stderr) == "invalid reference: nope"


def test_sanitize_empty_stderr() -> None:
    assert sanitize_git_message("") == "git reported an unknown error"
    assert sanitize_git_message("hint: only a hint\n\n") == "git reported an unknown error"


def test_project_not_found_lists_available_projects() -> None:
    err = ProjectNotFoundError("nope", ["acme", "widget"])

    assert err.message == "Project 'nope' not found"
    assert err.suggestion == "Available projects: acme, widget"


def test_project_not_found_without_projects_has_no_suggestion() -> None:
    assert ProjectNotFoundError("nope").suggestion is None


def test_worktree_not_found_names_project_and_branch() -> None:
    err = WorktreeNotFoundError(Path("/w/acme/x"), project="acme", branch="x")

    assert "acme/x" in err.message
    assert "twiggit list" in (err.suggestion or "")


def test_branch_not_merged_messages() -> None:
    assert "not fully merged" in BranchNotMergedError("x").message
    assert "not merged into 'main'" in BranchNotMergedError("x", "main").message


def test_git_errors_share_base_class() -> None:
    timeout = GitTimeoutError(["git", "worktree", "list"], 2.5)
    execution = GitExecutionError("list worktrees", "boom")

    assert timeout.message == "git worktree list timed out after 2.5s"
    assert execution.message == "Failed to list worktrees: boom"
    assert isinstance(timeout, TwiggitError)
    assert timeout.kind != execution.kind


def test_cannot_infer_is_ambiguous_target() -> None:
    err = CannotInferProjectError("x", "cannot infer", candidates=["a"], suggestion="Use a/x")

    assert err.kind == "cannot_infer_project"
    assert err.candidates == ["a"]
    assert err.suggestion == "Use a/x"
