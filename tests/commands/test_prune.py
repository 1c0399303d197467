"""Tests for the prune command."""

from click.testing import CliRunner

from tests.fakes.confirmation import FakeConfirmation
from tests.test_utils import simulated_twiggit_env
from twiggit.cli.cli import cli
from twiggit.core.errors import GitExecutionError
from twiggit.core.worktree_manager import PRUNE_ALL_PROMPT


def test_prune_current_project() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        merged = env.add_worktree("acme", "merged")
        env.add_worktree("acme", "open")
        git = env.build_git(merged_branches={repo: {"merged"}})
        ctx = env.build_context(git=git, cwd=repo)

        result = runner.invoke(cli, ["prune"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "Deleted 1 worktree(s):" in result.stderr
        assert "Skipped 1 worktree(s):" in result.stderr
        assert "acme/open: not merged into main" in result.stderr
        assert "Prune Complete" in result.stderr
        assert result.stdout == ""
        assert not merged.exists()


def test_prune_dry_run() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        merged = env.add_worktree("acme", "merged")
        git = env.build_git(merged_branches={repo: {"merged"}})
        ctx = env.build_context(git=git)

        result = runner.invoke(cli, ["prune", "acme", "--dry-run"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "Dry run - no changes made:" in result.stderr
        assert "Would delete 1 worktree(s):" in result.stderr
        assert "Prune Preview" in result.stderr
        assert merged.is_dir()
        assert git.removed_worktrees == []


def test_prune_delete_branches() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        env.add_worktree("acme", "merged")
        git = env.build_git(merged_branches={repo: {"merged"}})
        ctx = env.build_context(git=git, cwd=repo)

        result = runner.invoke(cli, ["prune", "--delete-branches"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "branch deleted: merged" in result.stderr
        assert git.deleted_branches == ["merged"]


def test_prune_nothing_to_do() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        ctx = env.build_context(cwd=repo)

        result = runner.invoke(cli, ["prune"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "No merged worktrees to prune." in result.stderr


def test_prune_all_declined() -> None:
    """Declining the prompt cancels with exit code 0 and touches nothing."""
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        merged = env.add_worktree("acme", "merged")
        git = env.build_git(merged_branches={repo: {"merged"}})
        confirmation = FakeConfirmation(answers=["n"])
        ctx = env.build_context(git=git, confirmation=confirmation)

        result = runner.invoke(cli, ["prune", "--all"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "Prune cancelled." in result.stderr
        assert confirmation.prompts == [PRUNE_ALL_PROMPT]
        assert merged.is_dir()


def test_prune_all_confirmed() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        acme = env.add_project("acme")
        widget = env.add_project("widget")
        env.add_worktree("acme", "merged")
        env.add_worktree("widget", "merged")
        git = env.build_git(merged_branches={acme: {"merged"}, widget: {"merged"}})
        ctx = env.build_context(git=git, confirmation=FakeConfirmation(answers=["y"]))

        result = runner.invoke(cli, ["prune", "-a"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "Deleted 2 worktree(s):" in result.stderr


def test_prune_all_force_skips_prompt() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        env.add_worktree("acme", "merged")
        git = env.build_git(merged_branches={repo: {"merged"}})
        confirmation = FakeConfirmation(answers=[])
        ctx = env.build_context(git=git, confirmation=confirmation)

        result = runner.invoke(cli, ["prune", "--all", "--force"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert confirmation.prompts == []
        assert "Deleted 1 worktree(s):" in result.stderr


def test_prune_failure_exits_nonzero_after_continuing() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        stuck = env.add_worktree("acme", "a-stuck")
        freed = env.add_worktree("acme", "b-freed")
        git = env.build_git(
            merged_branches={repo: {"a-stuck", "b-freed"}},
            remove_failures={stuck: GitExecutionError("remove worktree", "locked")},
        )
        ctx = env.build_context(git=git, cwd=repo)

        result = runner.invoke(cli, ["prune"], obj=ctx)

        assert result.exit_code == 1
        assert "Failed 1 worktree(s):" in result.stderr
        assert "acme/a-stuck: Failed to remove worktree: locked" in result.stderr
        assert "Prune Finished With Errors" in result.stderr
        assert not freed.exists()


def test_prune_outside_without_project() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        env.add_project("acme")

        result = runner.invoke(cli, ["prune"], obj=env.build_context())

        assert result.exit_code == 1
        assert "Available projects: acme" in result.stderr


def test_prune_skips_dirty_worktree_unless_forced() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        dirty = env.add_worktree("acme", "merged")
        (dirty / "notes.txt").write_text("draft\n", encoding="utf-8")
        git = env.build_git(merged_branches={repo: {"merged"}}, dirty_worktrees={dirty})
        ctx = env.build_context(git=git, cwd=repo)

        refused = runner.invoke(cli, ["prune"], obj=ctx)

        assert refused.exit_code == 0, refused.output
        assert "acme/merged: uncommitted changes (use --force to override)" in refused.stderr
        assert (dirty / "notes.txt").exists()

        forced = runner.invoke(cli, ["prune", "--force"], obj=ctx)

        assert forced.exit_code == 0, forced.output
        assert "Deleted 1 worktree(s):" in forced.stderr
        assert not dirty.exists()


def test_prune_specific_worktree_prints_project_path() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        target = env.add_worktree("acme", "feature/done")
        other = env.add_worktree("acme", "also-done")
        git = env.build_git(merged_branches={repo: {"feature/done", "also-done"}})
        ctx = env.build_context(git=git)

        result = runner.invoke(cli, ["prune", "acme/feature/done"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "Deleted 1 worktree(s):" in result.stderr
        assert result.stdout == f"{repo}\n"
        assert not target.exists()
        assert other.is_dir()


def test_prune_specific_worktree_dry_run_prints_nothing_to_stdout() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        target = env.add_worktree("acme", "done")
        git = env.build_git(merged_branches={repo: {"done"}})
        ctx = env.build_context(git=git)

        result = runner.invoke(cli, ["prune", "acme/done", "--dry-run"], obj=ctx)

        assert result.exit_code == 0, result.output
        assert "Would delete 1 worktree(s):" in result.stderr
        assert result.stdout == ""
        assert target.is_dir()


def test_prune_specific_worktree_with_all_is_rejected() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        repo = env.add_project("acme")
        target = env.add_worktree("acme", "done")
        git = env.build_git(merged_branches={repo: {"done"}})
        confirmation = FakeConfirmation(answers=["y"])
        ctx = env.build_context(git=git, confirmation=confirmation)

        result = runner.invoke(cli, ["prune", "acme/done", "--all"], obj=ctx)

        assert result.exit_code == 1
        assert "cannot be combined with --all" in result.stderr
        assert confirmation.prompts == []
        assert target.is_dir()


def test_prune_specific_worktree_not_found() -> None:
    runner = CliRunner()
    with simulated_twiggit_env(runner) as env:
        env.add_project("acme")

        result = runner.invoke(cli, ["prune", "acme/nope"], obj=env.build_context())

        assert result.exit_code == 1
        assert "Worktree 'acme/nope' not found" in result.stderr
        assert result.stdout == ""
