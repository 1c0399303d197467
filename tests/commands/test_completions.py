"""Tests for shell completion callbacks."""

import click

from tests.test_utils import SimulatedTwiggitEnv
from twiggit.cli.cli import cli
from twiggit.cli.completions import complete_branch_targets, complete_existing_targets

TARGET = click.Argument(["target"])


def _click_context(obj: object) -> click.Context:
    return click.Context(cli, obj=obj)


def test_existing_targets_inside_project(env: SimulatedTwiggitEnv) -> None:
    repo = env.add_project("acme", branches=["no-worktree"])
    env.add_worktree("acme", "feature-x")
    ctx = _click_context(env.build_context(cwd=repo))

    items = complete_existing_targets(ctx, TARGET, "f")

    assert [item.value for item in items] == ["feature-x"]


def test_branch_targets_include_local_branches(env: SimulatedTwiggitEnv) -> None:
    repo = env.add_project("acme", branches=["no-worktree"])
    ctx = _click_context(env.build_context(cwd=repo))

    items = complete_branch_targets(ctx, TARGET, "no")

    assert [item.value for item in items] == ["no-worktree"]


def test_broken_context_completes_nothing(env: SimulatedTwiggitEnv) -> None:
    # cwd that does not exist makes context detection fail
    ctx = _click_context(env.build_context(cwd=env.base / "gone"))

    assert complete_existing_targets(ctx, TARGET, "") == []
