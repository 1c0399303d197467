"""Tests for project discovery."""

import pytest

from tests.test_utils import SimulatedTwiggitEnv
from twiggit.core.errors import ProjectNotFoundError
from twiggit.core.projects import ProjectRegistry, is_safe_name


def test_lists_only_git_repositories_sorted(env: SimulatedTwiggitEnv) -> None:
    env.add_project("widget")
    env.add_project("acme")
    (env.projects_dir / "not-a-repo").mkdir()
    (env.projects_dir / "README.md").write_text("hi", encoding="utf-8")

    registry = ProjectRegistry(env.projects_dir, env.build_git())

    assert registry.project_names() == ["acme", "widget"]
    assert registry.list_projects()[0].path == env.projects_dir / "acme"


def test_missing_projects_dir_is_empty(env: SimulatedTwiggitEnv) -> None:
    registry = ProjectRegistry(env.base / "missing", env.build_git())

    assert registry.list_projects() == []


def test_get_is_exact_and_case_sensitive(env: SimulatedTwiggitEnv) -> None:
    env.add_project("acme")
    registry = ProjectRegistry(env.projects_dir, env.build_git())

    assert registry.get("acme") is not None
    assert registry.get("Acme") is None
    assert registry.get("..") is None


def test_resolve_unknown_project_lists_available(env: SimulatedTwiggitEnv) -> None:
    env.add_project("acme")
    registry = ProjectRegistry(env.projects_dir, env.build_git())

    with pytest.raises(ProjectNotFoundError) as exc_info:
        registry.resolve("nope")

    assert exc_info.value.available == ["acme"]


@pytest.mark.parametrize(
    ("name", "expected"),
    [("acme", True), ("", False), (".", False), ("..", False), ("a/b", False)],
)
def test_is_safe_name(name: str, expected: bool) -> None:
    assert is_safe_name(name) is expected
