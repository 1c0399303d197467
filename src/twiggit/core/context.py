"""Application context with dependency injection."""

import os
from dataclasses import dataclass
from pathlib import Path

import click

from twiggit.cli.output import user_output
from twiggit.core.config import ConfigStore, FilesystemConfigStore, TwiggitConfig
from twiggit.core.confirmation import Confirmation, StreamConfirmation
from twiggit.core.context_resolver import Context, ContextResolver
from twiggit.core.git.abc import Git
from twiggit.core.git.real import RealGit
from twiggit.core.navigation import NavigationPlanner
from twiggit.core.projects import ProjectRegistry
from twiggit.core.target_resolver import TargetResolver
from twiggit.core.time.abc import Time
from twiggit.core.time.real import RealTime
from twiggit.core.worktree_manager import WorktreeLifecycleManager


@dataclass(frozen=True)
class TwiggitContext:
    """Immutable context holding all dependencies for twiggit operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    git: Git
    time: Time
    confirmation: Confirmation
    config_store: ConfigStore
    config: TwiggitConfig
    cwd: Path  # Current working directory at CLI invocation
    registry: ProjectRegistry
    context_resolver: ContextResolver
    target_resolver: TargetResolver
    manager: WorktreeLifecycleManager
    navigator: NavigationPlanner

    def detect_context(self) -> Context:
        """Classify ``cwd``. Raises ContextDetectionError for a broken checkout."""
        return self.context_resolver.detect(self.cwd)

    @staticmethod
    def build(
        *,
        git: Git,
        time: Time,
        confirmation: Confirmation,
        config_store: ConfigStore,
        config: TwiggitConfig,
        cwd: Path,
    ) -> "TwiggitContext":
        """Wire the services on top of the given integrations."""
        registry = ProjectRegistry(config.projects_dir, git)
        target_resolver = TargetResolver(
            registry=registry,
            git=git,
            worktrees_dir=config.worktrees_dir,
            default_branch=config.default_source_branch,
        )
        return TwiggitContext(
            git=git,
            time=time,
            confirmation=confirmation,
            config_store=config_store,
            config=config,
            cwd=cwd,
            registry=registry,
            context_resolver=ContextResolver(
                projects_dir=config.projects_dir,
                worktrees_dir=config.worktrees_dir,
                git=git,
                time=time,
                cache_ttl=config.cache_ttl,
            ),
            target_resolver=target_resolver,
            manager=WorktreeLifecycleManager(
                git=git, registry=registry, resolver=target_resolver, config=config
            ),
            navigator=NavigationPlanner(target_resolver),
        )

    @staticmethod
    def for_test(
        git: Git | None = None,
        time: Time | None = None,
        confirmation: Confirmation | None = None,
        config_store: ConfigStore | None = None,
        config: TwiggitConfig | None = None,
        cwd: Path | None = None,
    ) -> "TwiggitContext":
        """Create test context with optional pre-configured integration classes.

        Args:
            git: Optional Git implementation. If None, creates empty FakeGit.
            time: Optional Time implementation. If None, creates FakeTime.
            confirmation: Optional Confirmation. If None, creates a
                FakeConfirmation that declines.
            config_store: Optional ConfigStore. If None, creates
                InMemoryConfigStore holding ``config``.
            config: Optional TwiggitConfig. If None, uses test defaults rooted
                at the sentinel path.
            cwd: Optional current working directory. If None, uses the sentinel path.

        Returns:
            TwiggitContext configured with provided values and test defaults

        Example:
            >>> git = FakeGit(worktrees={repo: [WorktreeInfo(path=repo, branch="main")]})
            >>> ctx = TwiggitContext.for_test(git=git, config=config, cwd=repo)
        """
        from tests.fakes.confirmation import FakeConfirmation
        from tests.fakes.git import FakeGit
        from tests.fakes.time import FakeTime
        from tests.test_utils import sentinel_path

        from twiggit.core.config import InMemoryConfigStore

        if git is None:
            git = FakeGit()

        if time is None:
            time = FakeTime()

        if confirmation is None:
            confirmation = FakeConfirmation(answers=[])

        if config is None:
            config = TwiggitConfig(
                projects_dir=sentinel_path() / "Projects",
                worktrees_dir=sentinel_path() / "Worktrees",
                cache_ttl=0,
            )

        if config_store is None:
            config_store = InMemoryConfigStore(config=config)

        return TwiggitContext.build(
            git=git,
            time=time,
            confirmation=confirmation,
            config_store=config_store,
            config=config,
            cwd=cwd or sentinel_path(),
        )


def safe_cwd() -> tuple[Path | None, str | None]:
    """Get current working directory, detecting if it no longer exists.

    Returns:
        tuple[Path | None, str | None]: (path, error_message)
        - If successful: (Path, None)
        - If directory deleted: (None, error_message)

    Note:
        This is an acceptable use of try/except since we're wrapping a
        stdlib API (Path.cwd()) that provides no way to check the condition first.
    """
    try:
        cwd_path = Path.cwd()
        return (cwd_path, None)
    except (FileNotFoundError, OSError):
        return (
            None,
            "Current working directory no longer exists",
        )


def create_context() -> TwiggitContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Raises:
        ConfigError: If the config file exists but is invalid
    """
    # 1. Capture cwd (no deps)
    cwd_result, error_msg = safe_cwd()
    if cwd_result is None:
        assert error_msg is not None
        user_output(click.style("Error: ", fg="red") + error_msg)
        user_output("\nThe directory you're running from has been deleted.")
        user_output("Please change to a valid directory and try again.")
        raise SystemExit(1)

    # 2. Load config (defaults when no file exists)
    config_store = FilesystemConfigStore(env=os.environ)
    config = config_store.load()

    # 3. Create integration classes and wire services
    return TwiggitContext.build(
        git=RealGit(timeout=config.cli_timeout),
        time=RealTime(),
        confirmation=StreamConfirmation(),
        config_store=config_store,
        config=config,
        cwd=cwd_result,
    )
