"""Configuration data structures and loading.

Provides immutable configuration loaded from
``$XDG_CONFIG_HOME/twiggit/config.toml`` (or ``~/.config/twiggit/config.toml``)
once at the CLI entry point. Environment variables override the directory and
default-branch settings.
"""

import logging
import os
import tomllib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit

from twiggit.core.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PROJECTS_DIR = "TWIGGIT_PROJECTS_DIR"
ENV_WORKTREES_DIR = "TWIGGIT_WORKTREES_DIR"
ENV_DEFAULT_SOURCE_BRANCH = "TWIGGIT_DEFAULT_SOURCE_BRANCH"

DEFAULT_SOURCE_BRANCH = "main"
DEFAULT_CACHE_TTL = 5.0
DEFAULT_CLI_TIMEOUT = 10.0
DEFAULT_MAX_CONCURRENT = 4
DEFAULT_PROTECTED_BRANCHES = ("main", "master")


@dataclass(frozen=True)
class TwiggitConfig:
    """Immutable configuration data.

    Loaded once at CLI entry point and stored in TwiggitContext.
    All fields are read-only after construction.
    """

    projects_dir: Path
    worktrees_dir: Path
    default_source_branch: str = DEFAULT_SOURCE_BRANCH
    cache_ttl: float = DEFAULT_CACHE_TTL
    cli_timeout: float = DEFAULT_CLI_TIMEOUT
    concurrent_ops: bool = False
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    protected_branches: tuple[str, ...] = field(default=DEFAULT_PROTECTED_BRANCHES)

    @staticmethod
    def defaults(home: Path) -> "TwiggitConfig":
        return TwiggitConfig(projects_dir=home / "Projects", worktrees_dir=home / "Worktrees")

    def is_protected(self, branch: str) -> bool:
        """Protected branches always include the default source branch."""
        return branch == self.default_source_branch or branch in self.protected_branches


def default_config_path(env: Mapping[str, str], home: Path) -> Path:
    xdg = env.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "twiggit" / "config.toml"
    return home / ".config" / "twiggit" / "config.toml"


def _expand_dir(value: object, key: str, *, path: Path | None, home: Path) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(path, f"'{key}' must be a non-empty string")
    if value == "~" or value.startswith("~/"):
        expanded = home / value[2:] if value != "~" else home
    else:
        expanded = Path(value)
    if not expanded.is_absolute():
        raise ConfigError(path, f"'{key}' must be an absolute path, got '{value}'")
    return expanded


def _table(data: Mapping[str, Any], key: str, *, path: Path | None) -> Mapping[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, Mapping):
        raise ConfigError(path, f"'{key}' must be a table")
    return value


def _number(
    table: Mapping[str, Any], key: str, default: float, *, path: Path | None, allow_zero: bool
) -> float:
    value = table.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigError(path, f"'{key}' must be a number")
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigError(path, f"'{key}' must be positive, got {value}")
    return float(value)


def parse_config(
    data: Mapping[str, Any], *, path: Path | None, env: Mapping[str, str], home: Path
) -> TwiggitConfig:
    """Build a validated TwiggitConfig from parsed TOML data and the environment.

    Args:
        data: Parsed TOML document (empty when no file exists)
        path: Source file, used only in error messages
        env: Environment variables consulted for overrides
        home: Home directory used for ``~`` expansion

    Raises:
        ConfigError: If any field has the wrong type or an invalid value
    """
    projects_raw = env.get(ENV_PROJECTS_DIR) or data.get("projects_dir", "~/Projects")
    worktrees_raw = env.get(ENV_WORKTREES_DIR) or data.get("worktrees_dir", "~/Worktrees")
    projects_dir = _expand_dir(projects_raw, "projects_dir", path=path, home=home)
    worktrees_dir = _expand_dir(worktrees_raw, "worktrees_dir", path=path, home=home)

    default_branch = env.get(ENV_DEFAULT_SOURCE_BRANCH) or data.get(
        "default_source_branch", DEFAULT_SOURCE_BRANCH
    )
    if not isinstance(default_branch, str) or not default_branch.strip():
        raise ConfigError(path, "'default_source_branch' must be a non-empty string")

    context_detection = _table(data, "context_detection", path=path)
    git = _table(data, "git", path=path)
    services = _table(data, "services", path=path)
    validation = _table(data, "validation", path=path)

    cache_ttl = _number(
        context_detection, "cache_ttl", DEFAULT_CACHE_TTL, path=path, allow_zero=True
    )
    cli_timeout = _number(git, "cli_timeout", DEFAULT_CLI_TIMEOUT, path=path, allow_zero=False)

    concurrent_ops = services.get("concurrent_ops", False)
    if not isinstance(concurrent_ops, bool):
        raise ConfigError(path, "'concurrent_ops' must be true or false")
    max_concurrent = services.get("max_concurrent", DEFAULT_MAX_CONCURRENT)
    if isinstance(max_concurrent, bool) or not isinstance(max_concurrent, int):
        raise ConfigError(path, "'max_concurrent' must be an integer")
    if max_concurrent <= 0:
        raise ConfigError(path, f"'max_concurrent' must be positive, got {max_concurrent}")

    protected = validation.get("protected_branches", list(DEFAULT_PROTECTED_BRANCHES))
    if not isinstance(protected, list) or not all(isinstance(b, str) for b in protected):
        raise ConfigError(path, "'protected_branches' must be a list of strings")

    return TwiggitConfig(
        projects_dir=projects_dir,
        worktrees_dir=worktrees_dir,
        default_source_branch=default_branch.strip(),
        cache_ttl=cache_ttl,
        cli_timeout=cli_timeout,
        concurrent_ops=concurrent_ops,
        max_concurrent=max_concurrent,
        protected_branches=tuple(protected),
    )


def render_config(config: TwiggitConfig) -> str:
    """Serialize a config to TOML text with a leading comment."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("twiggit configuration"))
    doc["projects_dir"] = str(config.projects_dir)
    doc["worktrees_dir"] = str(config.worktrees_dir)
    doc["default_source_branch"] = config.default_source_branch

    context_detection = tomlkit.table()
    context_detection["cache_ttl"] = config.cache_ttl
    doc["context_detection"] = context_detection

    git = tomlkit.table()
    git["cli_timeout"] = config.cli_timeout
    doc["git"] = git

    services = tomlkit.table()
    services["concurrent_ops"] = config.concurrent_ops
    services["max_concurrent"] = config.max_concurrent
    doc["services"] = services

    validation = tomlkit.table()
    validation["protected_branches"] = list(config.protected_branches)
    doc["validation"] = validation

    return tomlkit.dumps(doc)


class ConfigStore(ABC):
    """Abstract interface for config operations.

    Provides dependency injection for config access, enabling in-memory
    implementations for tests without touching the filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if a config file exists."""
        ...

    @abstractmethod
    def load(self) -> TwiggitConfig:
        """Load config, falling back to defaults when no file exists.

        Raises:
            ConfigError: If the file is malformed or has invalid values
        """
        ...

    @abstractmethod
    def save(self, config: TwiggitConfig) -> None:
        """Persist config."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the config file (for messages and debugging)."""
        ...


class FilesystemConfigStore(ConfigStore):
    """Production implementation that reads/writes the XDG config file."""

    def __init__(self, *, env: Mapping[str, str] | None = None, home: Path | None = None) -> None:
        self._env = env if env is not None else os.environ
        self._home = home if home is not None else Path.home()

    def exists(self) -> bool:
        return self.path().is_file()

    def load(self) -> TwiggitConfig:
        config_path = self.path()
        data: dict[str, Any] = {}
        if config_path.is_file():
            logger.debug("Loading config from %s", config_path)
            try:
                data = tomllib.loads(config_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(config_path, str(e)) from e
            except OSError as e:
                raise ConfigError(config_path, f"cannot read file ({e.strerror})") from e
        else:
            logger.debug("No config at %s, using defaults", config_path)
        return parse_config(data, path=config_path, env=self._env, home=self._home)

    def save(self, config: TwiggitConfig) -> None:
        """Write config as TOML, creating the parent directory if needed."""
        config_path = self.path()
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            config_path.write_text(render_config(config), encoding="utf-8")
        except OSError as e:
            raise ConfigError(config_path, f"cannot write file ({e.strerror})") from e

    def path(self) -> Path:
        return default_config_path(self._env, self._home)


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: TwiggitConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = no config file yet)
        """
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> TwiggitConfig:
        if self._config is None:
            return TwiggitConfig.defaults(Path("/fake/home"))
        return self._config

    def save(self, config: TwiggitConfig) -> None:
        self._config = config

    def path(self) -> Path:
        return Path("/fake/config/twiggit/config.toml")
