"""Classify the working directory relative to the managed directories.

The result is one of three tagged values:

- InProject: inside a project's main checkout under ``projects_dir``
- InWorktree: inside a managed worktree under ``worktrees_dir/<project>/<branch>``
- OutsideGit: anywhere else, including unrelated git repositories
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from twiggit.core.errors import ContextDetectionError
from twiggit.core.git.abc import Git
from twiggit.core.time.abc import Time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InProject:
    project: str
    path: Path


@dataclass(frozen=True)
class InWorktree:
    project: str
    branch: str
    path: Path


@dataclass(frozen=True)
class OutsideGit:
    path: Path


Context = InProject | InWorktree | OutsideGit


def context_project(context: Context) -> str | None:
    if isinstance(context, InProject | InWorktree):
        return context.project
    return None


def find_git_boundary(start: Path) -> Path | None:
    """Walk from ``start`` upward to the first directory holding a ``.git`` entry.

    Raises:
        ContextDetectionError: If a ``.git`` file is unreadable or is not a
            gitlink (does not contain ``gitdir:``)
    """
    for candidate in [start, *start.parents]:
        git_path = candidate / ".git"
        try:
            git_path.lstat()
        except (FileNotFoundError, NotADirectoryError):
            continue
        except OSError as e:
            raise ContextDetectionError(candidate, f"cannot inspect .git ({e.strerror})") from e

        if git_path.is_dir():
            return candidate

        try:
            content = git_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ContextDetectionError(candidate, f"cannot read {git_path}") from e
        if "gitdir:" not in content:
            raise ContextDetectionError(candidate, f"{git_path} is not a valid gitlink file")
        return candidate
    return None


class ContextResolver:
    """Determines where the user is standing.

    Classification results may be cached per resolved directory for
    ``cache_ttl`` seconds (0 disables caching). Only the classification is
    cached; nothing used to gate a mutation is.
    """

    def __init__(
        self,
        *,
        projects_dir: Path,
        worktrees_dir: Path,
        git: Git,
        time: Time,
        cache_ttl: float = 0.0,
    ) -> None:
        self._projects_dir = projects_dir.resolve()
        self._worktrees_dir = worktrees_dir.resolve()
        self._git = git
        self._time = time
        self._cache_ttl = cache_ttl
        self._cache: dict[Path, tuple[float, Context]] = {}

    def detect(self, cwd: Path) -> Context:
        """Classify ``cwd``.

        Raises:
            ContextDetectionError: If ``cwd`` does not exist or a ``.git``
                entry on the way up is malformed
        """
        if not cwd.exists():
            raise ContextDetectionError(cwd, "directory does not exist")
        resolved = cwd.resolve()

        if self._cache_ttl > 0:
            cached = self._cache.get(resolved)
            if cached is not None:
                stored_at, context = cached
                if self._time.monotonic() - stored_at < self._cache_ttl:
                    logger.debug("Context cache hit for %s", resolved)
                    return context
                del self._cache[resolved]

        context = self._classify(resolved)
        logger.debug("Detected %s for %s", context, resolved)

        if self._cache_ttl > 0:
            self._cache[resolved] = (self._time.monotonic(), context)
        return context

    def invalidate(self) -> None:
        self._cache.clear()

    def _classify(self, cwd: Path) -> Context:
        boundary = find_git_boundary(cwd)
        if boundary is None:
            return OutsideGit(path=cwd)

        if boundary.is_relative_to(self._worktrees_dir):
            parts = boundary.relative_to(self._worktrees_dir).parts
            if len(parts) >= 2:
                project = parts[0]
                branch = self._git.get_current_branch(boundary)
                if branch is None:
                    branch = "/".join(parts[1:])
                return InWorktree(project=project, branch=branch, path=boundary)

        if boundary.parent == self._projects_dir:
            return InProject(project=boundary.name, path=boundary)

        return OutsideGit(path=cwd)
