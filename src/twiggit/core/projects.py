"""Project discovery under the configured projects directory."""

import logging
from dataclasses import dataclass
from pathlib import Path

from twiggit.core.errors import ProjectNotFoundError
from twiggit.core.git.abc import Git

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Project:
    """A git repository living directly under ``projects_dir``."""

    name: str
    path: Path


def is_safe_name(name: str) -> bool:
    """A project or path segment name must be a single, non-traversing component."""
    return bool(name) and "/" not in name and "\\" not in name and name not in (".", "..")


class ProjectRegistry:
    """Enumerates projects by scanning ``projects_dir`` on every call."""

    def __init__(self, projects_dir: Path, git: Git) -> None:
        self._projects_dir = projects_dir
        self._git = git

    @property
    def projects_dir(self) -> Path:
        return self._projects_dir

    def list_projects(self) -> list[Project]:
        """Immediate subdirectories that are git repositories, sorted by name."""
        if not self._projects_dir.is_dir():
            logger.debug("Projects dir %s does not exist", self._projects_dir)
            return []

        projects: list[Project] = []
        for entry in sorted(self._projects_dir.iterdir(), key=lambda p: p.name):
            if not entry.is_dir():
                continue
            if not self._git.is_git_repository(entry):
                logger.debug("Skipping %s: not a git repository", entry)
                continue
            projects.append(Project(name=entry.name, path=entry))
        return projects

    def project_names(self) -> list[str]:
        return [project.name for project in self.list_projects()]

    def get(self, name: str) -> Project | None:
        """Exact, case-sensitive lookup. Returns None instead of raising."""
        if not is_safe_name(name):
            return None
        path = self._projects_dir / name
        if not path.is_dir() or not self._git.is_git_repository(path):
            return None
        return Project(name=name, path=path)

    def resolve(self, name: str) -> Project:
        """Look up a project by name.

        Raises:
            ProjectNotFoundError: If no such project exists; the error lists
                the available projects
        """
        project = self.get(name)
        if project is None:
            raise ProjectNotFoundError(name, self.project_names())
        return project
