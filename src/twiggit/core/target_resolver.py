"""Turn a target argument into a concrete project, branch and path.

Target forms:

- ``""``: whatever the current context points at
- ``"<branch>"``: a branch of the current project, or a project name
- ``"<project>/<branch>"``: fully qualified; the branch part may contain ``/``
- ``"<project>"``: a project's main checkout

Resolution is split into a pure classification step that returns a tagged
Resolution, and a resolve step that turns the classification into paths or
raises. Neither step mutates anything.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from twiggit.core.context_resolver import Context, InProject, InWorktree, context_project
from twiggit.core.errors import CannotInferProjectError, InvalidTargetError, ProjectNotFoundError
from twiggit.core.git.abc import Git
from twiggit.core.projects import Project, ProjectRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedAsBranch:
    """``branch`` of ``project``. ``alternatives`` names projects the spec also matched."""

    project: str
    branch: str
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolvedAsProject:
    project: str


@dataclass(frozen=True)
class Ambiguous:
    spec: str
    candidates: tuple[str, ...]
    message: str
    suggestion: str


Resolution = ResolvedAsBranch | ResolvedAsProject | Ambiguous


@dataclass(frozen=True)
class ResolvedTarget:
    """A concrete location. ``branch`` is None for a project's main checkout."""

    project: Project
    branch: str | None
    path: Path
    is_main_checkout: bool


def check_target_syntax(spec: str) -> None:
    """Reject path traversal and empty components.

    Raises:
        InvalidTargetError: If ``spec`` contains ``..`` or an empty component
    """
    if ".." in spec:
        raise InvalidTargetError(spec, "path traversal is not allowed")
    if "\\" in spec:
        raise InvalidTargetError(spec, "backslashes are not allowed")
    if spec and any(part == "" for part in spec.split("/")):
        raise InvalidTargetError(spec, "empty path component")


def cannot_infer_error(ambiguous: Ambiguous) -> CannotInferProjectError:
    return CannotInferProjectError(
        ambiguous.spec,
        ambiguous.message,
        candidates=list(ambiguous.candidates),
        suggestion=ambiguous.suggestion,
    )


class TargetResolver:
    def __init__(
        self,
        *,
        registry: ProjectRegistry,
        git: Git,
        worktrees_dir: Path,
        default_branch: str,
    ) -> None:
        self._registry = registry
        self._git = git
        self._worktrees_dir = worktrees_dir
        self._default_branch = default_branch

    def worktree_path(self, project: str, branch: str) -> Path:
        return self._worktrees_dir / project / branch

    def is_default_branch(self, branch: str) -> bool:
        return branch == self._default_branch

    def classify(self, context: Context, spec: str) -> Resolution:
        """Decide what ``spec`` means in ``context`` without touching paths.

        Raises:
            InvalidTargetError: If ``spec`` is syntactically unsafe
            ProjectNotFoundError: If a qualified spec names an unknown project
        """
        check_target_syntax(spec)
        current = context_project(context)

        if spec == "":
            if isinstance(context, InWorktree):
                return ResolvedAsBranch(project=context.project, branch=context.branch)
            if isinstance(context, InProject):
                return ResolvedAsProject(project=context.project)
            return self._cannot_infer(
                spec,
                "No target given and not inside a project or worktree",
                "Available targets: ",
            )

        if "/" in spec:
            project_name, branch = spec.split("/", 1)
            qualified = self._registry.get(project_name)
            if qualified is None and current is not None and self._is_branch_of(current, spec):
                # "feature/x" inside a project names a nested branch, not a project
                logger.debug("Target %s resolved as nested branch of %s", spec, current)
                return ResolvedAsBranch(project=current, branch=spec)
            project = qualified or self._registry.resolve(project_name)
            logger.debug("Qualified target %s -> %s/%s", spec, project.name, branch)
            return ResolvedAsBranch(project=project.name, branch=branch)

        if current is not None:
            other_project = self._registry.get(spec)
            alternatives = (spec,) if other_project is not None and spec != current else ()
            if self.is_default_branch(spec) or self._is_branch_of(current, spec):
                logger.debug("Target %s resolved as branch of %s", spec, current)
                return ResolvedAsBranch(project=current, branch=spec, alternatives=alternatives)
            if other_project is not None:
                logger.debug("Target %s resolved as project", spec)
                return ResolvedAsProject(project=other_project.name)
            logger.debug("Target %s matched nothing; assuming branch of %s", spec, current)
            return ResolvedAsBranch(project=current, branch=spec)

        if self._registry.get(spec) is not None:
            return ResolvedAsProject(project=spec)
        return self._cannot_infer(
            spec,
            f"Cannot infer a project for '{spec}' outside a project or worktree",
            "Use 'project/branch' or --all. Available projects: ",
        )

    def resolve(self, context: Context, spec: str) -> ResolvedTarget:
        """Resolve ``spec`` to a project, branch and path.

        The path is computed, not checked for existence.

        Raises:
            CannotInferProjectError: If no project can be determined
            ProjectNotFoundError: If the project does not exist
            InvalidTargetError: If ``spec`` is syntactically unsafe
        """
        resolution = self.classify(context, spec)

        if isinstance(resolution, Ambiguous):
            raise cannot_infer_error(resolution)

        project = self._registry.resolve(resolution.project)

        if isinstance(resolution, ResolvedAsProject):
            return ResolvedTarget(
                project=project, branch=None, path=project.path, is_main_checkout=True
            )

        if self.is_default_branch(resolution.branch):
            return ResolvedTarget(
                project=project,
                branch=resolution.branch,
                path=project.path,
                is_main_checkout=True,
            )

        if spec == "" and isinstance(context, InWorktree):
            path = context.path
        else:
            path = self.worktree_path(project.name, resolution.branch)
        return ResolvedTarget(
            project=project, branch=resolution.branch, path=path, is_main_checkout=False
        )

    def resolve_branch(self, context: Context, spec: str) -> tuple[Project, str]:
        """Resolve a spec that must name a branch, as ``create`` and ``delete`` need.

        Unlike :meth:`resolve`, a bare name inside a project is always a
        branch of that project, and ``project/rest`` falls back to a nested
        branch name when ``project`` is not registered.

        Raises:
            CannotInferProjectError: Outside any project without ``project/branch``
            ProjectNotFoundError: The named or current project does not exist
            InvalidTargetError: If ``spec`` is syntactically unsafe
        """
        check_target_syntax(spec)
        current = context_project(context)

        if spec == "":
            if isinstance(context, InWorktree):
                project = self._registry.resolve(context.project)
                return project, self._branch_from_path(project.name, context)
            if isinstance(context, InProject):
                return self._registry.resolve(context.project), self._default_branch
            ambiguous = self._cannot_infer(
                spec,
                "No target given and not inside a project or worktree",
                "Use 'project/branch'. Available projects: ",
            )
            raise cannot_infer_error(ambiguous)

        if "/" in spec:
            project_name, branch = spec.split("/", 1)
            project = self._registry.get(project_name)
            if project is not None:
                return project, branch
            if current is None:
                raise ProjectNotFoundError(project_name, self._registry.project_names())
            return self._registry.resolve(current), spec

        if current is not None:
            return self._registry.resolve(current), spec

        ambiguous = self._cannot_infer(
            spec,
            f"Cannot infer a project for '{spec}' outside a project or worktree",
            "Use 'project/branch'. Available projects: ",
        )
        raise cannot_infer_error(ambiguous)

    def _branch_from_path(self, project: str, context: InWorktree) -> str:
        root = (self._worktrees_dir / project).resolve()
        path = context.path.resolve()
        if path.is_relative_to(root) and path != root:
            return path.relative_to(root).as_posix()
        return context.branch

    def suggest(self, context: Context, partial: str, *, existing_only: bool) -> list[str]:
        """Completion candidates for ``partial``.

        Args:
            context: Where the user is standing
            partial: Text typed so far
            existing_only: Offer only existing worktrees (plus the default
                branch) instead of every local branch
        """
        candidates: set[str] = set()

        if "/" in partial:
            project_name = partial.split("/", 1)[0]
            project = self._registry.get(project_name)
            if project is None:
                return []
            for branch in self._branch_candidates(project, existing_only=existing_only):
                candidates.add(f"{project.name}/{branch}")
        else:
            current = context_project(context)
            if current is not None:
                project = self._registry.get(current)
                if project is not None:
                    candidates.update(self._branch_candidates(project, existing_only=existing_only))
            candidates.update(self._registry.project_names())

        return sorted(c for c in candidates if c.startswith(partial))

    def managed_branches(self, project: Project) -> list[str]:
        """Branches with a directory under ``worktrees_dir/<project>``."""
        root = (self._worktrees_dir / project.name).resolve()
        branches: list[str] = []
        for wt in self._git.list_worktrees(project.path):
            if wt.is_main or wt.detached or wt.branch is None:
                continue
            if wt.path.resolve().is_relative_to(root):
                branches.append(wt.branch)
        return branches

    def _branch_candidates(self, project: Project, *, existing_only: bool) -> set[str]:
        branches = set(self.managed_branches(project))
        branches.add(self._default_branch)
        if not existing_only:
            branches.update(self._git.list_local_branches(project.path))
        return branches

    def _is_branch_of(self, project_name: str, branch: str) -> bool:
        if self.worktree_path(project_name, branch).is_dir():
            return True
        project = self._registry.get(project_name)
        if project is None:
            return False
        return self._git.branch_exists(project.path, branch)

    def _cannot_infer(self, spec: str, message: str, suggestion_prefix: str) -> Ambiguous:
        names = tuple(self._registry.project_names())
        listing = ", ".join(names) if names else "(none)"
        return Ambiguous(
            spec=spec,
            candidates=names,
            message=message,
            suggestion=f"{suggestion_prefix}{listing}",
        )
