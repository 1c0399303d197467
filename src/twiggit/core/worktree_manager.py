"""Worktree lifecycle: create, delete, prune and list.

Every mutation follows the same order: validate inputs without spawning git,
run read-only checks that can refuse the operation, then mutate. git's own
``worktree add``/``worktree remove`` are atomic; the only thing rolled back is
the parent directories ``create`` makes for nested branch names.
"""

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeVar

from twiggit.core.branch_validation import validate_branch_name
from twiggit.core.config import TwiggitConfig
from twiggit.core.confirmation import Confirmation
from twiggit.core.context_resolver import Context, OutsideGit, context_project
from twiggit.core.errors import (
    BranchNotMergedError,
    CannotInferProjectError,
    GitError,
    InvalidTargetError,
    ProtectedResourceError,
    SourceBranchNotFoundError,
    TwiggitError,
    UncommittedChangesError,
    WorktreeAlreadyExistsError,
    WorktreeNotFoundError,
)
from twiggit.core.git.abc import Git, WorktreeInfo
from twiggit.core.projects import Project, ProjectRegistry
from twiggit.core.target_resolver import TargetResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

PRUNE_ALL_PROMPT = "This will prune merged worktrees across all projects. Continue? (y/n): "

PruneStatus = Literal["deleted", "skipped", "failed", "would_delete"]
SortOrder = Literal["name", "date"]


@dataclass(frozen=True)
class DeleteOptions:
    force: bool = False
    keep_branch: bool = False
    merged_only: bool = False
    change_dir: bool = False


@dataclass(frozen=True)
class DeleteResult:
    worktree_path: Path
    branch: str
    branch_deleted: bool
    branch_delete_warning: str | None
    navigation_path: Path | None


@dataclass(frozen=True)
class PruneScope:
    """One project (explicit or from context), one worktree, or every project.

    ``branch`` narrows a single-project prune to the worktree of that branch
    and cannot be combined with ``all_projects``.
    """

    project: str | None = None
    all_projects: bool = False
    branch: str | None = None


@dataclass(frozen=True)
class PruneOptions:
    dry_run: bool = False
    force: bool = False
    delete_branches: bool = False


@dataclass(frozen=True)
class PruneOutcome:
    project: str
    branch: str | None
    path: Path
    status: PruneStatus
    reason: str | None = None
    branch_deleted: bool = False


@dataclass(frozen=True)
class PruneReport:
    outcomes: tuple[PruneOutcome, ...] = ()
    cancelled: bool = False
    navigation_path: Path | None = None

    def _with_status(self, status: PruneStatus) -> list[PruneOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def deleted(self) -> list[PruneOutcome]:
        return self._with_status("deleted")

    @property
    def skipped(self) -> list[PruneOutcome]:
        return self._with_status("skipped")

    @property
    def failed(self) -> list[PruneOutcome]:
        return self._with_status("failed")

    @property
    def candidates(self) -> list[PruneOutcome]:
        return self._with_status("would_delete")

    @property
    def has_failures(self) -> bool:
        return any(o.status == "failed" for o in self.outcomes)


@dataclass(frozen=True)
class WorktreeListing:
    """One row of ``twiggit list``."""

    project: str
    branch: str | None
    path: Path
    commit: str
    detached: bool
    is_main: bool
    clean: bool | None
    timestamp: int | None
    orphan: bool = False


@dataclass(frozen=True)
class _PrunePlan:
    project: Project
    candidates: tuple[WorktreeInfo, ...]
    outcomes: tuple[PruneOutcome, ...]


def requires_confirmation(candidate_count: int, *, force: bool, all_projects: bool) -> bool:
    """Bulk prunes across every project ask first unless forced or empty."""
    return all_projects and not force and candidate_count > 0


def _is_within(path: Path, root: Path) -> bool:
    return path.resolve().is_relative_to(root.resolve())


def scan_worktree_dirs(root: Path) -> list[Path]:
    """Directories under ``root`` that look like worktree checkouts.

    A directory holding ``.git`` is a checkout. Directories without one are
    descended into (branch names with ``/`` nest), and leaves without
    ``.git`` are returned as-is so callers can flag them.
    """
    if not root.is_dir():
        return []
    found: list[Path] = []
    for child in sorted(root.iterdir(), key=lambda p: p.name):
        if not child.is_dir() or child.is_symlink():
            continue
        if (child / ".git").exists():
            found.append(child)
            continue
        nested = scan_worktree_dirs(child)
        if nested:
            found.extend(nested)
        else:
            found.append(child)
    return found


class WorktreeLifecycleManager:
    """Creates, deletes, prunes and lists managed worktrees."""

    def __init__(
        self,
        *,
        git: Git,
        registry: ProjectRegistry,
        resolver: TargetResolver,
        config: TwiggitConfig,
    ) -> None:
        self._git = git
        self._registry = registry
        self._resolver = resolver
        self._config = config

    @property
    def default_branch(self) -> str:
        return self._config.default_source_branch

    def _managed_root(self, project: Project) -> Path:
        return self._config.worktrees_dir / project.name

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    def create(self, project: str, branch: str, source_branch: str | None = None) -> WorktreeInfo:
        """Create ``worktrees_dir/<project>/<branch>``.

        Raises:
            InvalidBranchFormatError: Before any git call
            ProjectNotFoundError: Unknown project
            SourceBranchNotFoundError: Explicit source does not exist
            WorktreeAlreadyExistsError: Target directory already exists, or
                git reports the branch checked out elsewhere
        """
        validate_branch_name(branch)
        proj = self._registry.resolve(project)

        if self._resolver.is_default_branch(branch):
            raise WorktreeAlreadyExistsError(
                proj.path, f"'{branch}' is checked out in the main checkout"
            )

        source = source_branch or self.default_branch
        if source_branch is not None and not self._git.ref_exists(proj.path, source_branch):
            raise SourceBranchNotFoundError(source_branch, proj.name)

        target = self._resolver.worktree_path(proj.name, branch)
        if target.exists():
            raise WorktreeAlreadyExistsError(target)

        target.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Creating worktree %s/%s from %s at %s", proj.name, branch, source, target)
        try:
            self._git.create_worktree(proj.path, branch, target, source)
        except TwiggitError:
            self._remove_empty_parents(target, self._config.worktrees_dir)
            raise
        return self._git.get_worktree_status(target)

    # ------------------------------------------------------------------
    # delete
    # ------------------------------------------------------------------

    def delete(
        self, project: str, branch: str, options: DeleteOptions, context: Context
    ) -> DeleteResult:
        """Delete one worktree and, unless kept, its branch.

        Raises:
            ProtectedResourceError: Target is the main checkout, or the caller
                stands inside it without ``change_dir``
            WorktreeNotFoundError: Target directory does not exist
            UncommittedChangesError: Dirty worktree without ``force``
            BranchNotMergedError: ``merged_only`` and the branch is not merged
        """
        proj = self._registry.resolve(project)
        if self._resolver.is_default_branch(branch):
            raise ProtectedResourceError(
                f"Cannot delete the main checkout of '{proj.name}'",
                suggestion="The main checkout is managed by you, not twiggit",
            )

        target = self._resolver.worktree_path(proj.name, branch)
        if not target.is_dir():
            raise WorktreeNotFoundError(target, project=proj.name, branch=branch)
        if target.resolve() == proj.path.resolve():
            raise ProtectedResourceError(f"Cannot delete the main checkout of '{proj.name}'")

        inside = not isinstance(context, OutsideGit) and _is_within(context.path, target)
        if inside and not options.change_dir:
            raise ProtectedResourceError(
                f"Cannot delete the worktree you are currently in: {target}",
                suggestion="Use --change-dir (-C) to move to the main checkout first",
            )

        if not options.force and not self._git.is_worktree_clean(target):
            raise UncommittedChangesError(target)

        if options.merged_only and not self._git.is_branch_merged(
            proj.path, branch, self.default_branch
        ):
            raise BranchNotMergedError(branch, self.default_branch)

        self._git.remove_worktree(proj.path, target, force=options.force)
        self._git.prune_worktree_metadata(proj.path)
        self._remove_empty_parents(target, self._managed_root(proj))

        branch_deleted = False
        warning: str | None = None
        if not options.keep_branch:
            branch_deleted, warning = self._delete_branch_safely(proj, branch)

        navigation_path = proj.path if options.change_dir and inside else None
        return DeleteResult(
            worktree_path=target,
            branch=branch,
            branch_deleted=branch_deleted,
            branch_delete_warning=warning,
            navigation_path=navigation_path,
        )

    def _delete_branch_safely(self, project: Project, branch: str) -> tuple[bool, str | None]:
        try:
            self._git.delete_branch(project.path, branch)
        except (BranchNotMergedError, GitError) as e:
            logger.debug("Kept branch %s: %s", branch, e.message)
            return False, f"Branch '{branch}' was kept: {e.message}"
        return True, None

    def _remove_empty_parents(self, path: Path, stop: Path) -> None:
        """Remove directories left empty by nested branch names, up to ``stop``."""
        current = path.parent
        stop = stop.resolve()
        while current.resolve() != stop and _is_within(current, stop):
            if not current.is_dir() or any(current.iterdir()):
                return
            current.rmdir()
            current = current.parent

    # ------------------------------------------------------------------
    # prune
    # ------------------------------------------------------------------

    def prune(
        self,
        scope: PruneScope,
        options: PruneOptions,
        context: Context,
        confirmation: Confirmation,
    ) -> PruneReport:
        """Remove merged worktrees.

        A failure on one worktree is recorded and never stops the others.
        Declining the all-projects prompt returns a cancelled report before
        anything is touched. Pruning a single worktree that gets deleted
        reports the project's main checkout as the place to navigate to.

        Raises:
            InvalidTargetError: ``scope.branch`` together with ``all_projects``
            WorktreeNotFoundError: ``scope.branch`` has no worktree in the project
        """
        if scope.branch is not None and scope.all_projects:
            raise InvalidTargetError(
                f"{scope.project or ''}/{scope.branch}",
                "a specific worktree cannot be combined with --all",
            )
        projects = self._projects_for(scope.project, scope.all_projects, context, "prune")
        plans = self._map_projects(
            projects, lambda p: self._plan_prune(p, context, options, scope.branch)
        )
        plan_outcomes = [o for plan in plans for o in plan.outcomes]

        if options.dry_run:
            would_delete = [
                PruneOutcome(
                    project=plan.project.name,
                    branch=wt.branch,
                    path=wt.path,
                    status="would_delete",
                )
                for plan in plans
                for wt in plan.candidates
            ]
            return PruneReport(outcomes=tuple(_sorted_outcomes(plan_outcomes + would_delete)))

        candidate_count = sum(len(plan.candidates) for plan in plans)
        if requires_confirmation(
            candidate_count, force=options.force, all_projects=scope.all_projects
        ):
            if not confirmation.confirm(PRUNE_ALL_PROMPT):
                logger.debug("Prune declined by user")
                return PruneReport(cancelled=True)

        executed = self._map_projects(
            [plan for plan in plans if plan.candidates],
            lambda plan: self._execute_prune(plan, options),
        )
        deleted = [o for outcomes in executed for o in outcomes]

        navigation_path: Path | None = None
        if scope.branch is not None and any(o.status == "deleted" for o in deleted):
            navigation_path = plans[0].project.path
        return PruneReport(
            outcomes=tuple(_sorted_outcomes(plan_outcomes + deleted)),
            navigation_path=navigation_path,
        )

    def _plan_prune(
        self, project: Project, context: Context, options: PruneOptions, only_branch: str | None
    ) -> _PrunePlan:
        managed_root = self._managed_root(project)
        outcomes: list[PruneOutcome] = []
        candidates: list[WorktreeInfo] = []

        try:
            worktrees = self._git.list_worktrees(project.path)
        except TwiggitError as e:
            failed = PruneOutcome(
                project=project.name,
                branch=None,
                path=project.path,
                status="failed",
                reason=e.message,
            )
            return _PrunePlan(project=project, candidates=(), outcomes=(failed,))

        if only_branch is not None:
            target = (managed_root / only_branch).resolve()
            worktrees = [
                wt
                for wt in worktrees
                if not wt.is_main and (wt.branch == only_branch or wt.path.resolve() == target)
            ]
            if not worktrees:
                raise WorktreeNotFoundError(
                    managed_root / only_branch, project=project.name, branch=only_branch
                )
        else:
            registered = {wt.path.resolve() for wt in worktrees}
            for orphan in scan_worktree_dirs(managed_root):
                if orphan.resolve() not in registered:
                    outcomes.append(
                        PruneOutcome(
                            project=project.name,
                            branch=None,
                            path=orphan,
                            status="skipped",
                            reason="not registered with git",
                        )
                    )

        for wt in worktrees:
            if wt.is_main or not _is_within(wt.path, managed_root):
                continue
            reason = self._skip_reason(project, wt, context)
            if reason is None:
                try:
                    if not self._git.is_branch_merged(
                        project.path, wt.branch or "", self.default_branch
                    ):
                        reason = f"not merged into {self.default_branch}"
                    elif (
                        not options.force
                        and wt.path.is_dir()
                        and not self._git.is_worktree_clean(wt.path)
                    ):
                        reason = "uncommitted changes (use --force to override)"
                except TwiggitError as e:
                    outcomes.append(
                        PruneOutcome(
                            project=project.name,
                            branch=wt.branch,
                            path=wt.path,
                            status="failed",
                            reason=e.message,
                        )
                    )
                    continue
            if reason is not None:
                outcomes.append(
                    PruneOutcome(
                        project=project.name,
                        branch=wt.branch,
                        path=wt.path,
                        status="skipped",
                        reason=reason,
                    )
                )
            else:
                candidates.append(wt)

        logger.debug("Prune plan for %s: %d candidate(s)", project.name, len(candidates))
        return _PrunePlan(project=project, candidates=tuple(candidates), outcomes=tuple(outcomes))

    def _skip_reason(self, project: Project, wt: WorktreeInfo, context: Context) -> str | None:
        if not isinstance(context, OutsideGit) and _is_within(context.path, wt.path):
            return "current worktree"
        if wt.detached or wt.branch is None:
            return "detached HEAD"
        if self._config.is_protected(wt.branch):
            return "protected branch"
        return None

    def _execute_prune(self, plan: _PrunePlan, options: PruneOptions) -> list[PruneOutcome]:
        project = plan.project
        outcomes: list[PruneOutcome] = []
        for wt in plan.candidates:
            branch = wt.branch or ""
            try:
                self._git.remove_worktree(project.path, wt.path, force=True, idempotent=True)
            except TwiggitError as e:
                outcomes.append(
                    PruneOutcome(
                        project=project.name,
                        branch=wt.branch,
                        path=wt.path,
                        status="failed",
                        reason=e.message,
                    )
                )
                continue

            self._remove_empty_parents(wt.path, self._managed_root(project))
            branch_deleted = False
            warning: str | None = None
            if options.delete_branches:
                branch_deleted, warning = self._delete_branch_safely(project, branch)
            outcomes.append(
                PruneOutcome(
                    project=project.name,
                    branch=wt.branch,
                    path=wt.path,
                    status="deleted",
                    reason=warning,
                    branch_deleted=branch_deleted,
                )
            )

        try:
            self._git.prune_worktree_metadata(project.path)
        except TwiggitError as e:
            logger.debug("Metadata prune failed for %s: %s", project.name, e.message)
        return outcomes

    def _map_projects(self, items: list[T], fn: Callable[[T], R]) -> list[R]:
        """Apply ``fn`` to each project-level item, in parallel when configured.

        Items within one project are always handled sequentially by ``fn``.
        """
        if not self._config.concurrent_ops or len(items) < 2:
            return [fn(item) for item in items]

        results: list[R] = []
        # Workers share no state; outcomes are gathered on this thread only.
        with ThreadPoolExecutor(max_workers=self._config.max_concurrent) as executor:
            futures = [executor.submit(fn, item) for item in items]
            for future in as_completed(futures):
                results.append(future.result())
        return results

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------

    def list_worktrees(
        self,
        project: str | None,
        all_projects: bool,
        context: Context,
        sort: SortOrder = "name",
    ) -> list[WorktreeListing]:
        """Describe worktrees of one project, or of all projects.

        Raises:
            CannotInferProjectError: Outside any project without ``all_projects``
        """
        projects = self._projects_for(project, all_projects, context, "list")
        listings: list[WorktreeListing] = []
        for proj in projects:
            listings.extend(self._list_project(proj))

        if sort == "date":
            return sorted(
                listings,
                key=lambda item: (item.timestamp is None, -(item.timestamp or 0), item.project),
            )
        return sorted(
            listings,
            key=lambda item: (item.project, not item.is_main, item.branch or item.path.name),
        )

    def _list_project(self, project: Project) -> Iterable[WorktreeListing]:
        worktrees = self._git.list_worktrees(project.path)
        managed_root = self._managed_root(project)
        for wt in worktrees:
            exists = wt.path.is_dir()
            clean = self._git.is_worktree_clean(wt.path) if exists else None
            timestamp = self._git.get_commit_timestamp(wt.path) if exists else None
            yield WorktreeListing(
                project=project.name,
                branch=wt.branch,
                path=wt.path,
                commit=wt.commit,
                detached=wt.detached,
                is_main=wt.is_main,
                clean=clean,
                timestamp=timestamp,
            )

        registered = {wt.path.resolve() for wt in worktrees}
        for path in scan_worktree_dirs(managed_root):
            if path.resolve() in registered:
                continue
            yield WorktreeListing(
                project=project.name,
                branch=path.relative_to(managed_root).as_posix(),
                path=path,
                commit="",
                detached=False,
                is_main=False,
                clean=None,
                timestamp=None,
                orphan=True,
            )

    def _projects_for(
        self, project: str | None, all_projects: bool, context: Context, command: str
    ) -> list[Project]:
        if all_projects:
            return self._registry.list_projects()
        name = project or context_project(context)
        if name is None:
            names = self._registry.project_names()
            listing = ", ".join(names) if names else "(none)"
            raise CannotInferProjectError(
                "",
                f"Cannot infer a project to {command} outside a project or worktree",
                candidates=names,
                suggestion=f"Pass a project name or use --all. Available projects: {listing}",
            )
        return [self._registry.resolve(name)]


def _sorted_outcomes(outcomes: list[PruneOutcome]) -> list[PruneOutcome]:
    return sorted(outcomes, key=lambda o: (o.project, o.branch or "", str(o.path)))
