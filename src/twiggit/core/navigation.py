"""Plan where ``cd``/``switch`` should take the shell."""

import logging
from dataclasses import dataclass
from pathlib import Path

from twiggit.core.context_resolver import Context
from twiggit.core.errors import ProjectNotFoundError, WorktreeNotFoundError
from twiggit.core.target_resolver import ResolvedTarget, TargetResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationPlan:
    path: Path
    target: ResolvedTarget
    summary: str


class NavigationPlanner:
    def __init__(self, resolver: TargetResolver) -> None:
        self._resolver = resolver

    def plan(self, context: Context, spec: str) -> NavigationPlan:
        """Resolve ``spec`` to an existing directory.

        Raises:
            CannotInferProjectError: Empty spec outside any project; the
                suggestion lists the available targets
            WorktreeNotFoundError: A branch target whose directory is missing
            ProjectNotFoundError: A project whose directory is missing
        """
        target = self._resolver.resolve(context, spec)

        if not target.path.is_dir():
            if target.is_main_checkout:
                raise ProjectNotFoundError(target.project.name)
            raise WorktreeNotFoundError(
                target.path, project=target.project.name, branch=target.branch
            )

        if target.is_main_checkout:
            summary = f"{target.project.name} (main checkout)"
        else:
            summary = f"{target.project.name}/{target.branch}"

        logger.debug("Navigation planned to %s", target.path)
        return NavigationPlan(path=target.path, target=target, summary=summary)
