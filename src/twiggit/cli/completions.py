"""Shell completion callbacks for target arguments."""

import logging

import click
from click.shell_completion import CompletionItem

from twiggit.core.context import TwiggitContext, create_context
from twiggit.core.errors import TwiggitError

logger = logging.getLogger(__name__)


def _completion_context(ctx: click.Context) -> TwiggitContext:
    # Group callbacks do not run during completion, so ctx.obj may be unset
    root = ctx.find_root()
    if isinstance(root.obj, TwiggitContext):
        return root.obj
    return create_context()


def _complete(ctx: click.Context, incomplete: str, *, existing_only: bool) -> list[CompletionItem]:
    try:
        twiggit_ctx = _completion_context(ctx)
        context = twiggit_ctx.detect_context()
        names = twiggit_ctx.target_resolver.suggest(
            context, incomplete, existing_only=existing_only
        )
    except TwiggitError as e:
        # A broken config or checkout should not break the user's shell
        logger.debug("Completion failed: %s", e.message)
        return []
    return [CompletionItem(name) for name in names]


def complete_existing_targets(
    ctx: click.Context, param: click.Parameter, incomplete: str
) -> list[CompletionItem]:
    """Complete projects and existing worktrees (cd, switch, delete)."""
    return _complete(ctx, incomplete, existing_only=True)


def complete_branch_targets(
    ctx: click.Context, param: click.Parameter, incomplete: str
) -> list[CompletionItem]:
    """Complete projects, worktrees and local branches (create)."""
    return _complete(ctx, incomplete, existing_only=False)
