"""Error boundary handling for CLI commands.

This module provides a decorator to catch domain exceptions at CLI entry points
and display clean error messages without stack traces.
"""

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from twiggit.cli.output import format_error, user_output
from twiggit.core.errors import TwiggitError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Callable[..., Any])


def cli_error_boundary(func: T) -> T:
    """Decorator that turns domain errors into ``Error:``/``Suggestion:`` lines.

    Catches:
        - TwiggitError: every domain, validation and git failure
        - PermissionError: filesystem permission problems

    All other exceptions bubble up normally with full stack traces.

    Example:
        @click.command()
        @cli_error_boundary
        def my_command():
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TwiggitError as e:
            logger.debug("%s failed with %s", func.__name__, e.kind, exc_info=True)
            user_output(format_error(e.message, e.suggestion))
            raise SystemExit(1) from None
        except PermissionError as e:
            user_output(format_error(str(e)))
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]
