"""Domain error types.

Every error raised by the core carries a stable ``kind`` string, a one-line
message, and an optional actionable suggestion. The CLI error boundary turns
these into ``Error:`` / ``Suggestion:`` lines on stderr and exit code 1.
"""

from pathlib import Path


class TwiggitError(Exception):
    """Base exception for all twiggit domain errors."""

    kind = "twiggit_error"

    def __init__(self, message: str, *, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)


class InvalidBranchFormatError(TwiggitError):
    kind = "invalid_branch_format"

    def __init__(self, branch: str, reason: str) -> None:
        self.branch = branch
        self.reason = reason
        super().__init__(
            f"Invalid branch name '{branch}': {reason}",
            suggestion="Use a name accepted by 'git check-ref-format --branch'",
        )


class InvalidTargetError(TwiggitError):
    kind = "invalid_target"

    def __init__(self, spec: str, reason: str) -> None:
        self.spec = spec
        super().__init__(
            f"Invalid target '{spec}': {reason}",
            suggestion="Use 'branch', 'project' or 'project/branch'",
        )


class ProjectNotFoundError(TwiggitError):
    kind = "project_not_found"

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available or []
        suggestion = None
        if self.available:
            suggestion = "Available projects: " + ", ".join(self.available)
        super().__init__(f"Project '{name}' not found", suggestion=suggestion)


class WorktreeNotFoundError(TwiggitError):
    kind = "worktree_not_found"

    def __init__(self, path: Path, *, project: str | None = None, branch: str | None = None):
        self.path = path
        self.project = project
        self.branch = branch
        if project is not None and branch is not None:
            message = f"Worktree '{project}/{branch}' not found at {path}"
        else:
            message = f"Worktree not found: {path}"
        super().__init__(message, suggestion="Run 'twiggit list' to see existing worktrees")


class WorktreeAlreadyExistsError(TwiggitError):
    kind = "worktree_already_exists"

    def __init__(self, path: Path, detail: str | None = None) -> None:
        self.path = path
        message = f"Worktree already exists at {path}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class SourceBranchNotFoundError(TwiggitError):
    kind = "source_branch_not_found"

    def __init__(self, source_branch: str, project: str | None = None) -> None:
        self.source_branch = source_branch
        where = f" in project '{project}'" if project else ""
        super().__init__(
            f"Source branch '{source_branch}' does not exist{where}",
            suggestion="Pass an existing branch with --source",
        )


class BranchNotMergedError(TwiggitError):
    kind = "branch_not_merged"

    def __init__(self, branch: str, into_branch: str | None = None) -> None:
        self.branch = branch
        self.into_branch = into_branch
        if into_branch is None:
            message = f"Branch '{branch}' is not fully merged"
        else:
            message = f"Branch '{branch}' is not merged into '{into_branch}'"
        super().__init__(message)


class UncommittedChangesError(TwiggitError):
    kind = "uncommitted_changes"

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"Worktree at {path} has uncommitted changes",
            suggestion="Commit or stash the changes, or pass --force",
        )


class ProtectedResourceError(TwiggitError):
    kind = "protected_resource"

    def __init__(self, message: str, *, suggestion: str | None = None) -> None:
        super().__init__(message, suggestion=suggestion)


class AmbiguousTargetError(TwiggitError):
    kind = "ambiguous_target"

    def __init__(
        self, spec: str, message: str, *, candidates: list[str] | None = None, suggestion: str
    ) -> None:
        self.spec = spec
        self.candidates = candidates or []
        super().__init__(message, suggestion=suggestion)


class CannotInferProjectError(AmbiguousTargetError):
    kind = "cannot_infer_project"


class ContextDetectionError(TwiggitError):
    kind = "context_detection"

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot detect context for {path}: {reason}")


class ConfigError(TwiggitError):
    kind = "config"

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        location = f" in {path}" if path is not None else ""
        super().__init__(f"Invalid configuration{location}: {reason}")


class InvalidWorktreeInfoError(TwiggitError):
    kind = "invalid_worktree_info"


class GitError(TwiggitError):
    """Base class for failures of the git executable itself."""

    kind = "git_error"


class GitTimeoutError(GitError):
    kind = "git_timeout"

    def __init__(self, args: list[str], timeout: float) -> None:
        self.args_ = args
        self.timeout = timeout
        super().__init__(
            f"git {' '.join(args[1:])} timed out after {timeout:g}s",
            suggestion="Increase git.cli_timeout in the config file",
        )


class GitExecutionError(GitError):
    kind = "git_execution"

    def __init__(self, operation: str, detail: str | None = None) -> None:
        self.operation = operation
        self.detail = detail
        message = f"Failed to {operation}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


def sanitize_git_message(stderr: str) -> str:
    """Reduce raw git stderr to one clean line.

    Strips ``fatal:``/``error:``/``warning:`` prefixes and ``hint:`` lines so
    git's own wording never reaches the user verbatim.
    """
    lines: list[str] = []
    for raw in stderr.splitlines():
        line = raw.strip()
        if not line or line.startswith("hint:"):
            continue
        for prefix in ("fatal:", "error:", "warning:"):
            if line.startswith(prefix):
                line = line[len(prefix) :].strip()
                break
        if line:
            lines.append(line)
    if not lines:
        return "git reported an unknown error"
    return lines[0]
