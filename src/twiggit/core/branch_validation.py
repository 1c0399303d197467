"""Branch name validation.

Mirrors the rules of ``git check-ref-format --branch`` closely enough that a
name accepted here never fails inside ``git worktree add``. Validation runs
before any git process is spawned.
"""

from twiggit.core.errors import InvalidBranchFormatError

MAX_BRANCH_NAME_LENGTH = 250

_FORBIDDEN_CHARS = frozenset(" ~^:?*[\\")
_FORBIDDEN_SEQUENCES = ("..", "//", "@{")


def branch_name_problem(name: str) -> str | None:
    """Return why ``name`` is not a valid branch name, or None if it is."""
    if not name:
        return "branch name cannot be empty"
    if len(name) > MAX_BRANCH_NAME_LENGTH:
        return f"branch name is longer than {MAX_BRANCH_NAME_LENGTH} characters"
    if name in ("HEAD", "@"):
        return f"'{name}' is reserved"
    if name.startswith("-"):
        return "branch name cannot start with '-'"
    if name.startswith("/") or name.endswith("/"):
        return "branch name cannot start or end with '/'"
    if name.endswith("."):
        return "branch name cannot end with '.'"
    if name.endswith("-"):
        return "branch name cannot end with '-'"

    for ch in name:
        if ord(ch) < 32 or ord(ch) == 127:
            return "branch name cannot contain control characters"
        if ch in _FORBIDDEN_CHARS:
            return f"branch name cannot contain '{ch}'"

    for sequence in _FORBIDDEN_SEQUENCES:
        if sequence in name:
            return f"branch name cannot contain '{sequence}'"

    for component in name.split("/"):
        if component.startswith("."):
            return "no path component may start with '.'"
        if component.endswith(".lock"):
            return "no path component may end with '.lock'"

    return None


def validate_branch_name(name: str) -> None:
    """Raise InvalidBranchFormatError if ``name`` is not a usable branch name."""
    problem = branch_name_problem(name)
    if problem is not None:
        raise InvalidBranchFormatError(name, problem)
