"""Error taxonomy for the commit/push/PR workflow.

Expected failure conditions are modelled as frozen dataclasses returned from
gateways and engine steps (the "non-ideal state" pattern) rather than raised.
Each type exposes an ``error_type`` string for display and tests.
"""

from dataclasses import dataclass
from typing import Literal

OperationName = Literal["status", "diff", "stage", "commit", "push", "find_pr", "create_pr"]

OperationErrorCause = Literal[
    "hook_rejected",
    "network",
    "auth",
    "not_found",
    "tool_missing",
    "already_exists",
    "rejected",
]

CAUSE_DESCRIPTIONS: dict[OperationErrorCause, str] = {
    "hook_rejected": "rejected by a git hook",
    "network": "network failure",
    "auth": "not authenticated",
    "not_found": "not found",
    "tool_missing": "tool not installed",
    "already_exists": "already exists",
    "rejected": "rejected by host",
}


@dataclass(frozen=True)
class NoChangesError:
    """Informational: the working tree has nothing to commit."""

    message: str

    @property
    def error_type(self) -> str:
        return "no-changes"


@dataclass(frozen=True)
class BranchStateError:
    """HEAD is detached or the branch is unborn; the user must switch branches."""

    message: str

    @property
    def error_type(self) -> str:
        return "branch-state"


@dataclass(frozen=True)
class CommitMessageValidationError:
    """A user-supplied commit message does not follow Conventional Commits."""

    candidate: str
    reasons: tuple[str, ...]

    @property
    def error_type(self) -> str:
        return "validation"

    @property
    def message(self) -> str:
        return f"Invalid commit message '{self.candidate}': " + "; ".join(self.reasons)


@dataclass(frozen=True)
class SensitiveContentWarning:
    """Files flagged by the sensitive-file scan; blocks staging until overridden."""

    paths: tuple[str, ...]

    @property
    def error_type(self) -> str:
        return "sensitive-content"

    @property
    def message(self) -> str:
        return f"{len(self.paths)} file(s) look sensitive and should not be committed"


@dataclass(frozen=True)
class OperationError:
    """A collaborator operation (commit, push, PR creation, ...) failed.

    Attributes:
        operation: Which operation failed
        cause: Classified failure cause
        message: Underlying tool output, surfaced verbatim to the user
    """

    operation: OperationName
    cause: OperationErrorCause
    message: str

    @property
    def error_type(self) -> str:
        return f"{self.operation}-{self.cause}".replace("_", "-")

    @property
    def cause_description(self) -> str:
        return CAUSE_DESCRIPTIONS[self.cause]
