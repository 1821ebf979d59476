"""Workflow states, the run snapshot, and the values a step returns."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal

from prflow.core.errors import (
    BranchStateError,
    CommitMessageValidationError,
    NoChangesError,
    OperationError,
    SensitiveContentWarning,
)
from prflow.core.events import ProgressEvent
from prflow.core.types import ChangeSet, ChangeSummary, SensitiveFinding


class WorkflowState(Enum):
    """Exactly one is active at a time; see TERMINAL_STATES for end states."""

    STARTED = "started"
    NO_CHANGES = "no_changes"
    NOT_ON_BRANCH = "not_on_branch"
    AWAITING_MESSAGE_CONFIRMATION = "awaiting_message_confirmation"
    AWAITING_OVERRIDE_ACCEPTANCE = "awaiting_override_acceptance"
    MESSAGE_CONFIRMED = "message_confirmed"
    AWAITING_SENSITIVE_OVERRIDE = "awaiting_sensitive_override"
    AWAITING_STAGING_CONFIRMATION = "awaiting_staging_confirmation"
    STAGED = "staged"
    COMMITTED = "committed"
    PUSHED = "pushed"
    PUSH_FAILED = "push_failed"
    PR_UPDATE_NEEDED = "pr_update_needed"
    PR_EXISTS = "pr_exists"
    PR_CREATED = "pr_created"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {
        WorkflowState.NO_CHANGES,
        WorkflowState.NOT_ON_BRANCH,
        WorkflowState.PR_EXISTS,
        WorkflowState.PR_CREATED,
        WorkflowState.ABORTED,
        WorkflowState.FAILED,
    }
)

# Terminal states reached by explicit user intent or success
SUCCESS_STATES = frozenset(
    {
        WorkflowState.NO_CHANGES,
        WorkflowState.ABORTED,
        WorkflowState.PR_EXISTS,
        WorkflowState.PR_CREATED,
    }
)

WorkflowError = (
    NoChangesError
    | BranchStateError
    | CommitMessageValidationError
    | SensitiveContentWarning
    | OperationError
)


@dataclass(frozen=True)
class WorkflowRun:
    """Immutable snapshot of one workflow invocation.

    Every transition produces a new snapshot via ``dataclasses.replace``.

    Attributes:
        state: Active state
        cwd: Repository root the run operates on
        preset_message: Message supplied up front, consumed as custom text at
            the message confirmation step
        branch: Current branch, once resolved
        change_set: Snapshot of the working tree delta, taken once
        summary: Classifier output for change_set
        suggested_message: Conventional Commit rendering of summary
        candidate_message: Custom text that failed validation, awaiting a
            "use anyway?" decision
        message: Confirmed commit message
        findings: Sensitive-file scan results
        commit_subjects: Unpushed commit subjects captured after committing
        push_attempts: Number of push attempts made so far
        error: Most recent error, surfaced verbatim
        pr_url: URL of the existing or created pull request
        outcome: Human-readable description of a terminal state
    """

    state: WorkflowState
    cwd: Path
    preset_message: str | None = None
    branch: str | None = None
    change_set: ChangeSet | None = None
    summary: ChangeSummary | None = None
    suggested_message: str | None = None
    candidate_message: str | None = None
    message: str | None = None
    findings: tuple[SensitiveFinding, ...] = ()
    commit_subjects: tuple[str, ...] = ()
    push_attempts: int = 0
    error: WorkflowError | None = None
    pr_url: str | None = None
    outcome: str | None = None

    @staticmethod
    def start(cwd: Path, *, preset_message: str | None = None) -> "WorkflowRun":
        return WorkflowRun(state=WorkflowState.STARTED, cwd=cwd, preset_message=preset_message)


InputKind = Literal[
    "message_confirmation",
    "override_acceptance",
    "sensitive_override",
    "staging_confirmation",
    "push_retry",
]


@dataclass(frozen=True)
class PendingInput:
    """Marker returned by a step that needs a human answer before continuing.

    Attributes:
        kind: Which decision is pending
        prompt: Question to ask
        allow_custom_text: Whether free text is a meaningful answer
        details_title: Heading for details, shown before the prompt
        details: Lines to present before the prompt (file list, evidence)
    """

    kind: InputKind
    prompt: str
    allow_custom_text: bool
    details_title: str | None = None
    details: tuple[str, ...] = ()


@dataclass(frozen=True)
class Advance:
    """Result of a step that moved the run forward."""

    run: WorkflowRun
    events: tuple[ProgressEvent, ...] = ()
