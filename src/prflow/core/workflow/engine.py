"""State machine sequencing classify, confirm, scan, stage, commit, push and PR.

``step`` advances a run by one transition or returns a PendingInput when a
human decision is needed; ``resume`` applies that decision. Neither prompts
or prints: user interaction belongs to the driver loop.

Ordering guarantees: nothing is staged before the sensitive-file gate clears,
nothing is pushed before the commit succeeds, and no PR is requested before
the push succeeds. Once a mutation has started there is no rollback.
"""

import logging
from dataclasses import replace

from prflow.core import commit_message
from prflow.core.classifier import classify
from prflow.core.context import PrflowContext
from prflow.core.diff_parsing import build_change_set
from prflow.core.errors import (
    BranchStateError,
    NoChangesError,
    OperationError,
    SensitiveContentWarning,
)
from prflow.core.events import ProgressEvent
from prflow.core.pr_reconciler import NeedsCreate, PRExists, build_pr_content, reconcile
from prflow.core.workflow.state import (
    SUCCESS_STATES,
    Advance,
    PendingInput,
    WorkflowRun,
    WorkflowState,
)
from prflow.gateway.github.types import PRRecord
from prflow.gateway.interaction.types import (
    AbortRequested,
    Accepted,
    ConfirmResponse,
    CustomText,
    Declined,
)

logger = logging.getLogger(__name__)

_OPERATION_LABELS = {
    "status": "Reading repository status",
    "diff": "Reading diff",
    "stage": "Staging",
    "commit": "Commit",
    "push": "Push",
    "find_pr": "Pull request lookup",
    "create_pr": "Pull request creation",
}


def describe_operation_error(error: OperationError) -> str:
    """One line naming the failed operation and its cause, then the tool output."""
    label = _OPERATION_LABELS[error.operation]
    return f"{label} failed ({error.cause_description}): {error.message}"


def describe_outcome(run: WorkflowRun) -> str:
    """The single human-readable message for a terminal state."""
    state = run.state
    if state == WorkflowState.PR_CREATED:
        return f"Created pull request: {run.pr_url}"
    if state == WorkflowState.PR_EXISTS:
        return f"Pull request already exists and now includes your changes: {run.pr_url}"
    if run.outcome is not None:
        return run.outcome
    if state == WorkflowState.NO_CHANGES:
        return "Nothing to commit: working tree clean"
    if state == WorkflowState.NOT_ON_BRANCH:
        return "Not on a branch; check out a branch and try again"
    if state == WorkflowState.ABORTED:
        return "Aborted; nothing was changed"
    if state == WorkflowState.FAILED:
        return "Workflow failed"
    raise ValueError(f"{state.value} is not a terminal state")


def exit_code_for(run: WorkflowRun) -> int:
    """0 for terminal states reached by success or explicit user intent, else 1."""
    return 0 if run.state in SUCCESS_STATES else 1


def _info(message: str) -> ProgressEvent:
    return ProgressEvent(message=message, style="info")


def _transition(run: WorkflowRun, state: WorkflowState, **changes: object) -> WorkflowRun:
    logger.debug("Transition %s -> %s", run.state.value, state.value)
    return replace(run, state=state, **changes)


class WorkflowEngine:
    """Explicit step function over WorkflowRun snapshots."""

    def __init__(self, ctx: PrflowContext) -> None:
        self._ctx = ctx

    # ============================================================================
    # Step
    # ============================================================================

    def step(self, run: WorkflowRun) -> Advance | PendingInput:
        """Advance one transition, or ask for input.

        Raises:
            ValueError: If run is already terminal
        """
        if run.state.is_terminal:
            raise ValueError(f"Cannot step a run in terminal state {run.state.value}")

        handlers = {
            WorkflowState.STARTED: self._start,
            WorkflowState.AWAITING_MESSAGE_CONFIRMATION: self._ask_message,
            WorkflowState.AWAITING_OVERRIDE_ACCEPTANCE: self._ask_override,
            WorkflowState.MESSAGE_CONFIRMED: self._scan,
            WorkflowState.AWAITING_SENSITIVE_OVERRIDE: self._ask_sensitive,
            WorkflowState.AWAITING_STAGING_CONFIRMATION: self._ask_staging,
            WorkflowState.STAGED: self._commit,
            WorkflowState.COMMITTED: self._push,
            WorkflowState.PUSH_FAILED: self._ask_push_retry,
            WorkflowState.PUSHED: self._reconcile,
            WorkflowState.PR_UPDATE_NEEDED: self._finish_update,
        }
        return handlers[run.state](run)

    def _start(self, run: WorkflowRun) -> Advance:
        git = self._ctx.git
        entries = git.get_status_entries(run.cwd)
        branch = git.get_current_branch(run.cwd)

        if not entries:
            outcome = "Nothing to commit: working tree clean"
            if branch is not None:
                unpushed = git.get_unpushed_commits(run.cwd, branch)
                if unpushed:
                    outcome += (
                        f" ({len(unpushed)} commit(s) on {branch} not yet pushed; "
                        f"run 'git push -u {self._ctx.config.remote} {branch}')"
                    )
            return Advance(
                _transition(
                    run,
                    WorkflowState.NO_CHANGES,
                    branch=branch,
                    error=NoChangesError(message=outcome),
                    outcome=outcome,
                )
            )

        if branch is None:
            error = BranchStateError(
                message="HEAD is detached or the branch has no commits yet; "
                "check out a branch and try again"
            )
            return Advance(
                _transition(run, WorkflowState.NOT_ON_BRANCH, error=error, outcome=error.message)
            )

        change_set = build_change_set(
            entries,
            staged_diff=git.get_diff(run.cwd, staged=True),
            unstaged_diff=git.get_diff(run.cwd, staged=False),
        )
        if change_set.is_empty:
            outcome = "Nothing to commit: working tree clean"
            return Advance(
                _transition(
                    run,
                    WorkflowState.NO_CHANGES,
                    branch=branch,
                    error=NoChangesError(message=outcome),
                    outcome=outcome,
                )
            )

        summary = classify(change_set)
        suggested = commit_message.build(summary)
        events = (
            _info(f"On branch {branch} with {len(change_set)} changed file(s)"),
            _info(f"Suggested commit message: {suggested}"),
        )
        return Advance(
            _transition(
                run,
                WorkflowState.AWAITING_MESSAGE_CONFIRMATION,
                branch=branch,
                change_set=change_set,
                summary=summary,
                suggested_message=suggested,
            ),
            events,
        )

    def _ask_message(self, run: WorkflowRun) -> Advance | PendingInput:
        if run.preset_message is not None:
            return self._apply_custom_text(replace(run, preset_message=None), run.preset_message)
        assert run.summary is not None
        return PendingInput(
            kind="message_confirmation",
            prompt=f"Commit with message '{run.suggested_message}'?",
            allow_custom_text=True,
            details_title="Why this message:",
            details=run.summary.rationale,
        )

    def _ask_override(self, run: WorkflowRun) -> PendingInput:
        return PendingInput(
            kind="override_acceptance",
            prompt=f"Use '{run.candidate_message}' anyway?",
            allow_custom_text=True,
        )

    def _scan(self, run: WorkflowRun) -> Advance:
        assert run.change_set is not None
        findings = self._ctx.scanner.scan(run.change_set)
        if findings:
            paths = tuple(dict.fromkeys(finding.path for finding in findings))
            warning = SensitiveContentWarning(paths=paths)
            return Advance(
                _transition(
                    run,
                    WorkflowState.AWAITING_SENSITIVE_OVERRIDE,
                    findings=findings,
                    error=warning,
                ),
                (ProgressEvent(message=warning.message, style="warning"),),
            )
        return Advance(_transition(run, WorkflowState.AWAITING_STAGING_CONFIRMATION))

    def _ask_sensitive(self, run: WorkflowRun) -> PendingInput:
        return PendingInput(
            kind="sensitive_override",
            prompt="Stage these files anyway?",
            allow_custom_text=False,
            details_title="Possibly sensitive files:",
            details=tuple(f"{f.path} ({f.reason.value})" for f in run.findings),
        )

    def _ask_staging(self, run: WorkflowRun) -> PendingInput:
        assert run.change_set is not None
        details = tuple(
            f"{change.status.value:<9} {change.old_path} -> {change.path}"
            if change.old_path is not None
            else f"{change.status.value:<9} {change.path}"
            for change in run.change_set
        )
        return PendingInput(
            kind="staging_confirmation",
            prompt=f"Stage these {len(run.change_set)} file(s) and commit?",
            allow_custom_text=False,
            details_title="Files to stage:",
            details=details,
        )

    def _commit(self, run: WorkflowRun) -> Advance:
        assert run.message is not None and run.branch is not None
        git = self._ctx.git
        result = git.commit(run.cwd, run.message)
        if isinstance(result, OperationError):
            return Advance(
                _transition(
                    run,
                    WorkflowState.FAILED,
                    error=result,
                    outcome=describe_operation_error(result),
                )
            )
        subjects = tuple(git.get_unpushed_commits(run.cwd, run.branch))
        short_sha = f" {result.sha[:7]}" if result.sha else ""
        return Advance(
            _transition(run, WorkflowState.COMMITTED, commit_subjects=subjects, error=None),
            (ProgressEvent(message=f"Committed{short_sha}: {run.message}", style="success"),),
        )

    def _push(self, run: WorkflowRun) -> Advance:
        assert run.branch is not None
        attempt = run.push_attempts + 1
        remote = self._ctx.config.remote
        logger.info("Push attempt %d: %s -> %s", attempt, run.branch, remote)
        started = _info(f"Pushing {run.branch} to {remote} (attempt {attempt})")
        result = self._ctx.git.push_to_remote(run.cwd, remote, run.branch, set_upstream=True)
        if isinstance(result, OperationError):
            return Advance(
                _transition(run, WorkflowState.PUSH_FAILED, push_attempts=attempt, error=result),
                (started, ProgressEvent(message=describe_operation_error(result), style="error")),
            )
        return Advance(
            _transition(run, WorkflowState.PUSHED, push_attempts=attempt, error=None),
            (started, ProgressEvent(message=f"Pushed {run.branch} to {remote}", style="success")),
        )

    def _ask_push_retry(self, run: WorkflowRun) -> PendingInput:
        return PendingInput(
            kind="push_retry",
            prompt=f"Push failed after {run.push_attempts} attempt(s). Retry?",
            allow_custom_text=False,
        )

    def _reconcile(self, run: WorkflowRun) -> Advance:
        assert run.branch is not None
        github = self._ctx.github
        if not github.is_tool_available():
            error = OperationError(
                operation="create_pr",
                cause="tool_missing",
                message="the gh CLI is not installed; see https://cli.github.com",
            )
            return self._fail(run, error)
        authenticated, _, _ = github.check_auth_status()
        if not authenticated:
            error = OperationError(
                operation="create_pr",
                cause="auth",
                message="gh is not logged in; run 'gh auth login'",
            )
            return self._fail(run, error)

        decision = reconcile(github, run.cwd, run.branch)
        if isinstance(decision, OperationError):
            return self._fail(run, decision)
        if isinstance(decision, PRExists):
            return Advance(
                _transition(run, WorkflowState.PR_UPDATE_NEEDED, pr_url=decision.url),
                (_info(f"Found existing pull request: {decision.url}"),),
            )
        return self._create_pr(run, decision)

    def _create_pr(self, run: WorkflowRun, decision: NeedsCreate) -> Advance:
        assert run.message is not None and run.summary is not None
        content = build_pr_content(run.message, run.summary, list(run.commit_subjects))
        base = self._ctx.config.base_branch
        created = self._ctx.github.create_pr(
            run.cwd, branch=decision.branch, base=base, title=content.title, body=content.body
        )
        if isinstance(created, PRRecord):
            return Advance(_transition(run, WorkflowState.PR_CREATED, pr_url=created.url))
        if created.cause != "already_exists":
            return self._fail(run, created)

        # Created concurrently by someone else; resolve to the existing PR
        logger.debug("PR already exists for %s; re-querying", decision.branch)
        found = self._ctx.github.find_pr_for_branch(run.cwd, decision.branch)
        if isinstance(found, PRRecord):
            return Advance(_transition(run, WorkflowState.PR_EXISTS, pr_url=found.url))
        if isinstance(found, OperationError):
            return self._fail(run, found)
        return self._fail(run, created)

    def _finish_update(self, run: WorkflowRun) -> Advance:
        # The push already updated the PR's head
        return Advance(_transition(run, WorkflowState.PR_EXISTS))

    def _fail(self, run: WorkflowRun, error: OperationError) -> Advance:
        return Advance(
            _transition(
                run, WorkflowState.FAILED, error=error, outcome=describe_operation_error(error)
            )
        )

    # ============================================================================
    # Resume
    # ============================================================================

    def resume(
        self, run: WorkflowRun, pending: PendingInput, response: ConfirmResponse
    ) -> Advance:
        """Apply the user's answer to the pending decision."""
        if isinstance(response, AbortRequested):
            return self._abort(run, pending)

        if pending.kind == "message_confirmation":
            return self._resume_message(run, response)
        if pending.kind == "override_acceptance":
            return self._resume_override(run, response)
        if pending.kind == "sensitive_override":
            if isinstance(response, Accepted):
                logger.warning(
                    "Staging %d flagged file(s) at user request", len(run.findings)
                )
                return Advance(
                    _transition(run, WorkflowState.AWAITING_STAGING_CONFIRMATION, error=None),
                    (
                        ProgressEvent(
                            message=f"Proceeding with {len(run.findings)} flagged finding(s) "
                            "at your request",
                            style="warning",
                        ),
                    ),
                )
            return self._abort(run, pending)
        if pending.kind == "staging_confirmation":
            if isinstance(response, Accepted):
                return self._stage(run)
            return self._abort(run, pending)
        if pending.kind == "push_retry":
            if isinstance(response, Accepted):
                return Advance(_transition(run, WorkflowState.COMMITTED))
            return self._give_up_push(run)
        raise ValueError(f"Unknown pending input kind: {pending.kind}")

    def _resume_message(self, run: WorkflowRun, response: ConfirmResponse) -> Advance:
        if isinstance(response, Accepted):
            return Advance(
                _transition(run, WorkflowState.MESSAGE_CONFIRMED, message=run.suggested_message)
            )
        if isinstance(response, CustomText):
            return self._apply_custom_text(run, response.text)
        assert isinstance(response, Declined)
        return Advance(
            run,
            (_info("Type a replacement message, answer y to accept, or a to abort"),),
        )

    def _resume_override(self, run: WorkflowRun, response: ConfirmResponse) -> Advance:
        if isinstance(response, Accepted):
            return Advance(
                _transition(
                    run,
                    WorkflowState.MESSAGE_CONFIRMED,
                    message=run.candidate_message,
                    candidate_message=None,
                    error=None,
                ),
                (
                    ProgressEvent(
                        message="Using a message that does not follow Conventional Commits",
                        style="warning",
                    ),
                ),
            )
        if isinstance(response, CustomText):
            return self._apply_custom_text(run, response.text)
        return Advance(
            _transition(
                run,
                WorkflowState.AWAITING_MESSAGE_CONFIRMATION,
                candidate_message=None,
                error=None,
            )
        )

    def _apply_custom_text(self, run: WorkflowRun, text: str) -> Advance:
        result = commit_message.validate(text)
        if isinstance(result, commit_message.ValidMessage):
            warnings = tuple(
                ProgressEvent(message=f"Warning: {warning}", style="warning")
                for warning in result.warnings
            )
            return Advance(
                _transition(
                    run,
                    WorkflowState.MESSAGE_CONFIRMED,
                    message=result.message,
                    candidate_message=None,
                    error=None,
                ),
                warnings,
            )
        return Advance(
            _transition(
                run,
                WorkflowState.AWAITING_OVERRIDE_ACCEPTANCE,
                candidate_message=text.strip(),
                error=result,
            ),
            (ProgressEvent(message=result.message, style="error"),),
        )

    def _stage(self, run: WorkflowRun) -> Advance:
        assert run.change_set is not None
        paths = run.change_set.stage_paths
        error = self._ctx.git.stage_files(run.cwd, paths)
        if error is not None:
            return self._fail(run, error)
        return Advance(
            _transition(run, WorkflowState.STAGED),
            (_info(f"Staged {len(run.change_set)} file(s)"),),
        )

    def _abort(self, run: WorkflowRun, pending: PendingInput) -> Advance:
        if pending.kind == "push_retry":
            return self._give_up_push(run)
        if pending.kind == "sensitive_override":
            outcome = "Aborted at the sensitive-file check; nothing was staged"
        elif pending.kind == "staging_confirmation":
            outcome = "Aborted before staging; nothing was staged"
        else:
            outcome = "Aborted; nothing was changed"
        return Advance(_transition(run, WorkflowState.ABORTED, outcome=outcome))

    def _give_up_push(self, run: WorkflowRun) -> Advance:
        remote = self._ctx.config.remote
        outcome = (
            f"Push failed after {run.push_attempts} attempt(s); the commit is local only "
            "and the pull request cannot be created until the branch is pushed. "
            f"Push manually with: git push -u {remote} {run.branch}"
        )
        return Advance(_transition(run, WorkflowState.FAILED, outcome=outcome))
