"""Unit tests for individual WorkflowEngine steps and resumes."""

from pathlib import Path

import pytest

from prflow.core.context import context_for_test
from prflow.core.errors import CommitMessageValidationError, SensitiveContentWarning
from prflow.core.workflow.engine import WorkflowEngine, describe_outcome, exit_code_for
from prflow.core.workflow.state import Advance, PendingInput, WorkflowRun, WorkflowState
from prflow.gateway.git.fake import FakeGit
from prflow.gateway.interaction.types import AbortRequested, Accepted, CustomText, Declined
from tests.test_utils.repos import HERO_MESSAGE, HERO_PATH, hero_git


def _advance(engine: WorkflowEngine, run: WorkflowRun) -> WorkflowRun:
    result = engine.step(run)
    assert isinstance(result, Advance)
    return result.run


def _pending(engine: WorkflowEngine, run: WorkflowRun) -> PendingInput:
    result = engine.step(run)
    assert isinstance(result, PendingInput)
    return result


def _confirmed_run(engine: WorkflowEngine) -> WorkflowRun:
    run = _advance(engine, WorkflowRun.start(Path("/repo")))
    pending = _pending(engine, run)
    return engine.resume(run, pending, Accepted()).run


class TestStart:
    def test_classifies_and_waits_for_message_confirmation(self) -> None:
        engine = WorkflowEngine(context_for_test(git=hero_git()))

        result = engine.step(WorkflowRun.start(Path("/repo")))

        assert isinstance(result, Advance)
        assert result.run.state == WorkflowState.AWAITING_MESSAGE_CONFIRMATION
        assert result.run.branch == "feature"
        assert result.run.suggested_message == HERO_MESSAGE
        assert result.run.change_set is not None
        assert result.run.change_set.paths == [HERO_PATH]
        assert any(HERO_MESSAGE in event.message for event in result.events)

    def test_clean_tree_is_no_changes(self) -> None:
        engine = WorkflowEngine(context_for_test(git=FakeGit()))

        run = _advance(engine, WorkflowRun.start(Path("/repo")))

        assert run.state == WorkflowState.NO_CHANGES
        assert run.error is not None
        assert run.error.error_type == "no-changes"
        assert exit_code_for(run) == 0

    def test_clean_tree_mentions_unpushed_commits(self) -> None:
        git = FakeGit(unpushed_commits=["feat: add hero"])
        engine = WorkflowEngine(context_for_test(git=git))

        run = _advance(engine, WorkflowRun.start(Path("/repo")))

        assert run.state == WorkflowState.NO_CHANGES
        assert "git push -u origin feature" in describe_outcome(run)

    def test_detached_head_is_not_on_branch(self) -> None:
        engine = WorkflowEngine(context_for_test(git=hero_git(current_branch=None)))

        run = _advance(engine, WorkflowRun.start(Path("/repo")))

        assert run.state == WorkflowState.NOT_ON_BRANCH
        assert run.error is not None
        assert run.error.error_type == "branch-state"
        assert exit_code_for(run) == 1


class TestMessageConfirmation:
    def test_pending_input_carries_rationale(self) -> None:
        engine = WorkflowEngine(context_for_test(git=hero_git()))
        run = _advance(engine, WorkflowRun.start(Path("/repo")))

        pending = _pending(engine, run)

        assert pending.kind == "message_confirmation"
        assert pending.allow_custom_text
        assert HERO_MESSAGE in pending.prompt
        assert run.summary is not None
        assert pending.details == run.summary.rationale

    def test_accept_uses_suggested_message(self) -> None:
        engine = WorkflowEngine(context_for_test(git=hero_git()))

        run = _confirmed_run(engine)

        assert run.state == WorkflowState.MESSAGE_CONFIRMED
        assert run.message == HERO_MESSAGE

    def test_decline_keeps_waiting(self) -> None:
        engine = WorkflowEngine(context_for_test(git=hero_git()))
        run = _advance(engine, WorkflowRun.start(Path("/repo")))
        pending = _pending(engine, run)

        result = engine.resume(run, pending, Declined())

        assert result.run.state == WorkflowState.AWAITING_MESSAGE_CONFIRMATION
        assert result.events

    def test_invalid_custom_text_asks_for_override(self) -> None:
        engine = WorkflowEngine(context_for_test(git=hero_git()))
        run = _advance(engine, WorkflowRun.start(Path("/repo")))
        pending = _pending(engine, run)

        run = engine.resume(run, pending, CustomText(text="Added hero")).run

        assert run.state == WorkflowState.AWAITING_OVERRIDE_ACCEPTANCE
        assert run.candidate_message == "Added hero"
        assert isinstance(run.error, CommitMessageValidationError)
        override = _pending(engine, run)
        assert override.kind == "override_acceptance"
        assert "Added hero" in override.prompt

    def test_override_accept_uses_candidate(self) -> None:
        engine = WorkflowEngine(context_for_test(git=hero_git()))
        run = _advance(engine, WorkflowRun.start(Path("/repo")))
        run = engine.resume(run, _pending(engine, run), CustomText(text="Added hero")).run

        result = engine.resume(run, _pending(engine, run), Accepted())

        assert result.run.state == WorkflowState.MESSAGE_CONFIRMED
        assert result.run.message == "Added hero"
        assert result.run.error is None
        assert [event.style for event in result.events] == ["warning"]

    def test_valid_custom_text_with_warning_is_confirmed(self) -> None:
        engine = WorkflowEngine(context_for_test(git=hero_git()))
        run = _advance(engine, WorkflowRun.start(Path("/repo")))

        result = engine.resume(run, _pending(engine, run), CustomText(text="feat: added hero"))

        assert result.run.state == WorkflowState.MESSAGE_CONFIRMED
        assert result.run.message == "feat: added hero"
        assert any("imperative" in event.message for event in result.events)

    def test_preset_message_skips_the_prompt(self) -> None:
        engine = WorkflowEngine(context_for_test(git=hero_git()))
        run = _advance(
            engine, WorkflowRun.start(Path("/repo"), preset_message="fix: handle empty hero")
        )

        run = _advance(engine, run)

        assert run.state == WorkflowState.MESSAGE_CONFIRMED
        assert run.message == "fix: handle empty hero"
        assert run.preset_message is None


class TestSensitiveGate:
    def test_flagged_files_block_staging(self) -> None:
        git = hero_git(extra_files={".env.local": ["API_URL=http://localhost"]})
        engine = WorkflowEngine(context_for_test(git=git))
        run = _confirmed_run(engine)

        run = _advance(engine, run)

        assert run.state == WorkflowState.AWAITING_SENSITIVE_OVERRIDE
        assert isinstance(run.error, SensitiveContentWarning)
        assert run.error.paths == (".env.local",)
        pending = _pending(engine, run)
        assert pending.kind == "sensitive_override"
        assert pending.details == (".env.local (env_file)",)

    def test_decline_aborts_without_staging(self) -> None:
        git = hero_git(extra_files={".env.local": ["API_URL=http://localhost"]})
        engine = WorkflowEngine(context_for_test(git=git))
        run = _advance(engine, _confirmed_run(engine))

        run = engine.resume(run, _pending(engine, run), Declined()).run

        assert run.state == WorkflowState.ABORTED
        assert git.staged_files == []
        assert "nothing was staged" in describe_outcome(run)

    def test_configured_allow_list_clears_the_gate(self) -> None:
        from dataclasses import replace

        from prflow.cli.config import LoadedConfig

        git = hero_git(extra_files={".env.example": ["API_URL="]})
        config = replace(LoadedConfig.defaults(), sensitive_allow=(".env.example",))
        engine = WorkflowEngine(context_for_test(git=git, config=config))

        run = _advance(engine, _confirmed_run(engine))

        assert run.state == WorkflowState.AWAITING_STAGING_CONFIRMATION


class TestStaging:
    def test_accept_stages_every_path_in_one_call(self) -> None:
        git = hero_git()
        engine = WorkflowEngine(context_for_test(git=git))
        run = _advance(engine, _confirmed_run(engine))
        pending = _pending(engine, run)

        run = engine.resume(run, pending, Accepted()).run

        assert pending.kind == "staging_confirmation"
        assert pending.details == (f"added     {HERO_PATH}",)
        assert run.state == WorkflowState.STAGED
        assert git.staged_files == [[HERO_PATH]]

    def test_abort_before_staging_changes_nothing(self) -> None:
        git = hero_git()
        engine = WorkflowEngine(context_for_test(git=git))
        run = _advance(engine, _confirmed_run(engine))

        run = engine.resume(run, _pending(engine, run), AbortRequested()).run

        assert run.state == WorkflowState.ABORTED
        assert git.staged_files == []
        assert exit_code_for(run) == 0


def test_step_on_terminal_state_raises() -> None:
    engine = WorkflowEngine(context_for_test())
    run = WorkflowRun(state=WorkflowState.PR_CREATED, cwd=Path("/repo"), pr_url="https://x/1")

    with pytest.raises(ValueError, match="terminal"):
        engine.step(run)
