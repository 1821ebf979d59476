"""End-to-end workflow runs over fake gateways."""

from pathlib import Path

from prflow.core.context import context_for_test
from prflow.core.errors import OperationError
from prflow.core.workflow.driver import run_workflow
from prflow.core.workflow.engine import WorkflowEngine, exit_code_for
from prflow.core.workflow.state import WorkflowRun, WorkflowState
from prflow.gateway.git.fake import FakeGit, PushedBranch
from prflow.gateway.github.fake import FakeGitHub
from prflow.gateway.interaction.fake import FakeUserInteraction
from prflow.gateway.interaction.types import Accepted, CustomText, Declined
from tests.test_utils.repos import HERO_MESSAGE, HERO_PATH, hero_git

EXISTING_PR_URL = "https://github.com/owner/repo/pull/42"


def _network_error() -> OperationError:
    return OperationError(
        operation="push", cause="network", message="fatal: unable to access remote"
    )


def _run(
    git: FakeGit,
    github: FakeGitHub,
    interaction: FakeUserInteraction,
    *,
    preset_message: str | None = None,
) -> WorkflowRun:
    ctx = context_for_test(git=git, github=github, interaction=interaction)
    run = WorkflowRun.start(Path("/repo"), preset_message=preset_message)
    return run_workflow(WorkflowEngine(ctx), run, interaction)


class TestHappyPath:
    def test_commit_push_and_create_pr(self) -> None:
        git = hero_git()
        github = FakeGitHub()
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted()])

        run = _run(git, github, interaction)

        assert run.state == WorkflowState.PR_CREATED
        assert exit_code_for(run) == 0
        assert git.staged_files == [[HERO_PATH]]
        assert git.commits == [HERO_MESSAGE]
        assert git.pushed_branches == [PushedBranch("origin", "feature", True)]
        assert len(github.created_prs) == 1
        created = github.created_prs[0]
        assert created.title == HERO_MESSAGE
        assert created.base == "main"
        assert created.body.startswith("## Components: add hero component")
        assert interaction.messages[-1] == f"Created pull request: {run.pr_url}"
        assert interaction.errors == []

    def test_second_run_is_a_no_op(self) -> None:
        git = hero_git()
        github = FakeGitHub()
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted()])
        _run(git, github, interaction)

        second = _run(git, github, FakeUserInteraction())

        assert second.state == WorkflowState.NO_CHANGES
        assert exit_code_for(second) == 0
        assert len(git.commits) == 1
        assert len(github.created_prs) == 1

    def test_rationale_and_file_list_are_presented_before_prompts(self) -> None:
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted()])

        _run(hero_git(), FakeGitHub(), interaction)

        assert [presented.title for presented in interaction.lists] == [
            "Why this message:",
            "Files to stage:",
        ]
        assert len(interaction.prompts) == 2


class TestMessageChoices:
    def test_decline_then_accept(self) -> None:
        git = hero_git()
        interaction = FakeUserInteraction(responses=[Declined(), Accepted(), Accepted()])

        run = _run(git, FakeGitHub(), interaction)

        assert run.state == WorkflowState.PR_CREATED
        assert interaction.prompts[0] == interaction.prompts[1]
        assert git.commits == [HERO_MESSAGE]

    def test_valid_custom_message(self) -> None:
        git = hero_git()
        interaction = FakeUserInteraction(
            responses=[CustomText(text="feat: add landing hero"), Accepted()]
        )

        _run(git, FakeGitHub(), interaction)

        assert git.commits == ["feat: add landing hero"]

    def test_invalid_custom_message_used_anyway(self) -> None:
        git = hero_git()
        interaction = FakeUserInteraction(
            responses=[CustomText(text="Added hero"), Accepted(), Accepted()]
        )

        run = _run(git, FakeGitHub(), interaction)

        assert run.state == WorkflowState.PR_CREATED
        assert git.commits == ["Added hero"]
        assert "Use 'Added hero' anyway?" in interaction.prompts[1]

    def test_invalid_custom_message_rejected_returns_to_suggestion(self) -> None:
        git = hero_git()
        interaction = FakeUserInteraction(
            responses=[CustomText(text="Added hero"), Declined(), Accepted(), Accepted()]
        )

        _run(git, FakeGitHub(), interaction)

        assert git.commits == [HERO_MESSAGE]

    def test_preset_message_only_asks_about_staging(self) -> None:
        git = hero_git()
        interaction = FakeUserInteraction(responses=[Accepted()])

        run = _run(git, FakeGitHub(), interaction, preset_message="fix: handle empty hero")

        assert run.state == WorkflowState.PR_CREATED
        assert git.commits == ["fix: handle empty hero"]
        assert len(interaction.prompts) == 1

    def test_abort_at_message_prompt(self) -> None:
        git = hero_git()
        interaction = FakeUserInteraction()

        run = _run(git, FakeGitHub(), interaction)

        assert run.state == WorkflowState.ABORTED
        assert exit_code_for(run) == 0
        assert git.staged_files == []


class TestSensitiveFiles:
    def test_declining_override_stages_nothing(self) -> None:
        git = hero_git(extra_files={".env.local": ["API_URL=http://localhost"]})
        interaction = FakeUserInteraction(responses=[Accepted(), Declined()])

        run = _run(git, FakeGitHub(), interaction)

        assert run.state == WorkflowState.ABORTED
        assert git.staged_files == []
        assert git.commits == []
        assert interaction.lists[-1].items == [".env.local (env_file)"]

    def test_accepting_override_stages_flagged_file(self) -> None:
        git = hero_git(extra_files={".env.local": ["API_URL=http://localhost"]})
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted(), Accepted()])

        run = _run(git, FakeGitHub(), interaction)

        assert run.state == WorkflowState.PR_CREATED
        assert git.staged_files == [[HERO_PATH, ".env.local"]]
        assert any(event.style == "warning" for event in interaction.events)


class TestFailures:
    def test_commit_rejected_by_hook(self) -> None:
        error = OperationError(
            operation="commit", cause="hook_rejected", message="pre-commit failed: lint"
        )
        git = hero_git(commit_error=error)
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted()])

        run = _run(git, FakeGitHub(), interaction)

        assert run.state == WorkflowState.FAILED
        assert exit_code_for(run) == 1
        assert git.push_attempts == []
        assert interaction.errors == [
            "Commit failed (rejected by a git hook): pre-commit failed: lint"
        ]

    def test_push_retried_until_success_then_existing_pr_reused(self) -> None:
        git = hero_git(push_errors=[_network_error(), _network_error()])
        github = FakeGitHub(prs={"feature": EXISTING_PR_URL})
        interaction = FakeUserInteraction(
            responses=[Accepted(), Accepted(), Accepted(), Accepted()]
        )

        run = _run(git, github, interaction)

        assert run.state == WorkflowState.PR_EXISTS
        assert run.pr_url == EXISTING_PR_URL
        assert run.push_attempts == 3
        assert len(git.push_attempts) == 3
        assert len(git.commits) == 1
        assert github.created_prs == []
        assert interaction.messages[-1] == (
            f"Pull request already exists and now includes your changes: {EXISTING_PR_URL}"
        )

    def test_push_not_retried_leaves_commit_local(self) -> None:
        git = hero_git(push_errors=[_network_error()])
        github = FakeGitHub()
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted(), Declined()])

        run = _run(git, github, interaction)

        assert run.state == WorkflowState.FAILED
        assert len(git.commits) == 1
        assert github.find_calls == []
        assert "git push -u origin feature" in interaction.errors[-1]

    def test_pr_created_concurrently_resolves_to_existing(self) -> None:
        error = OperationError(
            operation="create_pr", cause="already_exists", message="already exists"
        )
        github = FakeGitHub(create_error=error)
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted()])

        run = _run(hero_git(), github, interaction)

        assert run.state == WorkflowState.PR_EXISTS
        assert run.pr_url == "https://github.com/owner/repo/pull/feature"

    def test_missing_gh_fails_after_push(self) -> None:
        git = hero_git()
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted()])

        run = _run(git, FakeGitHub(tool_available=False), interaction)

        assert run.state == WorkflowState.FAILED
        assert len(git.pushed_branches) == 1
        assert "tool not installed" in interaction.errors[-1]

    def test_unauthenticated_gh(self) -> None:
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted()])

        run = _run(hero_git(), FakeGitHub(authenticated=False), interaction)

        assert run.state == WorkflowState.FAILED
        assert "gh auth login" in interaction.errors[-1]

    def test_host_rejects_pr(self) -> None:
        error = OperationError(
            operation="create_pr", cause="rejected", message="base branch not found"
        )
        interaction = FakeUserInteraction(responses=[Accepted(), Accepted()])

        run = _run(hero_git(), FakeGitHub(create_error=error), interaction)

        assert run.state == WorkflowState.FAILED
        assert interaction.errors == [
            "Pull request creation failed (rejected by host): base branch not found"
        ]

    def test_detached_head_is_reported_as_error(self) -> None:
        interaction = FakeUserInteraction()

        run = _run(hero_git(current_branch=None), FakeGitHub(), interaction)

        assert run.state == WorkflowState.NOT_ON_BRANCH
        assert interaction.prompts == []
        assert len(interaction.errors) == 1
