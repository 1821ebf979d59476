"""Tests for PR lookup and PR content generation."""

from pathlib import Path

from prflow.core.errors import OperationError
from prflow.core.pr_reconciler import (
    MAX_HEADING_LENGTH,
    NeedsCreate,
    PRExists,
    build_pr_content,
    reconcile,
)
from prflow.core.types import ChangeSummary, CommitType
from prflow.gateway.github.fake import FakeGitHub

HERO_SUMMARY = ChangeSummary(
    commit_type=CommitType.FEAT,
    scope="components",
    description="add hero component",
    rationale=(
        "new component 'Hero' in added file app/components/Hero.tsx",
        "1 source file(s) changed",
    ),
)


class TestReconcile:
    def test_existing_pr_is_reused(self) -> None:
        github = FakeGitHub(prs={"feature": "https://github.com/o/r/pull/3"})

        result = reconcile(github, Path("/repo"), "feature")

        assert result == PRExists(url="https://github.com/o/r/pull/3")

    def test_missing_pr_needs_create(self) -> None:
        github = FakeGitHub(prs={"other": "https://github.com/o/r/pull/3"})

        assert reconcile(github, Path("/repo"), "feature") == NeedsCreate(branch="feature")

    def test_host_is_queried_every_time(self) -> None:
        github = FakeGitHub()

        reconcile(github, Path("/repo"), "feature")
        reconcile(github, Path("/repo"), "feature")

        assert github.find_calls == ["feature", "feature"]

    def test_lookup_failure_is_returned(self) -> None:
        error = OperationError(operation="find_pr", cause="network", message="timeout")
        github = FakeGitHub(find_error=error)

        assert reconcile(github, Path("/repo"), "feature") == error


class TestBuildPrContent:
    def test_single_commit_uses_rationale_bullets(self) -> None:
        content = build_pr_content(
            "feat(components): add hero component",
            HERO_SUMMARY,
            ["feat(components): add hero component"],
        )

        assert content.title == "feat(components): add hero component"
        lines = content.body.splitlines()
        assert lines[0] == "## Components: add hero component"
        assert lines[2] == "Add hero component. Classified as a feat change."
        assert lines[4:] == [f"- {line}" for line in HERO_SUMMARY.rationale]

    def test_several_commits_become_bullets(self) -> None:
        commits = ["feat: add hero", "fix: hero spacing", "docs: hero usage", "test: hero"]

        content = build_pr_content("feat: add hero", HERO_SUMMARY, commits)

        lines = content.body.splitlines()
        assert "Includes 4 commits not yet on the base branch." in lines[2]
        assert lines[4:] == ["- feat: add hero", "- fix: hero spacing", "- docs: hero usage"]

    def test_heading_is_truncated(self) -> None:
        summary = ChangeSummary(
            commit_type=CommitType.CHORE,
            scope=None,
            description="update " + "configuration " * 10,
            rationale=(),
        )

        content = build_pr_content("chore: update configuration", summary, [])

        heading = content.body.splitlines()[0]
        assert heading.startswith("## Maintenance: update")
        assert len(heading) <= MAX_HEADING_LENGTH
        assert content.body.splitlines()[4] == "- chore: update configuration"

    def test_title_is_first_line_of_message(self) -> None:
        content = build_pr_content("feat: add hero\n\nLonger body text", HERO_SUMMARY, [])

        assert content.title == "feat: add hero"
