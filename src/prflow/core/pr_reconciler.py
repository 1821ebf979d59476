"""Decides between reusing an existing pull request and opening a new one."""

import logging
from dataclasses import dataclass
from pathlib import Path

from prflow.core.errors import OperationError
from prflow.core.types import ChangeSummary, CommitType
from prflow.gateway.github.abc import GitHub
from prflow.gateway.github.types import PRNotFound

logger = logging.getLogger(__name__)

MAX_HEADING_LENGTH = 80
MAX_BULLETS = 3

_TYPE_AREAS: dict[CommitType, str] = {
    CommitType.FEAT: "Feature",
    CommitType.FIX: "Fix",
    CommitType.DOCS: "Documentation",
    CommitType.STYLE: "Style",
    CommitType.REFACTOR: "Refactor",
    CommitType.TEST: "Tests",
    CommitType.CHORE: "Maintenance",
}


@dataclass(frozen=True)
class PRExists:
    """The host already has an open PR for the branch; pushing updated it."""

    url: str


@dataclass(frozen=True)
class NeedsCreate:
    """No PR exists for the branch yet."""

    branch: str


@dataclass(frozen=True)
class PRContent:
    """Title and markdown body for a new pull request."""

    title: str
    body: str


def reconcile(
    github: GitHub, repo_root: Path, branch: str
) -> PRExists | NeedsCreate | OperationError:
    """Query the host for an open PR bound to branch.

    The host is the source of truth; nothing is cached between calls.
    """
    found = github.find_pr_for_branch(repo_root, branch)
    if isinstance(found, OperationError):
        return found
    if isinstance(found, PRNotFound):
        logger.debug("No PR for %s; one must be created", branch)
        return NeedsCreate(branch=branch)
    logger.debug("Found existing PR for %s: %s", branch, found.url)
    return PRExists(url=found.url)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    cut = text[: limit - 3]
    boundary = cut.rfind(" ")
    if boundary > limit // 2:
        cut = cut[:boundary]
    return cut.rstrip() + "..."


def _feature_area(summary: ChangeSummary) -> str:
    if summary.scope:
        return summary.scope.replace("-", " ").capitalize()
    return _TYPE_AREAS[summary.commit_type]


def build_pr_content(message: str, summary: ChangeSummary, commits: list[str]) -> PRContent:
    """Build the PR title and body.

    The title is the confirmed commit message's subject line. The body has a
    heading line of at most 80 characters, a summary of at most two
    sentences, and one to three bullets drawn from the unpushed commit
    subjects when there are several commits, else from the rationale.
    """
    title = message.strip().splitlines()[0]
    heading = _truncate(f"## {_feature_area(summary)}: {summary.description}", MAX_HEADING_LENGTH)

    first_sentence = summary.description[0].upper() + summary.description[1:] + "."
    if len(commits) > 1:
        second_sentence = f"Includes {len(commits)} commits not yet on the base branch."
    else:
        second_sentence = f"Classified as a {summary.commit_type.value} change."

    if len(commits) > 1:
        sources = list(commits)
    else:
        sources = list(summary.rationale)
    bullets = [f"- {item}" for item in sources[:MAX_BULLETS] if item.strip()]
    if not bullets:
        bullets = [f"- {title}"]

    body = "\n".join([heading, "", f"{first_sentence} {second_sentence}", "", *bullets]) + "\n"
    return PRContent(title=title, body=body)
