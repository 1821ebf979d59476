"""Discriminated union types for Git mutation results.

CommitResult | OperationError and PushResult | OperationError follow the
NonIdealState pattern: callers branch on ``isinstance`` instead of catching.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CommitResult:
    """Success result from creating a commit.

    Attributes:
        sha: Full SHA of the new commit, or None when unknown (dry run)
    """

    sha: str | None


@dataclass(frozen=True)
class PushResult:
    """Success result from pushing to remote."""

    remote: str
    branch: str
