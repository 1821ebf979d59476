"""Types returned by the GitHub gateway."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PRRecord:
    """A pull request bound to a branch on the host.

    Attributes:
        url: Web URL of the pull request
        branch: Head branch name
        exists: True once the host has the PR
    """

    url: str
    branch: str
    exists: bool = True


@dataclass(frozen=True)
class PRNotFound:
    """Sentinel returned when no open PR exists for a branch."""

    branch: str
