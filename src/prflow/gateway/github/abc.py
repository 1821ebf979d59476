"""Abstract base class for the code-hosting operations the workflow needs."""

from abc import ABC, abstractmethod
from pathlib import Path

from prflow.core.errors import OperationError
from prflow.gateway.github.types import PRNotFound, PRRecord


class GitHub(ABC):
    """Abstract interface for pull request operations on the host.

    All implementations (real, fake, dry-run) must implement this interface.
    """

    @abstractmethod
    def is_tool_available(self) -> bool:
        """Whether the host CLI is installed."""
        ...

    @abstractmethod
    def check_auth_status(self) -> tuple[bool, str | None, str | None]:
        """Check host CLI authentication status.

        Returns:
            Tuple of (is_authenticated, username, hostname)
        """
        ...

    @abstractmethod
    def find_pr_for_branch(
        self, repo_root: Path, branch: str
    ) -> PRRecord | PRNotFound | OperationError:
        """Look up the open PR whose head is branch.

        Always queries the host; results are never cached.
        """
        ...

    @abstractmethod
    def create_pr(
        self,
        repo_root: Path,
        *,
        branch: str,
        base: str,
        title: str,
        body: str,
    ) -> PRRecord | OperationError:
        """Open a pull request from branch into base.

        Returns:
            The created PR, or OperationError with cause "already_exists" when
            the host already has a PR for branch
        """
        ...
