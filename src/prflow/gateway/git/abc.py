"""Abstract base class for the Git operations the workflow needs.

All implementations (real, fake, dry-run) must implement this interface.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from prflow.core.errors import OperationError
from prflow.core.types import StatusEntry
from prflow.gateway.git.types import CommitResult, PushResult


class Git(ABC):
    """Abstract interface for Git operations.

    Query operations return plain values. Mutations the workflow must branch on
    (commit, push) return discriminated unions instead of raising.
    """

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the repository root directory.

        Args:
            cwd: Any directory inside the working tree

        Returns:
            Absolute path of the top-level directory, or None when cwd is not
            inside a git repository
        """
        ...

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch.

        Returns:
            Branch name, or None when HEAD is detached or the branch is unborn
        """
        ...

    @abstractmethod
    def get_status_entries(self, cwd: Path) -> list[StatusEntry]:
        """List staged, unstaged and untracked paths.

        Returns:
            One entry per path, in git's order; empty when the tree is clean
        """
        ...

    @abstractmethod
    def get_diff(self, cwd: Path, *, staged: bool) -> str:
        """Get unified diff text.

        Args:
            cwd: Repository root
            staged: True for index vs HEAD; False for working tree vs index,
                including untracked files rendered as new-file diffs
        """
        ...

    @abstractmethod
    def get_unpushed_commits(self, cwd: Path, branch: str) -> list[str]:
        """Subjects of commits on branch that no remote ref contains, newest first."""
        ...

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def stage_files(self, cwd: Path, paths: list[str]) -> OperationError | None:
        """Stage the given paths in a single git invocation.

        Returns:
            None on success, OperationError if git refused
        """
        ...

    @abstractmethod
    def commit(self, cwd: Path, message: str) -> CommitResult | OperationError:
        """Create a commit from the index. Never creates empty commits."""
        ...

    @abstractmethod
    def push_to_remote(
        self, cwd: Path, remote: str, branch: str, *, set_upstream: bool
    ) -> PushResult | OperationError:
        """Push a branch to a remote.

        Args:
            cwd: Working directory
            remote: Remote name (e.g., "origin")
            branch: Branch name to push
            set_upstream: If True, set upstream tracking (-u flag)
        """
        ...
