"""Fake Git implementation for testing."""

from pathlib import Path
from typing import NamedTuple

from prflow.core.errors import OperationError
from prflow.core.types import StatusEntry
from prflow.gateway.git.abc import Git
from prflow.gateway.git.types import CommitResult, PushResult


class PushedBranch(NamedTuple):
    """Record of a successful push_to_remote call."""

    remote: str
    branch: str
    set_upstream: bool


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    This fake accepts pre-configured state in its constructor and tracks
    mutations for test assertions.

    Constructor Injection:
    ---------------------
    - repository_root: Value returned by get_repository_root (None = not a repo)
    - current_branch: Value returned by get_current_branch (None = detached)
    - status_entries: Entries returned by get_status_entries
    - staged_diff / unstaged_diff: Text returned by get_diff
    - unpushed_commits: Subjects returned by get_unpushed_commits
    - stage_error: Error returned by stage_files
    - commit_error: Error returned by commit
    - push_errors: Errors returned by successive push_to_remote calls; once
      exhausted, pushes succeed

    A successful commit clears the configured changes, so a second workflow
    run against the same fake observes a clean tree.

    Mutation Tracking:
    -----------------
    - staged_files: List of path lists passed to stage_files()
    - commits: List of commit messages
    - push_attempts: List of (remote, branch) tuples, including failed attempts
    - pushed_branches: List of PushedBranch for successful pushes
    """

    def __init__(
        self,
        *,
        repository_root: Path | None = Path("/repo"),
        current_branch: str | None = "feature",
        status_entries: list[StatusEntry] | None = None,
        staged_diff: str = "",
        unstaged_diff: str = "",
        unpushed_commits: list[str] | None = None,
        stage_error: OperationError | None = None,
        commit_error: OperationError | None = None,
        push_errors: list[OperationError] | None = None,
    ) -> None:
        self._repository_root = repository_root
        self._current_branch = current_branch
        self._status_entries = list(status_entries or [])
        self._staged_diff = staged_diff
        self._unstaged_diff = unstaged_diff
        self._unpushed_commits = list(unpushed_commits or [])
        self._stage_error = stage_error
        self._commit_error = commit_error
        self._push_errors = list(push_errors or [])

        # Mutation tracking
        self._staged_files: list[list[str]] = []
        self._commits: list[str] = []
        self._push_attempts: list[tuple[str, str]] = []
        self._pushed_branches: list[PushedBranch] = []

    def get_repository_root(self, cwd: Path) -> Path | None:
        return self._repository_root

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._current_branch

    def get_status_entries(self, cwd: Path) -> list[StatusEntry]:
        return list(self._status_entries)

    def get_diff(self, cwd: Path, *, staged: bool) -> str:
        return self._staged_diff if staged else self._unstaged_diff

    def get_unpushed_commits(self, cwd: Path, branch: str) -> list[str]:
        return list(self._unpushed_commits)

    def stage_files(self, cwd: Path, paths: list[str]) -> OperationError | None:
        if self._stage_error is not None:
            return self._stage_error
        self._staged_files.append(list(paths))
        return None

    def commit(self, cwd: Path, message: str) -> CommitResult | OperationError:
        if self._commit_error is not None:
            return self._commit_error
        self._commits.append(message)
        self._unpushed_commits.insert(0, message.splitlines()[0])
        self._status_entries = []
        self._staged_diff = ""
        self._unstaged_diff = ""
        return CommitResult(sha=f"{len(self._commits):040x}")

    def push_to_remote(
        self, cwd: Path, remote: str, branch: str, *, set_upstream: bool
    ) -> PushResult | OperationError:
        self._push_attempts.append((remote, branch))
        if self._push_errors:
            return self._push_errors.pop(0)
        self._pushed_branches.append(PushedBranch(remote, branch, set_upstream))
        self._unpushed_commits = []
        return PushResult(remote=remote, branch=branch)

    @property
    def staged_files(self) -> list[list[str]]:
        """Path lists passed to stage_files, for test assertions."""
        return list(self._staged_files)

    @property
    def commits(self) -> list[str]:
        """Messages of commits created, for test assertions."""
        return list(self._commits)

    @property
    def push_attempts(self) -> list[tuple[str, str]]:
        """Every (remote, branch) push attempt, including failures."""
        return list(self._push_attempts)

    @property
    def pushed_branches(self) -> list[PushedBranch]:
        """Successful pushes, for test assertions."""
        return list(self._pushed_branches)
