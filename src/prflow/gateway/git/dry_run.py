"""No-op Git wrapper for dry-run mode.

This module provides a wrapper that prevents execution of destructive
operations while delegating read-only operations to the wrapped implementation.
"""

from pathlib import Path

from prflow.core.errors import OperationError
from prflow.core.types import StatusEntry
from prflow.gateway.git.abc import Git
from prflow.gateway.git.types import CommitResult, PushResult
from prflow.output import user_output


class DryRunGit(Git):
    """No-op wrapper that prevents execution of destructive git operations.

    Mutations print what would have run and report success. Queries are
    delegated to the wrapped implementation.

    Usage:
        real_git = RealGit()
        noop_git = DryRunGit(real_git)

        # Query operations work normally
        branch = noop_git.get_current_branch(cwd)

        # Mutation operations are no-ops
        noop_git.push_to_remote(cwd, "origin", branch, set_upstream=True)
    """

    def __init__(self, wrapped: Git) -> None:
        """Create a dry-run wrapper around a Git implementation.

        Args:
            wrapped: The Git implementation to wrap (usually RealGit)
        """
        self._wrapped = wrapped

    # ============================================================================
    # Query Operations (delegated)
    # ============================================================================

    def get_repository_root(self, cwd: Path) -> Path | None:
        return self._wrapped.get_repository_root(cwd)

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._wrapped.get_current_branch(cwd)

    def get_status_entries(self, cwd: Path) -> list[StatusEntry]:
        return self._wrapped.get_status_entries(cwd)

    def get_diff(self, cwd: Path, *, staged: bool) -> str:
        return self._wrapped.get_diff(cwd, staged=staged)

    def get_unpushed_commits(self, cwd: Path, branch: str) -> list[str]:
        return self._wrapped.get_unpushed_commits(cwd, branch)

    # ============================================================================
    # Mutation Operations (no-ops in dry-run mode)
    # ============================================================================

    def stage_files(self, cwd: Path, paths: list[str]) -> OperationError | None:
        user_output(f"[DRY RUN] Would run: git add -A -- {' '.join(paths)}")
        return None

    def commit(self, cwd: Path, message: str) -> CommitResult | OperationError:
        user_output(f"[DRY RUN] Would run: git commit -m '{message}'")
        return CommitResult(sha=None)

    def push_to_remote(
        self, cwd: Path, remote: str, branch: str, *, set_upstream: bool
    ) -> PushResult | OperationError:
        upstream_flag = "-u " if set_upstream else ""
        user_output(f"[DRY RUN] Would run: git push {upstream_flag}{remote} {branch}")
        return PushResult(remote=remote, branch=branch)
