"""Production implementation of Git operations using subprocess."""

import logging
import subprocess
from pathlib import Path

from prflow.core.diff_parsing import parse_porcelain_status
from prflow.core.errors import OperationError
from prflow.core.types import StatusEntry
from prflow.gateway.git.abc import Git
from prflow.gateway.git.types import CommitResult, PushResult
from prflow.subprocess_utils import (
    classify_failure_output,
    copied_env_for_git_subprocess,
    run_subprocess_with_context,
)

logger = logging.getLogger(__name__)

# Network operations can hang on a dead remote
_GIT_NETWORK_TIMEOUT = 120


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the repository root directory."""
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch."""
        result = subprocess.run(
            ["git", "symbolic-ref", "--quiet", "--short", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        # symbolic-ref succeeds on an unborn branch; require a commit to exist
        head = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if head.returncode != 0:
            return None

        return result.stdout.strip()

    def get_status_entries(self, cwd: Path) -> list[StatusEntry]:
        """List changed paths from porcelain status."""
        result = run_subprocess_with_context(
            cmd=["git", "status", "--porcelain=v1", "-z", "--untracked-files=all"],
            operation_context="read repository status",
            cwd=cwd,
        )
        return parse_porcelain_status(result.stdout)

    def get_diff(self, cwd: Path, *, staged: bool) -> str:
        """Get staged or unstaged diff text."""
        cmd = ["git", "-c", "core.quotePath=false", "diff", "--no-color", "--no-ext-diff", "-M"]
        if staged:
            cmd.append("--cached")
        result = run_subprocess_with_context(
            cmd=cmd,
            operation_context="read staged diff" if staged else "read unstaged diff",
            cwd=cwd,
        )
        if staged:
            return result.stdout

        parts = [result.stdout]
        for entry in self.get_status_entries(cwd):
            if entry.is_untracked:
                parts.append(self._untracked_file_diff(cwd, entry.path))
        return "".join(parts)

    def _untracked_file_diff(self, cwd: Path, path: str) -> str:
        # --no-index exits 1 when the files differ, which is always the case here
        result = run_subprocess_with_context(
            cmd=[
                "git",
                "-c",
                "core.quotePath=false",
                "diff",
                "--no-color",
                "--no-index",
                "--",
                "/dev/null",
                path,
            ],
            operation_context=f"read diff for untracked file {path}",
            cwd=cwd,
            check=False,
        )
        return result.stdout

    def get_unpushed_commits(self, cwd: Path, branch: str) -> list[str]:
        """Subjects of commits not on any remote."""
        result = run_subprocess_with_context(
            cmd=["git", "log", "--format=%s", branch, "--not", "--remotes"],
            operation_context=f"list unpushed commits on {branch}",
            cwd=cwd,
            check=False,
        )
        if result.returncode != 0:
            logger.debug("Could not list unpushed commits: %s", result.stderr.strip())
            return []
        return [line for line in result.stdout.splitlines() if line.strip()]

    def stage_files(self, cwd: Path, paths: list[str]) -> OperationError | None:
        """Stage specific files in one git add invocation."""
        try:
            run_subprocess_with_context(
                cmd=["git", "add", "-A", "--", *paths],
                operation_context=f"stage {len(paths)} file(s)",
                cwd=cwd,
            )
        except RuntimeError as e:
            return OperationError(
                operation="stage", cause=classify_failure_output(str(e)), message=str(e)
            )
        return None

    def commit(self, cwd: Path, message: str) -> CommitResult | OperationError:
        """Create a commit with staged changes."""
        try:
            run_subprocess_with_context(
                cmd=["git", "commit", "-m", message],
                operation_context="create commit",
                cwd=cwd,
            )
        except RuntimeError as e:
            return OperationError(
                operation="commit", cause=classify_failure_output(str(e)), message=str(e)
            )

        sha = run_subprocess_with_context(
            cmd=["git", "rev-parse", "HEAD"],
            operation_context="resolve new commit",
            cwd=cwd,
            check=False,
        ).stdout.strip()
        return CommitResult(sha=sha or None)

    def push_to_remote(
        self, cwd: Path, remote: str, branch: str, *, set_upstream: bool
    ) -> PushResult | OperationError:
        """Push a branch to a remote."""
        cmd = ["git", "push"]
        if set_upstream:
            cmd.append("-u")
        cmd.extend([remote, branch])

        try:
            run_subprocess_with_context(
                cmd=cmd,
                operation_context=f"push branch '{branch}' to remote '{remote}'",
                cwd=cwd,
                timeout=_GIT_NETWORK_TIMEOUT,
                env=copied_env_for_git_subprocess(),
            )
        except RuntimeError as e:
            return OperationError(
                operation="push", cause=classify_failure_output(str(e)), message=str(e)
            )
        return PushResult(remote=remote, branch=branch)
