"""Production implementation of GitHub operations using the gh CLI."""

import json
import logging
import shutil
from pathlib import Path

from prflow.core.errors import OperationError
from prflow.gateway.github.abc import GitHub
from prflow.gateway.github.parsing import (
    parse_gh_auth_status_output,
    parse_pr_create_output,
    parse_pr_list_output,
)
from prflow.gateway.github.types import PRNotFound, PRRecord
from prflow.subprocess_utils import classify_failure_output, run_subprocess_with_context

logger = logging.getLogger(__name__)

_GH_TIMEOUT = 60


class RealGitHub(GitHub):
    """Production implementation using gh CLI.

    All GitHub operations execute actual gh commands via subprocess.
    """

    def is_tool_available(self) -> bool:
        return shutil.which("gh") is not None

    def check_auth_status(self) -> tuple[bool, str | None, str | None]:
        """Run `gh auth status` and parse the account line."""
        try:
            result = run_subprocess_with_context(
                cmd=["gh", "auth", "status"],
                operation_context="check GitHub authentication status",
                check=False,
                timeout=_GH_TIMEOUT,
            )
        except FileNotFoundError:
            return (False, None, None)

        # gh auth status returns non-zero if not authenticated
        if result.returncode != 0:
            return (False, None, None)

        return parse_gh_auth_status_output(result.stdout + result.stderr)

    def find_pr_for_branch(
        self, repo_root: Path, branch: str
    ) -> PRRecord | PRNotFound | OperationError:
        """Query open PRs with head branch via `gh pr list`."""
        cmd = [
            "gh",
            "pr",
            "list",
            "--head",
            branch,
            "--state",
            "open",
            "--json",
            "url,headRefName",
            "--limit",
            "1",
        ]
        try:
            result = run_subprocess_with_context(
                cmd=cmd,
                operation_context=f"find pull request for branch '{branch}'",
                cwd=repo_root,
                timeout=_GH_TIMEOUT,
            )
        except FileNotFoundError:
            return OperationError(
                operation="find_pr", cause="tool_missing", message="gh CLI is not installed"
            )
        except RuntimeError as e:
            return OperationError(
                operation="find_pr", cause=classify_failure_output(str(e)), message=str(e)
            )

        try:
            record = parse_pr_list_output(result.stdout, branch)
        except json.JSONDecodeError as e:
            logger.warning("Could not parse gh pr list output: %s", e)
            return OperationError(
                operation="find_pr",
                cause="rejected",
                message=f"Unexpected output from gh pr list: {e}",
            )
        if record is None:
            logger.debug("No open PR for branch %s", branch)
            return PRNotFound(branch=branch)
        return record

    def create_pr(
        self,
        repo_root: Path,
        *,
        branch: str,
        base: str,
        title: str,
        body: str,
    ) -> PRRecord | OperationError:
        """Create a pull request via `gh pr create`."""
        cmd = [
            "gh",
            "pr",
            "create",
            "--head",
            branch,
            "--base",
            base,
            "--title",
            title,
            "--body",
            body,
        ]
        try:
            result = run_subprocess_with_context(
                cmd=cmd,
                operation_context=f"create pull request for branch '{branch}'",
                cwd=repo_root,
                timeout=_GH_TIMEOUT,
            )
        except FileNotFoundError:
            return OperationError(
                operation="create_pr", cause="tool_missing", message="gh CLI is not installed"
            )
        except RuntimeError as e:
            return OperationError(
                operation="create_pr", cause=classify_failure_output(str(e)), message=str(e)
            )

        url = parse_pr_create_output(result.stdout)
        if url is None:
            return OperationError(
                operation="create_pr",
                cause="rejected",
                message=f"gh pr create did not report a URL:\n{result.stdout.strip()}",
            )
        return PRRecord(url=url, branch=branch, exists=True)
