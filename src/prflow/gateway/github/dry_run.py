"""No-op GitHub wrapper for dry-run mode."""

from pathlib import Path

from prflow.core.errors import OperationError
from prflow.gateway.github.abc import GitHub
from prflow.gateway.github.types import PRNotFound, PRRecord
from prflow.output import user_output


class DryRunGitHub(GitHub):
    """No-op wrapper that prevents PR creation in dry-run mode.

    Read-only operations are delegated to the wrapped implementation.
    """

    def __init__(self, wrapped: GitHub) -> None:
        """Create a dry-run wrapper around a GitHub implementation.

        Args:
            wrapped: The GitHub implementation to wrap (usually RealGitHub)
        """
        self._wrapped = wrapped

    def is_tool_available(self) -> bool:
        return self._wrapped.is_tool_available()

    def check_auth_status(self) -> tuple[bool, str | None, str | None]:
        return self._wrapped.check_auth_status()

    def find_pr_for_branch(
        self, repo_root: Path, branch: str
    ) -> PRRecord | PRNotFound | OperationError:
        return self._wrapped.find_pr_for_branch(repo_root, branch)

    def create_pr(
        self,
        repo_root: Path,
        *,
        branch: str,
        base: str,
        title: str,
        body: str,
    ) -> PRRecord | OperationError:
        user_output(
            f"[DRY RUN] Would run: gh pr create --head {branch} --base {base} --title '{title}'"
        )
        return PRRecord(url=f"(dry run) {branch} -> {base}", branch=branch, exists=False)
