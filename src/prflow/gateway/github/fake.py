"""Fake GitHub implementation for testing."""

from pathlib import Path
from typing import NamedTuple

from prflow.core.errors import OperationError
from prflow.gateway.github.abc import GitHub
from prflow.gateway.github.types import PRNotFound, PRRecord


class CreatedPR(NamedTuple):
    """Record of a create_pr call."""

    branch: str
    base: str
    title: str
    body: str


class FakeGitHub(GitHub):
    """In-memory fake implementation of GitHub operations.

    Constructor Injection:
    ---------------------
    - tool_available: Value returned by is_tool_available
    - authenticated: Whether check_auth_status reports a login
    - prs: Mapping of branch -> PR URL for PRs that already exist
    - find_error: Error returned by find_pr_for_branch
    - create_error: Error returned by create_pr. With cause "already_exists"
      the fake also registers a PR for the branch, like a concurrent creation
      on the host.

    Mutation Tracking:
    -----------------
    - created_prs: List of CreatedPR for successful create_pr calls
    - find_calls: Branches passed to find_pr_for_branch
    """

    def __init__(
        self,
        *,
        tool_available: bool = True,
        authenticated: bool = True,
        prs: dict[str, str] | None = None,
        find_error: OperationError | None = None,
        create_error: OperationError | None = None,
    ) -> None:
        self._tool_available = tool_available
        self._authenticated = authenticated
        self._prs = dict(prs or {})
        self._find_error = find_error
        self._create_error = create_error

        self._created_prs: list[CreatedPR] = []
        self._find_calls: list[str] = []

    def is_tool_available(self) -> bool:
        return self._tool_available

    def check_auth_status(self) -> tuple[bool, str | None, str | None]:
        if self._authenticated:
            return (True, "octocat", "github.com")
        return (False, None, None)

    def find_pr_for_branch(
        self, repo_root: Path, branch: str
    ) -> PRRecord | PRNotFound | OperationError:
        self._find_calls.append(branch)
        if self._find_error is not None:
            return self._find_error
        url = self._prs.get(branch)
        if url is None:
            return PRNotFound(branch=branch)
        return PRRecord(url=url, branch=branch, exists=True)

    def create_pr(
        self,
        repo_root: Path,
        *,
        branch: str,
        base: str,
        title: str,
        body: str,
    ) -> PRRecord | OperationError:
        if self._create_error is not None:
            if self._create_error.cause == "already_exists":
                self._prs.setdefault(branch, f"https://github.com/owner/repo/pull/{branch}")
            return self._create_error
        if branch in self._prs:
            return OperationError(
                operation="create_pr",
                cause="already_exists",
                message=f"a pull request for branch \"{branch}\" already exists",
            )
        url = f"https://github.com/owner/repo/pull/{len(self._prs) + 1}"
        self._prs[branch] = url
        self._created_prs.append(CreatedPR(branch=branch, base=base, title=title, body=body))
        return PRRecord(url=url, branch=branch, exists=True)

    @property
    def created_prs(self) -> list[CreatedPR]:
        """PRs created through this fake, for test assertions."""
        return list(self._created_prs)

    @property
    def find_calls(self) -> list[str]:
        """Branches looked up, for test assertions."""
        return list(self._find_calls)
