"""Parsing helpers for gh CLI output."""

import json

from prflow.gateway.github.types import PRRecord


def parse_gh_auth_status_output(output: str) -> tuple[bool, str | None, str | None]:
    """Parse gh auth status output to extract authentication info.

    Handles both old and new gh CLI output formats:
    - Old format: "Logged in to github.com as USERNAME"
    - New format: "Logged in to github.com account USERNAME (keyring)"

    Args:
        output: Combined stdout and stderr from `gh auth status`

    Returns:
        Tuple of (is_authenticated, username, hostname)
    """
    for line in output.split("\n"):
        if "Logged in to" not in line:
            continue
        _, _, after = line.partition("Logged in to")
        if " account " in after:
            host_part, _, user_part = after.partition(" account ")
        elif " as " in after:
            host_part, _, user_part = after.partition(" as ")
        else:
            continue
        hostname = host_part.strip() or None
        username = user_part.strip().split()[0].rstrip("(") if user_part.strip() else None
        if username:
            return (True, username, hostname)

    # Checkmark without a parseable account line still means logged in
    if "✓" in output:
        return (True, None, None)

    return (False, None, None)


def parse_pr_list_output(output: str, branch: str) -> PRRecord | None:
    """Pick the PR for branch from ``gh pr list --json url,headRefName`` output."""
    entries = json.loads(output or "[]")
    for entry in entries:
        if entry.get("headRefName") == branch and entry.get("url"):
            return PRRecord(url=entry["url"], branch=branch, exists=True)
    return None


def parse_pr_create_output(output: str) -> str | None:
    """Extract the PR URL ``gh pr create`` prints as its last line."""
    for line in reversed(output.strip().splitlines()):
        candidate = line.strip()
        if candidate.startswith("https://"):
            return candidate
    return None
