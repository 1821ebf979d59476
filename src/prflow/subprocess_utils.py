"""Subprocess helpers shared by the git and gh gateways."""

import logging
import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

from prflow.core.errors import OperationErrorCause

logger = logging.getLogger(__name__)

# Ordered: the first matching group wins. Markers are matched against the
# lowercased combined stdout/stderr of a failed command.
_FAILURE_MARKERS: tuple[tuple[OperationErrorCause, tuple[str, ...]], ...] = (
    ("already_exists", ("already exists",)),
    (
        "auth",
        (
            "authentication failed",
            "gh auth login",
            "permission denied",
            "http 401",
            "http 403",
            "could not read username",
            "bad credentials",
            "not logged in",
        ),
    ),
    (
        "network",
        (
            "could not resolve host",
            "unable to access",
            "connection refused",
            "connection timed out",
            "operation timed out",
            "network is unreachable",
            "timed out after",
            "ssl",
        ),
    ),
    ("hook_rejected", ("hook", "husky")),
    (
        "not_found",
        (
            "not found",
            "does not appear to be a git repository",
            "no such remote",
            "repository not found",
        ),
    ),
)


def classify_failure_output(output: str) -> OperationErrorCause:
    """Map the output of a failed git/gh command to an error cause.

    Falls back to "rejected" when nothing more specific matches, which covers
    non-fast-forward pushes and hosts refusing a PR for validation reasons.
    """
    lowered = output.lower()
    for cause, markers in _FAILURE_MARKERS:
        if any(marker in lowered for marker in markers):
            return cause
    return "rejected"


def copied_env_for_git_subprocess() -> dict[str, str]:
    """Environment for network-touching git commands.

    Disables interactive credential prompts so a missing credential fails
    fast instead of hanging the workflow.
    """
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


def run_subprocess_with_context(
    cmd: Sequence[str],
    *,
    operation_context: str,
    cwd: Path | None = None,
    check: bool = True,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, capturing text output, with an enriched error on failure.

    Args:
        cmd: Command and arguments
        operation_context: Human-readable description used in error messages
        cwd: Working directory
        check: If True, non-zero exit codes raise RuntimeError
        timeout: Optional timeout in seconds
        env: Optional environment override

    Returns:
        The completed process

    Raises:
        RuntimeError: If check is True and the command exits non-zero, or if
            the command times out
        FileNotFoundError: If the executable is not installed
    """
    logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        result = subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
            env=env,
        )
    except subprocess.TimeoutExpired as e:
        msg = f"Failed to {operation_context}: timed out after {timeout}s"
        raise RuntimeError(msg) from e

    if check and result.returncode != 0:
        stderr = result.stderr.strip()
        stdout = result.stdout.strip()
        details = stderr if stderr else stdout
        msg = (
            f"Failed to {operation_context}\n"
            f"Command: {' '.join(cmd)}\n"
            f"Exit code: {result.returncode}"
        )
        if details:
            msg = f"{msg}\n{details}"
        raise RuntimeError(msg)

    return result
