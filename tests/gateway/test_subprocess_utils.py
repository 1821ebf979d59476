"""Tests for subprocess helpers and failure classification."""

import sys

import pytest

from prflow.subprocess_utils import (
    classify_failure_output,
    copied_env_for_git_subprocess,
    run_subprocess_with_context,
)


@pytest.mark.parametrize(
    ("output", "expected"),
    [
        ("fatal: unable to access 'https://github.com/o/r/': Could not resolve host", "network"),
        ("remote: Permission denied to octocat.", "auth"),
        ("husky - pre-commit hook exited with code 1 (error)", "hook_rejected"),
        ('a pull request for branch "feature" already exists', "already_exists"),
        ("fatal: 'upstream' does not appear to be a git repository", "not_found"),
        ("! [rejected]        feature -> feature (non-fast-forward)", "rejected"),
    ],
)
def test_classify_failure_output(output: str, expected: str) -> None:
    assert classify_failure_output(output) == expected


def test_git_env_disables_terminal_prompts() -> None:
    assert copied_env_for_git_subprocess()["GIT_TERMINAL_PROMPT"] == "0"


def test_run_captures_output() -> None:
    result = run_subprocess_with_context(
        [sys.executable, "-c", "print('hello')"], operation_context="print hello"
    )

    assert result.returncode == 0
    assert result.stdout.strip() == "hello"


def test_run_raises_with_context_on_failure() -> None:
    cmd = [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]

    with pytest.raises(RuntimeError) as exc_info:
        run_subprocess_with_context(cmd, operation_context="do the thing")

    message = str(exc_info.value)
    assert message.startswith("Failed to do the thing")
    assert "Exit code: 3" in message
    assert "boom" in message


def test_run_without_check_returns_failure() -> None:
    result = run_subprocess_with_context(
        [sys.executable, "-c", "import sys; sys.exit(3)"],
        operation_context="exit",
        check=False,
    )

    assert result.returncode == 3


def test_missing_executable_raises_file_not_found() -> None:
    with pytest.raises(FileNotFoundError):
        run_subprocess_with_context(
            ["prflow-definitely-not-installed"], operation_context="run nothing"
        )
