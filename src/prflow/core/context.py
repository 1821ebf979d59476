"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from prflow.cli.config import LoadedConfig, load_config
from prflow.core.sensitive_files import SensitiveFileScanner
from prflow.gateway.git.abc import Git
from prflow.gateway.git.dry_run import DryRunGit
from prflow.gateway.git.real import RealGit
from prflow.gateway.github.abc import GitHub
from prflow.gateway.github.dry_run import DryRunGitHub
from prflow.gateway.github.real import RealGitHub
from prflow.gateway.interaction.abc import UserInteraction
from prflow.gateway.interaction.real import RealUserInteraction


@dataclass(frozen=True)
class PrflowContext:
    """Immutable context holding all dependencies for a workflow run.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    git: Git
    github: GitHub
    interaction: UserInteraction
    config: LoadedConfig
    cwd: Path  # Current working directory at CLI invocation
    dry_run: bool

    @property
    def scanner(self) -> SensitiveFileScanner:
        return SensitiveFileScanner(
            allowed_paths=frozenset(self.config.sensitive_allow),
            extra_patterns=self.config.sensitive_extra_patterns,
        )


def context_for_test(
    *,
    git: Git | None = None,
    github: GitHub | None = None,
    interaction: UserInteraction | None = None,
    config: LoadedConfig | None = None,
    cwd: Path | None = None,
    dry_run: bool = False,
) -> PrflowContext:
    """Create a context with fakes for every dependency not supplied.

    Example:
        >>> git = FakeGit(status_entries=[...], unstaged_diff=diff)
        >>> ctx = context_for_test(git=git, interaction=FakeUserInteraction(responses=[...]))
    """
    from prflow.gateway.git.fake import FakeGit
    from prflow.gateway.github.fake import FakeGitHub
    from prflow.gateway.interaction.fake import FakeUserInteraction

    return PrflowContext(
        git=git if git is not None else FakeGit(),
        github=github if github is not None else FakeGitHub(),
        interaction=interaction if interaction is not None else FakeUserInteraction(),
        config=config if config is not None else LoadedConfig.defaults(),
        cwd=cwd if cwd is not None else Path("/repo"),
        dry_run=dry_run,
    )


def create_context(*, dry_run: bool, cwd: Path | None = None) -> PrflowContext:
    """Create production context with real implementations.

    Args:
        dry_run: If True, wrap git and gh gateways with dry-run wrappers that
            print mutations instead of running them
        cwd: Working directory; defaults to the process working directory

    Returns:
        PrflowContext with config loaded from the enclosing repository, or
        defaults when cwd is not inside one
    """
    resolved_cwd = cwd if cwd is not None else Path.cwd()

    git: Git = RealGit()
    github: GitHub = RealGitHub()
    if dry_run:
        git = DryRunGit(git)
        github = DryRunGitHub(github)

    repo_root = git.get_repository_root(resolved_cwd)
    config = load_config(repo_root) if repo_root is not None else LoadedConfig.defaults()

    return PrflowContext(
        git=git,
        github=github,
        interaction=RealUserInteraction(),
        config=config,
        cwd=resolved_cwd,
        dry_run=dry_run,
    )
