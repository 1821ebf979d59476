import logging
import shutil
from dataclasses import replace

import click

from prflow.core.context import PrflowContext, create_context
from prflow.core.workflow.driver import run_workflow
from prflow.core.workflow.engine import WorkflowEngine, exit_code_for
from prflow.core.workflow.state import WorkflowRun

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="prflow")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--dry-run", is_flag=True, help="Print git and gh mutations instead of running them")
@click.option(
    "-m",
    "--message",
    type=str,
    default=None,
    help="Commit message to use instead of the suggested one",
)
@click.option("--base", type=str, default=None, help="Base branch for a new pull request")
@click.pass_context
def cli(
    ctx: click.Context, debug: bool, dry_run: bool, message: str | None, base: str | None
) -> None:
    """Commit, push and open a pull request for the current branch.

    Suggests a Conventional Commits message from the diff, checks for files
    that look sensitive, and asks before staging. Re-running with nothing new
    to commit is a no-op and never opens a second pull request.
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        if shutil.which("git") is None:
            raise click.ClickException("git is not installed or not on PATH")
        ctx.obj = create_context(dry_run=dry_run)

    prflow_ctx: PrflowContext = ctx.obj
    repo_root = prflow_ctx.git.get_repository_root(prflow_ctx.cwd)
    if repo_root is None:
        raise click.ClickException(f"Not inside a git repository: {prflow_ctx.cwd}")

    if base is not None:
        prflow_ctx = replace(prflow_ctx, config=replace(prflow_ctx.config, base_branch=base))

    engine = WorkflowEngine(prflow_ctx)
    run = WorkflowRun.start(repo_root, preset_message=message)
    final = run_workflow(engine, run, prflow_ctx.interaction)
    ctx.exit(exit_code_for(final))


def main() -> None:
    """CLI entry point used by the `prflow` command."""
    cli()
