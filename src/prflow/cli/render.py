"""click rendering of workflow progress and outcomes."""

import sys

import click

from prflow.core.events import ProgressEvent

# Style mapping for progress events
STYLE_MAP: dict[str, dict[str, str | bool]] = {
    "info": {},
    "success": {"fg": "green"},
    "warning": {"fg": "yellow"},
    "error": {"fg": "red", "bold": True},
}


def render_event(event: ProgressEvent) -> None:
    """Render a progress event to stderr."""
    click.echo(click.style(f"  {event.message}", **STYLE_MAP[event.style]), err=True)
    sys.stderr.flush()  # Force immediate output through shell buffering


def render_list(title: str, items: list[str]) -> None:
    click.echo(click.style(title, bold=True), err=True)
    for item in items:
        click.echo(f"    {item}", err=True)


def render_error(message: str) -> None:
    click.echo(click.style("Error: ", fg="red", bold=True) + message, err=True)
