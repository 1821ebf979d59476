"""User-facing output helpers.

Status messages go to stderr so stdout stays clean for anything a caller may
want to capture.
"""

import click


def user_output(message: str = "", *, nl: bool = True) -> None:
    """Print a message for the user on stderr."""
    click.echo(message, err=True, nl=nl)
