"""Terminal implementation of UserInteraction using click."""

import click

from prflow.cli.render import render_error, render_event, render_list
from prflow.core.events import ProgressEvent
from prflow.gateway.interaction.abc import UserInteraction
from prflow.gateway.interaction.types import (
    AbortRequested,
    Accepted,
    ConfirmResponse,
    CustomText,
    Declined,
)

_YES = frozenset({"y", "yes"})
_NO = frozenset({"n", "no"})
_ABORT = frozenset({"a", "abort", "q", "quit"})


def interpret_answer(answer: str, *, allow_custom_text: bool) -> ConfirmResponse | None:
    """Map typed text to a response; None means the answer must be asked again."""
    normalized = answer.strip().lower()
    if normalized in _YES:
        return Accepted()
    if normalized in _NO:
        return Declined()
    if normalized in _ABORT:
        return AbortRequested()
    if allow_custom_text and answer.strip():
        return CustomText(text=answer.strip())
    return None


class RealUserInteraction(UserInteraction):
    """Prompts on the terminal; output goes to stderr."""

    def confirm(self, prompt: str, *, allow_custom_text: bool) -> ConfirmResponse:
        hint = "[y]es/[n]o/[a]bort or type a replacement" if allow_custom_text else "[y/n/a]"
        # No default answer; click asks again on an empty line
        while True:
            try:
                answer = click.prompt(f"{prompt} {hint}", err=True)
            except click.exceptions.Abort:
                # click raises Abort on EOF and Ctrl-C
                click.echo(err=True)
                return AbortRequested()
            response = interpret_answer(answer, allow_custom_text=allow_custom_text)
            if response is not None:
                return response
            click.echo("Please answer y, n or a.", err=True)

    def present_list(self, title: str, items: list[str]) -> None:
        render_list(title, items)

    def present_error(self, message: str) -> None:
        render_error(message)

    def present_progress(self, event: ProgressEvent) -> None:
        render_event(event)
