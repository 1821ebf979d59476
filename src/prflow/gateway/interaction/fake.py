"""Fake UserInteraction with scripted answers for testing."""

from typing import NamedTuple

from prflow.core.events import ProgressEvent
from prflow.gateway.interaction.abc import UserInteraction
from prflow.gateway.interaction.types import AbortRequested, ConfirmResponse


class PresentedList(NamedTuple):
    title: str
    items: list[str]


class FakeUserInteraction(UserInteraction):
    """In-memory UserInteraction.

    Constructor Injection:
    ---------------------
    - responses: Answers returned by successive confirm() calls. Once
      exhausted, confirm() returns AbortRequested so a test never loops.

    Mutation Tracking:
    -----------------
    - prompts: Every prompt passed to confirm()
    - lists: Every PresentedList
    - errors: Every message passed to present_error()
    - events: Every ProgressEvent presented
    """

    def __init__(self, *, responses: list[ConfirmResponse] | None = None) -> None:
        self._responses = list(responses or [])
        self._prompts: list[str] = []
        self._lists: list[PresentedList] = []
        self._errors: list[str] = []
        self._events: list[ProgressEvent] = []

    def confirm(self, prompt: str, *, allow_custom_text: bool) -> ConfirmResponse:
        self._prompts.append(prompt)
        if not self._responses:
            return AbortRequested()
        return self._responses.pop(0)

    def present_list(self, title: str, items: list[str]) -> None:
        self._lists.append(PresentedList(title=title, items=list(items)))

    def present_error(self, message: str) -> None:
        self._errors.append(message)

    def present_progress(self, event: ProgressEvent) -> None:
        self._events.append(event)

    @property
    def prompts(self) -> list[str]:
        return list(self._prompts)

    @property
    def lists(self) -> list[PresentedList]:
        return list(self._lists)

    @property
    def errors(self) -> list[str]:
        return list(self._errors)

    @property
    def events(self) -> list[ProgressEvent]:
        return list(self._events)

    @property
    def messages(self) -> list[str]:
        """Text of every presented event, for substring assertions."""
        return [event.message for event in self._events]
