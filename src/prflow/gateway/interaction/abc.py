"""Abstract base class for talking to the person driving the workflow."""

from abc import ABC, abstractmethod

from prflow.core.events import ProgressEvent
from prflow.gateway.interaction.types import ConfirmResponse


class UserInteraction(ABC):
    """Abstract interface for prompts and user-facing output."""

    @abstractmethod
    def confirm(self, prompt: str, *, allow_custom_text: bool) -> ConfirmResponse:
        """Ask a yes/no question.

        Args:
            prompt: Question to show
            allow_custom_text: If True, any answer other than yes, no or abort
                is returned as CustomText

        Returns:
            Accepted, Declined, CustomText or AbortRequested
        """
        ...

    @abstractmethod
    def present_list(self, title: str, items: list[str]) -> None:
        """Show a titled list of items."""
        ...

    @abstractmethod
    def present_error(self, message: str) -> None:
        """Show an error message verbatim."""
        ...

    @abstractmethod
    def present_progress(self, event: ProgressEvent) -> None:
        """Show a progress event."""
        ...
