"""Progress events emitted by the workflow engine."""

from dataclasses import dataclass
from typing import Literal

EventStyle = Literal["info", "success", "warning", "error"]


@dataclass(frozen=True)
class ProgressEvent:
    """A user-facing status line.

    Attributes:
        message: Text to display
        style: Visual treatment; renderers map it to colors
    """

    message: str
    style: EventStyle = "info"
