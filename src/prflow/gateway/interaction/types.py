"""Answers returned by UserInteraction.confirm."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Accepted:
    """The user said yes."""


@dataclass(frozen=True)
class Declined:
    """The user said no."""


@dataclass(frozen=True)
class CustomText:
    """The user typed replacement text instead of yes/no."""

    text: str


@dataclass(frozen=True)
class AbortRequested:
    """The user asked to stop the workflow (explicit abort, EOF or Ctrl-C)."""


ConfirmResponse = Accepted | Declined | CustomText | AbortRequested
