"""Tests for terminal answer parsing and the click-backed UserInteraction."""

import pytest
from click.testing import CliRunner

from prflow.core.events import ProgressEvent
from prflow.gateway.interaction.real import RealUserInteraction, interpret_answer
from prflow.gateway.interaction.types import AbortRequested, Accepted, CustomText, Declined


@pytest.mark.parametrize(
    ("answer", "expected"),
    [
        ("y", Accepted()),
        ("YES", Accepted()),
        (" n ", Declined()),
        ("a", AbortRequested()),
        ("quit", AbortRequested()),
        ("feat: add hero", CustomText(text="feat: add hero")),
    ],
)
def test_interpret_answer_with_custom_text(answer: str, expected: object) -> None:
    assert interpret_answer(answer, allow_custom_text=True) == expected


def test_free_text_is_invalid_when_custom_text_not_allowed() -> None:
    assert interpret_answer("feat: add hero", allow_custom_text=False) is None
    assert interpret_answer("   ", allow_custom_text=True) is None


def test_confirm_reprompts_until_valid_answer() -> None:
    with CliRunner().isolation(input="maybe\nn\n"):
        response = RealUserInteraction().confirm("Stage files?", allow_custom_text=False)

    assert response == Declined()


def test_empty_answer_is_asked_again() -> None:
    with CliRunner().isolation(input="\n\nn\n"):
        response = RealUserInteraction().confirm(
            "Stage these files anyway?", allow_custom_text=False
        )

    assert response == Declined()


def test_empty_answer_never_accepts_sensitive_files() -> None:
    with CliRunner().isolation(input="\n"):
        response = RealUserInteraction().confirm(
            "Stage these files anyway?", allow_custom_text=False
        )

    assert response == AbortRequested()


def test_confirm_returns_custom_text() -> None:
    with CliRunner().isolation(input="fix: handle empty hero\n"):
        response = RealUserInteraction().confirm("Commit?", allow_custom_text=True)

    assert response == CustomText(text="fix: handle empty hero")


def test_end_of_input_aborts() -> None:
    with CliRunner().isolation(input=""):
        response = RealUserInteraction().confirm("Commit?", allow_custom_text=True)

    assert response == AbortRequested()


def test_presentation_goes_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    interaction = RealUserInteraction()

    interaction.present_list("Files to stage:", ["added     app/Hero.tsx"])
    interaction.present_progress(ProgressEvent(message="Pushed feature", style="success"))
    interaction.present_error("Push failed")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Files to stage:" in captured.err
    assert "app/Hero.tsx" in captured.err
    assert "Pushed feature" in captured.err
    assert "Error: Push failed" in captured.err
