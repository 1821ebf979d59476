"""Conventional Commits rendering, validation and parsing."""

import re
from dataclasses import dataclass

from prflow.core.classifier import MAX_DESCRIPTION_LENGTH
from prflow.core.errors import CommitMessageValidationError
from prflow.core.types import ChangeSummary, CommitType

_SUBJECT_RE = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^()]*)\))?(?P<breaking>!)?: (?P<description>.*)$"
)
_SCOPE_RE = re.compile(r"^[a-z0-9-]+$")
_NON_IMPERATIVE_RE = re.compile(
    r"^(added|adds|adding|fixed|fixes|fixing|updated|updates|updating)\b"
)

VALID_TYPES = frozenset(commit_type.value for commit_type in CommitType)


@dataclass(frozen=True)
class ParsedCommitMessage:
    """Fields recovered from a ``type(scope): description`` subject line."""

    commit_type: CommitType
    scope: str | None
    description: str


@dataclass(frozen=True)
class ValidMessage:
    """A commit message accepted by validation, with advisory warnings."""

    message: str
    warnings: tuple[str, ...]


def build(summary: ChangeSummary) -> str:
    """Render a ChangeSummary as a Conventional Commits subject line."""
    if summary.scope:
        return f"{summary.commit_type.value}({summary.scope}): {summary.description}"
    return f"{summary.commit_type.value}: {summary.description}"


def parse(message: str) -> ParsedCommitMessage | None:
    """Parse the subject line produced by ``build``.

    Returns None when the first line is not Conventional Commits shaped or
    names an unknown type.
    """
    subject = message.splitlines()[0] if message else ""
    match = _SUBJECT_RE.match(subject)
    if match is None or match.group("type") not in VALID_TYPES:
        return None
    return ParsedCommitMessage(
        commit_type=CommitType(match.group("type")),
        scope=match.group("scope") or None,
        description=match.group("description"),
    )


def validate(candidate: str) -> ValidMessage | CommitMessageValidationError:
    """Check a user-supplied commit message.

    Hard rejections: malformed subject, unknown type, invalid scope, empty
    description, description starting with an uppercase letter or ending
    with a period. Tense and length problems are returned as warnings only.
    """
    message = candidate.strip()
    subject = message.splitlines()[0] if message else ""
    match = _SUBJECT_RE.match(subject)
    if match is None:
        return CommitMessageValidationError(
            candidate=candidate,
            reasons=("expected 'type(scope): description' or 'type: description'",),
        )

    reasons: list[str] = []
    commit_type = match.group("type")
    scope = match.group("scope")
    description = match.group("description").strip()

    if commit_type not in VALID_TYPES:
        allowed = ", ".join(t.value for t in CommitType)
        reasons.append(f"unknown type '{commit_type}' (expected one of: {allowed})")
    if scope is not None and not _SCOPE_RE.match(scope):
        reasons.append(f"scope '{scope}' must be lowercase letters, digits or hyphens")
    if not description:
        reasons.append("description is empty")
    else:
        if description[0].isupper():
            reasons.append("description must start with a lowercase letter")
        if description.endswith("."):
            reasons.append("description must not end with a period")
    if reasons:
        return CommitMessageValidationError(candidate=candidate, reasons=tuple(reasons))

    warnings: list[str] = []
    if _NON_IMPERATIVE_RE.match(description.lower()):
        first_word = description.split()[0]
        warnings.append(f"description should use the imperative mood, not '{first_word}'")
    if len(subject) > MAX_DESCRIPTION_LENGTH:
        warnings.append(
            f"subject is {len(subject)} characters; keep it under {MAX_DESCRIPTION_LENGTH}"
        )
    return ValidMessage(message=message, warnings=tuple(warnings))
