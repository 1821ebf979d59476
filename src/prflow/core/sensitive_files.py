"""Path-based detection of files that should not be committed.

Only paths are inspected, never file contents. A secret embedded in an
ordinary-looking filename is not detected; for filenames, false positives are
preferred over false negatives.
"""

import fnmatch
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePosixPath

from prflow.core.types import ChangeSet, SensitiveFinding, SensitiveReason

_ENV_FILE_RE = re.compile(r"^\.env(\..+)?$")
_CREDENTIAL_WORDS = ("key", "secret", "token", "password", "credential")
_BUILD_ARTIFACT_DIRS = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        "target",
        "out",
        "__pycache__",
        ".venv",
        "venv",
        ".next",
        ".nuxt",
        ".turbo",
        ".cache",
        ".parcel-cache",
        "coverage",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".tox",
        ".gradle",
        "vendor",
    }
)
_TEMP_FILE_PATTERNS = (
    "*.tmp",
    "*.temp",
    "*.log",
    "*.swp",
    "*.swo",
    "*~",
    "*.bak",
    "*.orig",
    "*.pyc",
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
)
_CERT_KEY_EXTENSIONS = frozenset(
    {".pem", ".key", ".p12", ".pfx", ".crt", ".cer", ".der", ".jks", ".keystore", ".asc"}
)
_PRIVATE_KEY_NAMES = frozenset({"id_rsa", "id_dsa", "id_ecdsa", "id_ed25519"})


@dataclass(frozen=True)
class SensitiveFileScanner:
    """Flags ChangeSet paths matching known-risk patterns.

    Attributes:
        allowed_paths: Exact repository-relative paths that are never flagged
            (for example ``.env.example``)
        extra_patterns: Additional filename glob patterns, reported as
            SensitiveReason.TEMP_FILE
    """

    allowed_paths: frozenset[str] = frozenset()
    extra_patterns: tuple[str, ...] = ()

    def scan(self, change_set: ChangeSet) -> tuple[SensitiveFinding, ...]:
        """Return every finding for the ChangeSet, in ChangeSet order.

        A file may match several rules; each reason is reported once.
        """
        findings: list[SensitiveFinding] = []
        for path in change_set.paths:
            if path in self.allowed_paths:
                continue
            for reason in self.reasons_for(path):
                findings.append(SensitiveFinding(path=path, reason=reason))
        return tuple(findings)

    def reasons_for(self, path: str) -> list[SensitiveReason]:
        pure = PurePosixPath(path)
        name = pure.name
        lowered = name.lower()
        reasons: list[SensitiveReason] = []

        if _ENV_FILE_RE.match(name):
            reasons.append(SensitiveReason.ENV_FILE)
        if any(word in lowered for word in _CREDENTIAL_WORDS):
            reasons.append(SensitiveReason.CREDENTIAL_NAME_MATCH)
        if any(part in _BUILD_ARTIFACT_DIRS for part in pure.parts[:-1]):
            reasons.append(SensitiveReason.BUILD_ARTIFACT)
        if _matches_any(name, _TEMP_FILE_PATTERNS) or _matches_any(name, self.extra_patterns):
            reasons.append(SensitiveReason.TEMP_FILE)
        if pure.suffix.lower() in _CERT_KEY_EXTENSIONS or lowered in _PRIVATE_KEY_NAMES:
            reasons.append(SensitiveReason.CERT_KEY_FILE)
        return reasons


def _matches_any(name: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)


def scan(change_set: ChangeSet) -> tuple[SensitiveFinding, ...]:
    """Scan with the built-in rules only."""
    return SensitiveFileScanner().scan(change_set)
