"""Tests for path-based sensitive file detection."""

import pytest

from prflow.core.sensitive_files import SensitiveFileScanner, scan
from prflow.core.types import FileStatus, SensitiveFinding, SensitiveReason
from tests.test_utils.changes import make_change, make_change_set


def test_env_file_is_flagged_once() -> None:
    change_set = make_change_set(
        make_change(".env.local", FileStatus.ADDED, added=["API_URL=http://localhost"]),
        make_change("src/app.py", added=["x = 1"]),
    )

    findings = scan(change_set)

    assert findings == (SensitiveFinding(path=".env.local", reason=SensitiveReason.ENV_FILE),)


@pytest.mark.parametrize(
    ("path", "reason"),
    [
        (".env", SensitiveReason.ENV_FILE),
        ("config/.env.production", SensitiveReason.ENV_FILE),
        ("config/secrets.yaml", SensitiveReason.CREDENTIAL_NAME_MATCH),
        ("deploy/DB_PASSWORD.txt", SensitiveReason.CREDENTIAL_NAME_MATCH),
        ("node_modules/left-pad/index.js", SensitiveReason.BUILD_ARTIFACT),
        ("src/__pycache__/app.cpython-312.pyc", SensitiveReason.BUILD_ARTIFACT),
        ("debug.log", SensitiveReason.TEMP_FILE),
        (".DS_Store", SensitiveReason.TEMP_FILE),
        ("notes.txt~", SensitiveReason.TEMP_FILE),
        ("certs/server.pem", SensitiveReason.CERT_KEY_FILE),
        (".ssh/id_rsa", SensitiveReason.CERT_KEY_FILE),
    ],
)
def test_known_risk_patterns(path: str, reason: SensitiveReason) -> None:
    findings = scan(make_change_set(make_change(path, FileStatus.ADDED)))

    assert SensitiveFinding(path=path, reason=reason) in findings


def test_file_matching_several_rules_reports_each_reason() -> None:
    findings = scan(make_change_set(make_change("certs/server.key", FileStatus.ADDED)))

    assert {finding.reason for finding in findings} == {
        SensitiveReason.CREDENTIAL_NAME_MATCH,
        SensitiveReason.CERT_KEY_FILE,
    }


def test_ordinary_files_produce_no_findings() -> None:
    change_set = make_change_set(
        make_change("src/app.py", added=["x = 1"]),
        make_change("README.md", added=["hi"]),
        make_change("app/components/Hero.tsx", FileStatus.ADDED),
    )

    assert scan(change_set) == ()


def test_allowed_paths_are_never_flagged() -> None:
    scanner = SensitiveFileScanner(allowed_paths=frozenset({".env.example"}))

    findings = scanner.scan(make_change_set(make_change(".env.example", FileStatus.ADDED)))

    assert findings == ()


def test_extra_patterns_are_reported_as_temp_files() -> None:
    scanner = SensitiveFileScanner(extra_patterns=("*.sqlite",))

    findings = scanner.scan(make_change_set(make_change("data/app.sqlite", FileStatus.ADDED)))

    assert findings == (
        SensitiveFinding(path="data/app.sqlite", reason=SensitiveReason.TEMP_FILE),
    )
