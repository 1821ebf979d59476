import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

CONFIG_DIR_NAME = ".prflow"
DEFAULT_BASE_BRANCH = "main"
DEFAULT_REMOTE = "origin"


@dataclass(frozen=True)
class LoadedConfig:
    """In-memory representation of `.prflow/config.toml`.

    Example config.toml:
      base_branch = "main"
      remote = "origin"

      [sensitive]
      # Exact repository-relative paths that are never flagged
      allow = [".env.example"]
      # Extra filename globs, flagged like temporary files
      extra_patterns = ["*.sqlite"]
    """

    base_branch: str
    remote: str
    sensitive_allow: tuple[str, ...]
    sensitive_extra_patterns: tuple[str, ...]

    @staticmethod
    def defaults() -> "LoadedConfig":
        return LoadedConfig(
            base_branch=DEFAULT_BASE_BRANCH,
            remote=DEFAULT_REMOTE,
            sensitive_allow=(),
            sensitive_extra_patterns=(),
        )


def _require_str(cfg_path: Path, key: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise click.ClickException(f"{cfg_path}: '{key}' must be a non-empty string")
    return value


def _require_str_list(cfg_path: Path, key: str, value: Any) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise click.ClickException(f"{cfg_path}: '{key}' must be a list of strings")
    return tuple(value)


def load_config(repo_root: Path) -> LoadedConfig:
    """Load .prflow/config.toml under repo_root if present; otherwise return defaults.

    Raises:
        click.ClickException: If the file is not valid TOML or a value has the
            wrong type
    """
    cfg_path = repo_root / CONFIG_DIR_NAME / "config.toml"
    if not cfg_path.exists():
        return LoadedConfig.defaults()

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise click.ClickException(f"{cfg_path}: invalid TOML: {e}") from e

    base_branch = _require_str(
        cfg_path, "base_branch", data.get("base_branch", DEFAULT_BASE_BRANCH)
    )
    remote = _require_str(cfg_path, "remote", data.get("remote", DEFAULT_REMOTE))

    sensitive = data.get("sensitive", {})
    if not isinstance(sensitive, dict):
        raise click.ClickException(f"{cfg_path}: [sensitive] must be a table")
    allow = _require_str_list(cfg_path, "sensitive.allow", sensitive.get("allow", []))
    extra = _require_str_list(
        cfg_path, "sensitive.extra_patterns", sensitive.get("extra_patterns", [])
    )

    return LoadedConfig(
        base_branch=base_branch,
        remote=remote,
        sensitive_allow=allow,
        sensitive_extra_patterns=extra,
    )
