"""FakeGit builders for a working tree holding a new Hero component."""

from prflow.core.types import StatusEntry
from prflow.gateway.git.fake import FakeGit
from tests.test_utils.changes import make_unified_diff

HERO_PATH = "app/components/Hero.tsx"
HERO_MESSAGE = "feat(components): add hero component"
HERO_COMPONENT = [
    "import React from 'react';",
    "",
    "export default function Hero() {",
    '  return <section className="hero">Welcome</section>;',
    "}",
]


def untracked(path: str) -> StatusEntry:
    return StatusEntry(path=path, index_status="?", worktree_status="?")


def hero_git(*, extra_files: dict[str, list[str]] | None = None, **kwargs) -> FakeGit:
    """FakeGit whose working tree holds Hero.tsx plus any extra new files."""
    files = {HERO_PATH: HERO_COMPONENT, **(extra_files or {})}
    return FakeGit(
        status_entries=[untracked(path) for path in files],
        unstaged_diff="".join(
            make_unified_diff(path, added=lines, new_file=True) for path, lines in files.items()
        ),
        **kwargs,
    )
