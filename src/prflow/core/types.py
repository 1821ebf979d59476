"""Core value types shared by the classifier, scanner and workflow engine."""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class FileStatus(Enum):
    """Kind of change a file underwent relative to the branch tip."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True)
class FileChange:
    """A single file's change, with the textual diff hunks that describe it.

    Attributes:
        path: Repository-relative path (new path for renames)
        status: Kind of change
        hunks: Diff hunks, each starting with its ``@@`` header line
        old_path: Previous path for renames, None otherwise
    """

    path: str
    status: FileStatus
    hunks: tuple[str, ...] = ()
    old_path: str | None = None

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("FileChange path must be non-empty")
        if self.path.startswith("/"):
            raise ValueError(f"FileChange path must be relative: {self.path}")

    @property
    def added_lines(self) -> list[str]:
        """Content of lines added by this change, without the ``+`` marker."""
        return [line[1:] for line in self._body_lines() if line.startswith("+")]

    @property
    def removed_lines(self) -> list[str]:
        """Content of lines removed by this change, without the ``-`` marker."""
        return [line[1:] for line in self._body_lines() if line.startswith("-")]

    def _body_lines(self) -> Iterator[str]:
        for hunk in self.hunks:
            for line in hunk.splitlines():
                # Hunks never contain file headers, only "@@" headers and
                # "\ No newline at end of file" markers
                if line.startswith(("@@", "\\")):
                    continue
                yield line


@dataclass(frozen=True)
class ChangeSet:
    """Immutable snapshot of every file change considered by one workflow run."""

    changes: tuple[FileChange, ...]

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self) -> Iterator[FileChange]:
        return iter(self.changes)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    @property
    def paths(self) -> list[str]:
        return [change.path for change in self.changes]

    @property
    def stage_paths(self) -> list[str]:
        """Every path to hand to ``git add``, including the old side of renames."""
        paths: list[str] = []
        for change in self.changes:
            if change.old_path is not None and change.old_path not in paths:
                paths.append(change.old_path)
            if change.path not in paths:
                paths.append(change.path)
        return paths


class CommitType(Enum):
    """Conventional Commit types, declared in classification priority order."""

    FEAT = "feat"
    FIX = "fix"
    DOCS = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    TEST = "test"
    CHORE = "chore"


@dataclass(frozen=True)
class ChangeSummary:
    """Structured description of a ChangeSet, ready to render as a commit message.

    Attributes:
        commit_type: Conventional Commit type
        scope: Module the change is concentrated in, or None
        description: Imperative, lowercase, period-free phrase
        rationale: Evidence strings that selected commit_type
    """

    commit_type: CommitType
    scope: str | None
    description: str
    rationale: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.description:
            raise ValueError("ChangeSummary description must be non-empty")


class SensitiveReason(Enum):
    """Why a path was flagged by the sensitive-file scan."""

    ENV_FILE = "env_file"
    CREDENTIAL_NAME_MATCH = "credential_name_match"
    BUILD_ARTIFACT = "build_artifact"
    TEMP_FILE = "temp_file"
    CERT_KEY_FILE = "cert_key_file"


@dataclass(frozen=True)
class SensitiveFinding:
    """A path matching a known-risk pattern."""

    path: str
    reason: SensitiveReason


@dataclass(frozen=True)
class StatusEntry:
    """One line of ``git status --porcelain`` output.

    Attributes:
        path: Current path of the file
        index_status: First status column (staged side), e.g. "M", "A", "R", "?"
        worktree_status: Second status column (unstaged side)
        old_path: Previous path when the entry is a rename
    """

    path: str
    index_status: str
    worktree_status: str
    old_path: str | None = None

    @property
    def is_untracked(self) -> bool:
        return self.index_status == "?" and self.worktree_status == "?"
