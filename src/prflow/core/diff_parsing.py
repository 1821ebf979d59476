"""Parsing of git status and unified diff output into a ChangeSet."""

import re

from prflow.core.types import ChangeSet, FileChange, FileStatus, StatusEntry

_DIFF_HEADER_RE = re.compile(
    r'^diff --git (?P<old>"a/(?:[^"\\]|\\.)*"|a/.+) (?P<new>"b/(?:[^"\\]|\\.)*"|b/.+)$'
)
_OCTAL_ESCAPE_RE = re.compile(r"[0-7]{3}")
_C_ESCAPES = {"a": 7, "b": 8, "f": 12, "n": 10, "r": 13, "t": 9, "v": 11, "\\": 92, '"': 34}


def parse_porcelain_status(output: str) -> list[StatusEntry]:
    """Parse ``git status --porcelain=v1 -z`` output.

    Entries are NUL-separated ``XY path``; renames and copies are followed by
    an extra NUL-terminated field holding the original path.
    """
    entries: list[StatusEntry] = []
    fields = output.split("\0")
    i = 0
    while i < len(fields):
        field = fields[i]
        i += 1
        if len(field) < 4:
            continue
        index_status = field[0]
        worktree_status = field[1]
        path = field[3:]
        old_path: str | None = None
        if index_status in ("R", "C") and i < len(fields):
            old_path = fields[i]
            i += 1
        entries.append(
            StatusEntry(
                path=path,
                index_status=index_status,
                worktree_status=worktree_status,
                old_path=old_path,
            )
        )
    return entries


def _unquote_c_path(quoted: str) -> str:
    """Decode a path git printed C-style: ``"caf\\303\\251.py"`` -> ``café.py``."""
    body = quoted[1:-1]
    raw = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\":
            raw += char.encode("utf-8")
            i += 1
            continue
        octal = body[i + 1 : i + 4]
        if _OCTAL_ESCAPE_RE.fullmatch(octal):
            raw.append(int(octal, 8))
            i += 4
            continue
        escaped = body[i + 1 : i + 2]
        if escaped in _C_ESCAPES:
            raw.append(_C_ESCAPES[escaped])
        else:
            raw += escaped.encode("utf-8")
        i += 2
    return raw.decode("utf-8", errors="replace")


def _decode_path(path: str) -> str:
    # git ends "---"/"+++" names containing spaces with a TAB
    path = path.split("\t", 1)[0]
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        return _unquote_c_path(path)
    return path


def _strip_prefix(path: str) -> str | None:
    path = _decode_path(path)
    if path == "/dev/null":
        return None
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


class _FileDiffBuilder:
    def __init__(self, old_path: str, new_path: str) -> None:
        self.old_path = old_path
        self.new_path = new_path
        self.status = FileStatus.MODIFIED
        self.hunks: list[str] = []
        self._current: list[str] | None = None

    @property
    def in_hunk(self) -> bool:
        return bool(self.hunks) or self._current is not None

    def start_hunk(self, header: str) -> None:
        self._flush_hunk()
        self._current = [header]

    def add_line(self, line: str) -> None:
        if self._current is not None:
            self._current.append(line)

    def _flush_hunk(self) -> None:
        if self._current is not None:
            self.hunks.append("\n".join(self._current))
        self._current = None

    def build(self) -> FileChange:
        self._flush_hunk()
        if self.status == FileStatus.DELETED:
            path = self.old_path
        else:
            path = self.new_path
        old_path = self.old_path if self.status == FileStatus.RENAMED else None
        return FileChange(path=path, status=self.status, hunks=tuple(self.hunks), old_path=old_path)


def parse_unified_diff(text: str) -> list[FileChange]:
    """Parse ``git diff`` output into one FileChange per file section.

    Binary files and mode-only changes produce a FileChange without hunks.
    """
    changes: list[FileChange] = []
    current: _FileDiffBuilder | None = None

    for line in text.splitlines():
        header = _DIFF_HEADER_RE.match(line)
        if header is not None:
            if current is not None:
                changes.append(current.build())
            old_path = _strip_prefix(header.group("old")) or header.group("old")
            new_path = _strip_prefix(header.group("new")) or header.group("new")
            current = _FileDiffBuilder(old_path, new_path)
            continue
        if current is None:
            continue

        if line.startswith("@@"):
            current.start_hunk(line)
        elif current.in_hunk:
            current.add_line(line)
        elif line.startswith("new file mode"):
            current.status = FileStatus.ADDED
        elif line.startswith("deleted file mode"):
            current.status = FileStatus.DELETED
        elif line.startswith("rename from "):
            current.old_path = _decode_path(line[len("rename from ") :])
            current.status = FileStatus.RENAMED
        elif line.startswith("rename to "):
            current.new_path = _decode_path(line[len("rename to ") :])
            current.status = FileStatus.RENAMED
        elif line.startswith("--- "):
            old = _strip_prefix(line[4:])
            if old is None:
                current.status = FileStatus.ADDED
            else:
                current.old_path = old
        elif line.startswith("+++ "):
            new = _strip_prefix(line[4:])
            if new is None:
                current.status = FileStatus.DELETED
            else:
                current.new_path = new

    if current is not None:
        changes.append(current.build())
    return changes


def _status_from_entry(entry: StatusEntry) -> FileStatus:
    codes = {entry.index_status, entry.worktree_status}
    if "R" in codes:
        return FileStatus.RENAMED
    if "?" in codes or "A" in codes:
        return FileStatus.ADDED
    if "D" in codes:
        return FileStatus.DELETED
    return FileStatus.MODIFIED


def build_change_set(
    entries: list[StatusEntry],
    *,
    staged_diff: str,
    unstaged_diff: str,
) -> ChangeSet:
    """Combine status entries with staged and unstaged diffs into a ChangeSet.

    Order follows the status entries. Staged hunks precede unstaged hunks for
    the same path. A file deleted in the working tree is reported as deleted
    regardless of what is staged.
    """
    staged = {change.path: change for change in parse_unified_diff(staged_diff)}
    unstaged = {change.path: change for change in parse_unified_diff(unstaged_diff)}

    changes: list[FileChange] = []
    seen: set[str] = set()
    for entry in entries:
        if entry.path in seen:
            continue
        seen.add(entry.path)
        staged_change = staged.get(entry.path)
        unstaged_change = unstaged.get(entry.path)

        status = _status_from_entry(entry)
        if staged_change is not None:
            status = staged_change.status
        elif unstaged_change is not None:
            status = unstaged_change.status
        if unstaged_change is not None and unstaged_change.status == FileStatus.DELETED:
            status = FileStatus.DELETED

        hunks: tuple[str, ...] = ()
        old_path = entry.old_path
        for change in (staged_change, unstaged_change):
            if change is None:
                continue
            hunks += change.hunks
            if old_path is None and change.old_path is not None:
                old_path = change.old_path

        changes.append(
            FileChange(
                path=entry.path,
                status=status,
                hunks=hunks,
                old_path=old_path if status == FileStatus.RENAMED else None,
            )
        )

    return ChangeSet(changes=tuple(changes))
