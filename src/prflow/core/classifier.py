"""Rule-ordered classification of a ChangeSet into a ChangeSummary.

Classification is a priority list of (commit type, matcher) pairs evaluated
top to bottom; the first matcher that returns a RuleMatch wins. Matchers are
pure functions over a precomputed ChangeAnalysis, so ``classify`` has no side
effects and is deterministic for a given ChangeSet.
"""

import logging
import re
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

from prflow.core.types import ChangeSet, ChangeSummary, CommitType, FileChange, FileStatus

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 72


class FileCategory(Enum):
    """Coarse role of a path, derived from its name and location only."""

    DOCS = "docs"
    TEST = "test"
    STYLE = "style"
    DEPENDENCY_MANIFEST = "dependency_manifest"
    CI = "ci"
    CONFIG = "config"
    SOURCE = "source"
    OTHER = "other"


_DOC_DIRS = frozenset({"docs", "doc", "documentation"})
_DOC_EXTENSIONS = frozenset({".md", ".mdx", ".rst", ".adoc"})
_DOC_STEMS = frozenset(
    {"readme", "changelog", "changes", "license", "contributing", "authors", "notice"}
)
_TEST_DIRS = frozenset({"tests", "test", "__tests__", "spec", "specs", "e2e"})
_TEST_NAME_RE = re.compile(
    r"^(test_.+\.py|.+_test\.(py|go|rb)|.+\.(test|spec)\.[cm]?[jt]sx?"
    r"|.+Test\.(java|kt)|conftest\.py)$"
)
_STYLE_EXTENSIONS = frozenset({".css", ".scss", ".sass", ".less", ".styl", ".pcss"})
_DEPENDENCY_MANIFESTS = frozenset(
    {
        "package.json",
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "pyproject.toml",
        "poetry.lock",
        "uv.lock",
        "pipfile",
        "pipfile.lock",
        "setup.py",
        "setup.cfg",
        "cargo.toml",
        "cargo.lock",
        "go.mod",
        "go.sum",
        "gemfile",
        "gemfile.lock",
        "composer.json",
        "composer.lock",
    }
)
_LOCKFILE_SUFFIXES = (".lock", "-lock.json", "-lock.yaml", ".sum")
_REQUIREMENTS_RE = re.compile(r"^requirements([-_.\w]*)\.(txt|in)$")
_CONFIG_NAMES = frozenset(
    {
        "makefile",
        "dockerfile",
        "docker-compose.yml",
        "docker-compose.yaml",
        ".gitignore",
        ".gitattributes",
        ".editorconfig",
        ".dockerignore",
        ".pre-commit-config.yaml",
        "tsconfig.json",
        "tox.ini",
        "noxfile.py",
        ".npmrc",
        ".nvmrc",
        ".python-version",
    }
)
_CONFIG_NAME_PREFIXES = (".eslintrc", ".prettierrc", ".babelrc", ".stylelintrc")
_CONFIG_NAME_MARKERS = (".config.",)
_SOURCE_EXTENSIONS = frozenset(
    {
        ".py",
        ".js",
        ".jsx",
        ".ts",
        ".tsx",
        ".mjs",
        ".cjs",
        ".vue",
        ".svelte",
        ".go",
        ".rs",
        ".java",
        ".kt",
        ".rb",
        ".php",
        ".cs",
        ".swift",
        ".c",
        ".h",
        ".cc",
        ".cpp",
        ".hpp",
        ".scala",
        ".sh",
        ".sql",
    }
)
_COMPONENT_EXTENSIONS = frozenset({".jsx", ".tsx", ".vue", ".svelte"})

# Container directories that say nothing about which module changed
_GENERIC_DIRS = frozenset(
    {
        "src",
        "app",
        "apps",
        "lib",
        "libs",
        "packages",
        "pkg",
        "source",
        "internal",
        "cmd",
        "modules",
        "main",
        "include",
    }
    | _TEST_DIRS
    | _DOC_DIRS
)
# File stems that name their directory rather than themselves
_INDEX_STEMS = frozenset({"index", "__init__", "main", "mod", "init", "__main__"})


def categorize_path(path: str) -> FileCategory:
    """Assign a FileCategory from path heuristics.

    Checked in order: dependency manifests, CI, tests, docs, stylesheets,
    tooling config, source code.
    """
    pure = PurePosixPath(path)
    name = pure.name.lower()
    dirs = [part.lower() for part in pure.parts[:-1]]
    suffix = pure.suffix.lower()
    stem = name.split(".")[0]

    if name in _DEPENDENCY_MANIFESTS or _REQUIREMENTS_RE.match(name):
        return FileCategory.DEPENDENCY_MANIFEST
    if path.lower().startswith(".github/workflows/") or ".circleci" in dirs:
        return FileCategory.CI
    if name in (".gitlab-ci.yml", ".travis.yml", "jenkinsfile", "azure-pipelines.yml"):
        return FileCategory.CI
    if any(part in _TEST_DIRS for part in dirs) or _TEST_NAME_RE.match(pure.name):
        return FileCategory.TEST
    if any(part in _DOC_DIRS for part in dirs) or suffix in _DOC_EXTENSIONS or stem in _DOC_STEMS:
        return FileCategory.DOCS
    if suffix in _STYLE_EXTENSIONS:
        return FileCategory.STYLE
    if (
        name in _CONFIG_NAMES
        or name.startswith(_CONFIG_NAME_PREFIXES)
        or any(marker in name for marker in _CONFIG_NAME_MARKERS)
    ):
        return FileCategory.CONFIG
    if suffix in _SOURCE_EXTENSIONS:
        return FileCategory.SOURCE
    return FileCategory.OTHER


# ============================================================================
# Line-level helpers
# ============================================================================

_COMMENT_PREFIXES = ("#", "//", "/*", "*", "<!--", "-->", '"""', "'''", "--")


def _is_comment(line: str) -> bool:
    return line.strip().startswith(_COMMENT_PREFIXES)


def _code_lines(lines: list[str]) -> list[str]:
    return [line for line in lines if line.strip() and not _is_comment(line)]


def _normalize(line: str) -> str:
    return "".join(line.split())


_ERROR_HANDLING_RE = re.compile(
    r"\b(try|except|catch|finally|raise|throw|throws|rescue|panic|recover|"
    r"\w*Error|\w*Exception|err)\b"
)
_CONDITIONAL_RE = re.compile(
    r"\b(if|elif|else|switch|case|unless|guard|None|null|nil|undefined)\b"
    r"|\?\?|\?\.|&&|\|\||[!=<>]=|\bis\s+not\b|\bis\s+None\b"
)
_STYLE_ATTRIBUTE_RE = re.compile(r"\b(className|class|style|styles|tw|sx)\s*[=:{]")


# ============================================================================
# Capability detection
# ============================================================================

CAPABILITY_NOUNS: dict[str, str] = {
    "command": "command",
    "route": "endpoint",
    "component": "component",
    "class": "class",
    "function": "function",
}
# Most externally visible first; used to pick the headline capability
_CAPABILITY_PRIORITY = ("command", "route", "component", "class", "function")

_ROUTE_RES = (
    re.compile(
        r"^\s*@(?:\w+\.)*(?:route|get|post|put|patch|delete|api_route|websocket)"
        r"\(\s*[rf]?['\"](?P<name>[^'\"]*)['\"]"
    ),
    re.compile(
        r"^\s*(?:app|router|server|api)\.(?:get|post|put|patch|delete|all|use)"
        r"\(\s*['\"`](?P<name>/[^'\"`]*)['\"`]"
    ),
)
_COMMAND_DECORATOR_RE = re.compile(
    r"^\s*@(?:\w+\.)*command\(\s*(?:name\s*=\s*)?(?:['\"](?P<name>[\w:-]+)['\"])?"
)
_COMMAND_CALL_RES = (
    re.compile(r"\.add_parser\(\s*['\"](?P<name>[\w:-]+)['\"]"),
    re.compile(r"\.add_command\(\s*\w+\s*,\s*(?:name\s*=\s*)?['\"](?P<name>[\w:-]+)['\"]"),
)
_PY_DEF_RE = re.compile(r"^(?:async\s+)?def\s+(?P<name>[A-Za-z]\w*)\s*\(")
_PY_CLASS_RE = re.compile(r"^class\s+(?P<name>[A-Za-z]\w*)\s*[(:]")
_JS_FUNCTION_RE = re.compile(
    r"^export\s+(?:default\s+)?(?:async\s+)?function\*?\s+(?P<name>[A-Za-z_$][\w$]*)"
)
_JS_CONST_RE = re.compile(
    r"^export\s+(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*(?::[^=]+)?=\s*"
    r"(?P<value>(?:async\s*)?(?:\(|function|React\.|memo|forwardRef|styled)|)"
)
_JS_CLASS_RE = re.compile(r"^export\s+(?:default\s+)?(?:abstract\s+)?class\s+(?P<name>\w+)")
_GO_FUNC_RE = re.compile(r"^func\s+(?:\([^)]*\)\s*)?(?P<name>[A-Z]\w*)\s*\(")
_RUST_FN_RE = re.compile(r"^pub\s+(?:async\s+)?fn\s+(?P<name>\w+)")


@dataclass(frozen=True)
class Capability:
    """An externally-invocable unit introduced (or removed) by a change.

    Attributes:
        kind: One of "command", "route", "component", "class", "function"
        name: Identifier, command name or route path as written
        path: File declaring it
    """

    kind: str
    name: str
    path: str

    @property
    def label(self) -> str:
        """Human phrase for descriptions, e.g. "hero section component"."""
        words = split_words(self.name) or ["root"]
        return f"{' '.join(words)} {CAPABILITY_NOUNS[self.kind]}"


def split_words(name: str) -> list[str]:
    """Split camelCase, PascalCase, snake_case, kebab-case and paths into lowercase words."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", name)
    spaced = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", spaced)
    return [word.lower() for word in re.split(r"[^A-Za-z0-9]+", spaced) if word]


def _is_component_name(name: str) -> bool:
    return name[:1].isupper()


def _capabilities_in(lines: list[str], path: str) -> list[Capability]:
    """Scan declaration lines for externally-invocable units."""
    suffix = PurePosixPath(path).suffix.lower()
    is_component_file = suffix in _COMPONENT_EXTENSIONS
    found: list[Capability] = []
    pending_command = False

    for line in lines:
        route = next((m for regex in _ROUTE_RES if (m := regex.match(line)) is not None), None)
        if route is not None:
            found.append(Capability("route", route.group("name"), path))
            continue

        command = _COMMAND_DECORATOR_RE.match(line)
        if command is not None:
            if command.group("name"):
                found.append(Capability("command", command.group("name"), path))
            else:
                pending_command = True
            continue
        for regex in _COMMAND_CALL_RES:
            call = regex.search(line)
            if call is not None:
                found.append(Capability("command", call.group("name"), path))

        py_def = _PY_DEF_RE.match(line)
        if py_def is not None:
            name = py_def.group("name")
            if pending_command:
                found.append(Capability("command", name.replace("_", "-"), path))
            else:
                found.append(Capability("function", name, path))
            pending_command = False
            continue
        if line.strip() and not line.lstrip().startswith("@"):
            pending_command = False

        js_function = _JS_FUNCTION_RE.match(line)
        if js_function is not None:
            name = js_function.group("name")
            kind = "component" if is_component_file and _is_component_name(name) else "function"
            found.append(Capability(kind, name, path))
            continue
        js_const = _JS_CONST_RE.match(line)
        if js_const is not None:
            name = js_const.group("name")
            if is_component_file and _is_component_name(name):
                found.append(Capability("component", name, path))
            elif js_const.group("value"):
                found.append(Capability("function", name, path))
            continue

        for regex, kind in (
            (_PY_CLASS_RE, "class"),
            (_JS_CLASS_RE, "class"),
            (_GO_FUNC_RE, "function"),
            (_RUST_FN_RE, "function"),
        ):
            match = regex.match(line)
            if match is not None:
                found.append(Capability(kind, match.group("name"), path))
                break

    if not found and is_component_file and suffix in (".vue", ".svelte"):
        found.append(Capability("component", PurePosixPath(path).stem, path))
    return found


# ============================================================================
# Analysis
# ============================================================================


@dataclass(frozen=True)
class ChangeAnalysis:
    """Precomputed facts about a ChangeSet shared by all rule matchers."""

    change_set: ChangeSet
    categories: dict[str, FileCategory]
    status_counts: Counter[FileStatus]
    category_counts: Counter[FileCategory]
    new_capabilities_in_added_files: tuple[Capability, ...]
    new_capabilities: tuple[Capability, ...]
    removed_code_pool: Counter[str]

    def category(self, change: FileChange) -> FileCategory:
        return self.categories[change.path]

    def changes_in(self, *categories: FileCategory) -> list[FileChange]:
        return [c for c in self.change_set if self.categories[c.path] in categories]

    def all_in(self, *categories: FileCategory) -> bool:
        return all(self.categories[c.path] in categories for c in self.change_set)


def analyze(change_set: ChangeSet) -> ChangeAnalysis:
    """Compute histograms and capability evidence for a ChangeSet."""
    categories = {change.path: categorize_path(change.path) for change in change_set}

    removed_names: set[tuple[str, str]] = set()
    removed_pool: Counter[str] = Counter()
    for change in change_set:
        removed_pool.update(_normalize(line) for line in _code_lines(change.removed_lines))
        for capability in _capabilities_in(change.removed_lines, change.path):
            removed_names.add((capability.kind, capability.name))

    in_added: list[Capability] = []
    anywhere: list[Capability] = []
    for change in change_set:
        if categories[change.path] != FileCategory.SOURCE:
            continue
        if change.status == FileStatus.DELETED:
            continue
        for capability in _capabilities_in(change.added_lines, change.path):
            if (capability.kind, capability.name) in removed_names:
                continue
            if capability.kind == "function" and capability.name.startswith("_"):
                continue
            anywhere.append(capability)
            if change.status == FileStatus.ADDED:
                in_added.append(capability)

    return ChangeAnalysis(
        change_set=change_set,
        categories=categories,
        status_counts=Counter(change.status for change in change_set),
        category_counts=Counter(categories.values()),
        new_capabilities_in_added_files=tuple(in_added),
        new_capabilities=tuple(anywhere),
        removed_code_pool=removed_pool,
    )


# ============================================================================
# Description helpers
# ============================================================================


def _subject(path: str) -> str:
    """Short human name for the module a path represents."""
    pure = PurePosixPath(path)
    stem = pure.name.split(".")[0] if not pure.name.startswith(".") else pure.name[1:]
    if stem.lower() in _INDEX_STEMS and len(pure.parts) > 1:
        stem = pure.parts[-2]
    words = split_words(stem)
    return " ".join(words) if words else "project"


def _test_subject(path: str) -> str:
    name = PurePosixPath(path).name.split(".")[0]
    name = re.sub(r"^test_|_test$|Test$", "", name)
    words = split_words(name)
    return " ".join(words) if words else "project"


def _headline_capabilities(capabilities: tuple[Capability, ...]) -> list[Capability]:
    unique: list[Capability] = []
    seen: set[tuple[str, str]] = set()
    for capability in capabilities:
        key = (capability.kind, capability.name)
        if key not in seen:
            seen.add(key)
            unique.append(capability)
    return sorted(unique, key=lambda c: _CAPABILITY_PRIORITY.index(c.kind))


def _describe_capabilities(capabilities: tuple[Capability, ...]) -> str:
    ordered = _headline_capabilities(capabilities)
    first = ordered[0]
    if len(ordered) == 1:
        return f"add {first.label}"
    if len(ordered) == 2:
        second = ordered[1]
        if first.kind == second.kind:
            noun = CAPABILITY_NOUNS[first.kind]
            first_words = " ".join(split_words(first.name)) or "root"
            second_words = " ".join(split_words(second.name)) or "root"
            plural = f"{noun}es" if noun.endswith("s") else f"{noun}s"
            return f"add {first_words} and {second_words} {plural}"
        return f"add {first.label} and {second.label}"
    return f"add {first.label} and {len(ordered) - 1} more"


def finalize_description(description: str) -> str:
    """Enforce the description invariants.

    Single line, no periods, lowercase first letter, at most
    MAX_DESCRIPTION_LENGTH characters cut at a word boundary.
    """
    text = " ".join(description.replace(".", " ").split())
    if not text:
        return "update project files"
    text = text[0].lower() + text[1:]
    if len(text) > MAX_DESCRIPTION_LENGTH:
        cut = text[:MAX_DESCRIPTION_LENGTH]
        boundary = cut.rfind(" ")
        text = cut[:boundary] if boundary > 0 else cut
    return text.rstrip(" ,;:-")


# ============================================================================
# Rules
# ============================================================================


@dataclass(frozen=True)
class RuleMatch:
    """Outcome of a matching rule: its evidence and the description it implies."""

    evidence: tuple[str, ...]
    description: str


@dataclass(frozen=True)
class ClassificationRule:
    """A (commit type, matcher) pair in the priority list."""

    commit_type: CommitType
    matcher: Callable[[ChangeAnalysis], RuleMatch | None]


def _match_feat(analysis: ChangeAnalysis) -> RuleMatch | None:
    capabilities = analysis.new_capabilities_in_added_files
    if not capabilities:
        return None
    evidence = tuple(
        f"new {c.kind} '{c.name}' in added file {c.path}"
        for c in _headline_capabilities(capabilities)
    )
    return RuleMatch(evidence=evidence, description=_describe_capabilities(capabilities))


def _match_fix(analysis: ChangeAnalysis) -> RuleMatch | None:
    modified = [
        change
        for change in analysis.changes_in(FileCategory.SOURCE)
        if change.status == FileStatus.MODIFIED
    ]
    if not modified:
        return None

    changed = 0
    error_lines = 0
    conditional_lines = 0
    removed = 0
    per_file: Counter[str] = Counter()
    for change in modified:
        removed_code = _code_lines(change.removed_lines)
        lines = removed_code + _code_lines(change.added_lines)
        removed += len(removed_code)
        changed += len(lines)
        for line in lines:
            if _ERROR_HANDLING_RE.search(line):
                error_lines += 1
                per_file[change.path] += 1
            elif _CONDITIONAL_RE.search(line):
                conditional_lines += 1
                per_file[change.path] += 1

    guarded = error_lines + conditional_lines
    if changed == 0 or removed == 0 or guarded * 2 < changed:
        return None

    target = per_file.most_common(1)[0][0]
    subject = _subject(target)
    evidence = (
        f"{guarded} of {changed} changed lines touch error handling or conditionals",
        f"prior logic replaced in {len(modified)} modified source file(s)",
    )
    if error_lines >= conditional_lines:
        return RuleMatch(evidence=evidence, description=f"fix error handling in {subject}")
    return RuleMatch(evidence=evidence, description=f"fix conditional logic in {subject}")


def _is_comment_only(change: FileChange) -> bool:
    lines = change.added_lines + change.removed_lines
    return (
        change.status == FileStatus.MODIFIED
        and any(line.strip() for line in lines)
        and all(not line.strip() or _is_comment(line) for line in lines)
    )


def _match_docs(analysis: ChangeAnalysis) -> RuleMatch | None:
    docs = analysis.changes_in(FileCategory.DOCS)
    comment_only = [
        c
        for c in analysis.change_set
        if analysis.category(c) != FileCategory.DOCS and _is_comment_only(c)
    ]
    if len(docs) + len(comment_only) != len(analysis.change_set):
        return None

    evidence = tuple(f"documentation path {c.path}" for c in docs) + tuple(
        f"comment-only changes in {c.path}" for c in comment_only
    )
    if not docs:
        if len(comment_only) == 1:
            description = f"update comments in {_subject(comment_only[0].path)}"
        else:
            description = "update code comments"
    elif len(docs) == 1 and not comment_only:
        change = docs[0]
        subject = _subject(change.path)
        noun = "" if subject in ("readme", "changelog", "license") else " docs"
        verb = {
            FileStatus.ADDED: "add",
            FileStatus.DELETED: "remove",
        }.get(change.status, "update")
        description = f"{verb} {subject}{noun}"
    else:
        description = "update documentation"
    return RuleMatch(evidence=evidence, description=description)


def _is_whitespace_only(change: FileChange) -> bool:
    if change.status != FileStatus.MODIFIED:
        return False
    added = Counter(_normalize(line) for line in change.added_lines if line.strip())
    removed = Counter(_normalize(line) for line in change.removed_lines if line.strip())
    return added == removed and bool(change.added_lines or change.removed_lines)


def _is_class_attribute_only(change: FileChange) -> bool:
    if change.status != FileStatus.MODIFIED:
        return False
    lines = _code_lines(change.added_lines + change.removed_lines)
    return bool(lines) and all(_STYLE_ATTRIBUTE_RE.search(line) for line in lines)


def _match_style(analysis: ChangeAnalysis) -> RuleMatch | None:
    stylesheets: list[FileChange] = []
    formatted: list[FileChange] = []
    restyled: list[FileChange] = []
    for change in analysis.change_set:
        if analysis.category(change) == FileCategory.STYLE:
            stylesheets.append(change)
        elif _is_whitespace_only(change):
            formatted.append(change)
        elif _is_class_attribute_only(change):
            restyled.append(change)
        else:
            return None

    evidence = (
        tuple(f"stylesheet {c.path}" for c in stylesheets)
        + tuple(f"formatting-only changes in {c.path}" for c in formatted)
        + tuple(f"visual class changes in {c.path}" for c in restyled)
    )
    if formatted and not stylesheets and not restyled:
        if len(formatted) == 1:
            return RuleMatch(evidence, f"format {_subject(formatted[0].path)}")
        return RuleMatch(evidence, "format code")
    if len(analysis.change_set) == 1:
        return RuleMatch(evidence, f"update {_subject(analysis.change_set.paths[0])} styles")
    return RuleMatch(evidence, "update styles")


def _moved_ratio(change: FileChange, pool: Counter[str]) -> float:
    added = [_normalize(line) for line in _code_lines(change.added_lines)]
    if not added:
        return 0.0
    available = Counter(pool)
    moved = 0
    for line in added:
        if available[line] > 0:
            available[line] -= 1
            moved += 1
    return moved / len(added)


def _match_refactor(analysis: ChangeAnalysis) -> RuleMatch | None:
    sources = analysis.changes_in(FileCategory.SOURCE)
    if not sources:
        return None
    capability_paths = {c.path for c in analysis.new_capabilities}

    renamed: list[FileChange] = []
    deleted: list[FileChange] = []
    simplified: list[FileChange] = []
    extracted: list[FileChange] = []
    for change in sources:
        if change.status == FileStatus.RENAMED:
            renamed.append(change)
        elif change.status == FileStatus.DELETED:
            deleted.append(change)
        elif _moved_ratio(change, analysis.removed_code_pool) >= 0.6:
            extracted.append(change)
        elif (
            change.status == FileStatus.MODIFIED
            and change.path not in capability_paths
            and len(_code_lines(change.removed_lines)) > len(_code_lines(change.added_lines))
        ):
            simplified.append(change)
        else:
            return None

    evidence = (
        tuple(f"renamed {c.old_path} to {c.path}" for c in renamed)
        + tuple(f"removed {c.path}" for c in deleted)
        + tuple(f"moved existing code into {c.path}" for c in extracted)
        + tuple(f"net code removal in {c.path}" for c in simplified)
    )
    if len(renamed) == 1 and len(sources) == 1:
        old = renamed[0].old_path or renamed[0].path
        description = f"rename {_subject(old)} to {_subject(renamed[0].path)}"
    elif renamed and len(renamed) == len(sources):
        description = f"rename {len(renamed)} modules"
    elif deleted and len(deleted) == len(sources):
        if len(deleted) == 1:
            description = f"remove unused {_subject(deleted[0].path)}"
        else:
            description = "remove unused code"
    elif extracted:
        added = [c for c in extracted if c.status == FileStatus.ADDED]
        if added:
            description = f"extract {_subject(added[0].path)} module"
        else:
            description = f"restructure {_subject(extracted[0].path)}"
    elif len(simplified) == 1:
        description = f"simplify {_subject(simplified[0].path)}"
    else:
        description = "simplify code structure"
    return RuleMatch(evidence=evidence, description=description)


def _match_test(analysis: ChangeAnalysis) -> RuleMatch | None:
    if not analysis.all_in(FileCategory.TEST):
        return None
    changes = list(analysis.change_set)
    evidence = tuple(f"test path {c.path}" for c in changes)
    subjects = {_test_subject(c.path) for c in changes}
    statuses = {c.status for c in changes}
    if statuses == {FileStatus.DELETED}:
        return RuleMatch(evidence, "remove obsolete tests")
    verb = "add" if statuses == {FileStatus.ADDED} else "update"
    if len(subjects) == 1:
        return RuleMatch(evidence, f"{verb} tests for {subjects.pop()}")
    return RuleMatch(evidence, f"{verb} tests")


_DEPENDENCY_LINE_RES = (
    # package.json / composer.json: "name": "^1.2.3"
    re.compile(r'^\s*"(?P<name>@?[\w./-]+)"\s*:\s*"(?P<version>[\^~<>=*]*\s*v?\d[^"]*)"'),
    # requirements / pyproject arrays: name>=1.2 or "name>=1.2",
    re.compile(
        r'^\s*"?(?P<name>[A-Za-z0-9][\w.\-\[\]]*)\s*(?:==|>=|<=|~=|!=|>|<)\s*(?P<version>[\w.*]+)'
    ),
    # Cargo style: name = "1.2" or name = { version = "1.2" }
    re.compile(
        r'^\s*(?P<name>[\w-]+)\s*=\s*\{?\s*(?:version\s*=\s*)?"(?P<version>[\^~=<>]*\d[^"]*)"'
    ),
    # go.mod: module/path v1.2.3
    re.compile(r"^\s*(?P<name>[\w.-]+/[\w./-]+)\s+(?P<version>v\d\S*)"),
)
_NON_DEPENDENCY_KEYS = frozenset({"version", "name", "description", "license", "main", "type"})


def _dependency_names(lines: list[str]) -> set[str]:
    names: set[str] = set()
    for line in lines:
        for regex in _DEPENDENCY_LINE_RES:
            match = regex.match(line)
            if match is not None:
                names.add(match.group("name").split("[")[0])
                break
    return names


def _describe_dependencies(manifests: list[FileChange]) -> tuple[str, tuple[str, ...]] | None:
    added: set[str] = set()
    removed: set[str] = set()
    for change in manifests:
        added |= _dependency_names(change.added_lines)
        removed |= _dependency_names(change.removed_lines)

    bumped = sorted((added & removed) - _NON_DEPENDENCY_KEYS)
    introduced = sorted(added - removed - _NON_DEPENDENCY_KEYS)
    dropped = sorted(removed - added - _NON_DEPENDENCY_KEYS)
    evidence = (
        tuple(f"dependency '{name}' version changed" for name in bumped)
        + tuple(f"dependency '{name}' added" for name in introduced)
        + tuple(f"dependency '{name}' removed" for name in dropped)
    )
    if bumped and not introduced and not dropped:
        if len(bumped) == 1:
            return f"bump {bumped[0]} dependency", evidence
        if len(bumped) == 2:
            return f"bump {bumped[0]} and {bumped[1]} dependencies", evidence
        return "bump dependencies", evidence
    if introduced and not bumped and not dropped and len(introduced) == 1:
        return f"add {introduced[0]} dependency", evidence
    if dropped and not bumped and not introduced and len(dropped) == 1:
        return f"remove {dropped[0]} dependency", evidence
    if evidence:
        return "update dependencies", evidence
    if "version" in added & removed:
        return "bump package version", ("package version field changed",)
    return None


def _match_chore(analysis: ChangeAnalysis) -> RuleMatch | None:
    manifests = analysis.changes_in(FileCategory.DEPENDENCY_MANIFEST)
    if manifests and len(manifests) == len(analysis.change_set):
        if all(c.path.lower().endswith(_LOCKFILE_SUFFIXES) for c in manifests):
            return RuleMatch(tuple(f"lockfile {c.path}" for c in manifests), "update lockfile")
        described = _describe_dependencies(manifests)
        if described is not None:
            description, evidence = described
            return RuleMatch(evidence, description)

    evidence = tuple(f"{analysis.category(c).value} path {c.path}" for c in analysis.change_set)
    if analysis.all_in(FileCategory.CI):
        return RuleMatch(evidence, "update ci workflow")
    if analysis.all_in(FileCategory.CONFIG, FileCategory.DEPENDENCY_MANIFEST):
        if len(analysis.change_set) == 1:
            return RuleMatch(evidence, f"update {_subject(analysis.change_set.paths[0])} config")
        return RuleMatch(evidence, "update build configuration")
    if len(analysis.change_set) == 1:
        return RuleMatch(evidence, f"update {_subject(analysis.change_set.paths[0])}")
    return RuleMatch(evidence, "update project files")


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(CommitType.FEAT, _match_feat),
    ClassificationRule(CommitType.FIX, _match_fix),
    ClassificationRule(CommitType.DOCS, _match_docs),
    ClassificationRule(CommitType.STYLE, _match_style),
    ClassificationRule(CommitType.REFACTOR, _match_refactor),
    ClassificationRule(CommitType.TEST, _match_test),
    ClassificationRule(CommitType.CHORE, _match_chore),
)


# ============================================================================
# Scope
# ============================================================================


def normalize_scope(name: str) -> str | None:
    """Lowercase a module name into Conventional Commit scope form ``[a-z0-9-]+``."""
    words = split_words(name)
    scope = re.sub(r"[^a-z0-9-]", "", "-".join(words))
    scope = re.sub(r"-{2,}", "-", scope).strip("-")
    return scope or None


def _module_of(path: str) -> str | None:
    for part in PurePosixPath(path).parts[:-1]:
        if part.lower() in _GENERIC_DIRS or part.startswith("."):
            continue
        return normalize_scope(part)
    return None


def derive_scope(change_set: ChangeSet) -> str | None:
    """Most frequently touched module, if it covers a strict majority of files."""
    counts = Counter(_module_of(path) for path in change_set.paths)
    counts.pop(None, None)
    if not counts:
        return None
    module, count = counts.most_common(1)[0]
    if count * 2 <= len(change_set):
        return None
    return module


# ============================================================================
# Entry point
# ============================================================================


def classify(change_set: ChangeSet) -> ChangeSummary:
    """Classify a ChangeSet into a ChangeSummary.

    Raises:
        ValueError: If the ChangeSet is empty; callers short-circuit before
            classification when there is nothing to commit.
    """
    if change_set.is_empty:
        raise ValueError("Cannot classify an empty ChangeSet")

    analysis = analyze(change_set)
    logger.debug(
        "Analyzing %d file(s): statuses=%s categories=%s",
        len(change_set),
        {status.value: n for status, n in analysis.status_counts.items()},
        {category.value: n for category, n in analysis.category_counts.items()},
    )

    commit_type = CommitType.CHORE
    match: RuleMatch | None = None
    for rule in CLASSIFICATION_RULES:
        match = rule.matcher(analysis)
        if match is not None:
            commit_type = rule.commit_type
            break
    # The chore matcher always matches
    assert match is not None

    if commit_type == CommitType.CHORE and analysis.new_capabilities:
        logger.debug("Promoting chore to feat: change set adds new capabilities")
        commit_type = CommitType.FEAT
        headline = _headline_capabilities(analysis.new_capabilities)
        match = RuleMatch(
            evidence=tuple(f"new {c.kind} '{c.name}' in {c.path}" for c in headline)
            + tuple(f"promoted from chore: {line}" for line in match.evidence),
            description=_describe_capabilities(analysis.new_capabilities),
        )

    scope = derive_scope(change_set)
    description = finalize_description(match.description)
    logger.debug("Classified as %s(scope=%s): %s", commit_type.value, scope, description)
    return ChangeSummary(
        commit_type=commit_type,
        scope=scope,
        description=description,
        rationale=match.evidence,
    )
