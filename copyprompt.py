#!/usr/bin/env python3
"""
copyprompt - Copy files and folders as an LLM prompt

Snapshots a selection of files and directories (tree, contents, diagnostics)
into a single Markdown document and puts it on the clipboard.

Architecture:
    CLI Args → Configuration → Section Prompt → File Collection →
    Tree / Files / Diagnostics Rendering → Assembly → Clipboard
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import stat
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum, auto
from functools import partial
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Protocol,
    Sequence,
    Set,
    TextIO,
    Tuple,
    Union,
)

import pyperclip

# =============================================================================
# VERSION MANAGEMENT
# =============================================================================

__version__ = "1.0.0"


def get_version() -> str:
    """Get version from package metadata or fallback to hardcoded."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("copyprompt")
    except PackageNotFoundError:
        return __version__


# =============================================================================
# CONSTANTS
# =============================================================================

# Exact basenames, never patterns
DEFAULT_EXCLUDED: FrozenSet[str] = frozenset({
    ".git",
    ".vscode",
    "node_modules",
    "dist",
    "build",
    "out",
    ".DS_Store",
})

MAX_BYTES = 700_000
TRUNCATION_MARKER = "<<TRUNCATED DUE TO SIZE>>"
UNREADABLE_TEMPLATE = "<<Unable to read file: {reason}>>"
NO_DIAGNOSTICS = "_No diagnostics for the selected items._"

DOCUMENT_TITLE = "# Copy for LLM"
PROMPT_TITLE = "Copy As Prompt — choose sections to include"

# Tree display glyphs
GLYPH_CHILD = "├─ "
GLYPH_LAST = "└─ "
GLYPH_PIPE = "│  "
GLYPH_SPACE = "   "


# =============================================================================
# ERRORS
# =============================================================================

class CopyPromptError(Exception):
    """Base class for errors raised by copyprompt itself."""


class DiagnosticsLoadError(CopyPromptError):
    """A diagnostics snapshot could not be read or parsed."""


# =============================================================================
# ENUMS AND DATA MODELS
# =============================================================================

class Section(Enum):
    """Optional sections of the output document, in output order."""
    TREE = "Tree"
    FILES = "Files"
    DIAGNOSTICS = "Diagnostics"


ALL_SECTIONS: FrozenSet[Section] = frozenset(Section)


class Severity(Enum):
    """Diagnostic severities, numbered like the editor protocol they come from."""
    ERROR = 0
    WARNING = 1
    INFORMATION = 2
    HINT = 3


SEVERITY_LABELS: Dict[Severity, str] = {
    Severity.ERROR: "Error",
    Severity.WARNING: "Warning",
    Severity.INFORMATION: "Info",
    Severity.HINT: "Hint",
}

_SEVERITY_NAMES: Dict[str, Severity] = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
    "warn": Severity.WARNING,
    "information": Severity.INFORMATION,
    "info": Severity.INFORMATION,
    "hint": Severity.HINT,
}


class OutputMode(Enum):
    """Output destination modes."""
    CLIPBOARD = auto()
    STDOUT = auto()


@dataclass(frozen=True)
class Diagnostic:
    """An issue reported against a file. Positions are 0-based."""
    severity: Optional[Severity]
    line: int
    column: int
    message: str
    code: Optional[Union[str, int]] = None


@dataclass
class SectionMemory:
    """Remembers the last section choice for the lifetime of the process."""
    last: Optional[FrozenSet[Section]] = None

    def defaults(self) -> FrozenSet[Section]:
        return ALL_SECTIONS if self.last is None else self.last

    def remember(self, choice: Iterable[Section]) -> None:
        self.last = frozenset(choice)


@dataclass(frozen=True)
class CopyConfig:
    """Immutable run configuration."""
    targets: Tuple[Path, ...]
    workspace: Optional[Path]
    excluded: FrozenSet[str]
    sections: Optional[FrozenSet[Section]]
    output_mode: OutputMode
    diagnostics_file: Optional[Path]
    max_workers: Optional[int]
    max_bytes: int


# =============================================================================
# COLLABORATOR INTERFACES
# =============================================================================

class DiagnosticsSource(Protocol):
    """Read-only, point-in-time view of known diagnostics."""

    def get_diagnostics(self) -> Iterable[Tuple[Path, Sequence[Diagnostic]]]:
        ...


class ClipboardSink(Protocol):
    def write_text(self, text: str) -> None:
        ...


class Notifier(Protocol):
    def info(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class SectionPrompt(Protocol):
    def ask(self, defaults: FrozenSet[Section]) -> Optional[FrozenSet[Section]]:
        """Return the chosen sections, or None when the prompt is dismissed."""
        ...


# =============================================================================
# EXCLUSION POLICY
# =============================================================================

def is_excluded(name: str, excluded: FrozenSet[str] = DEFAULT_EXCLUDED) -> bool:
    """Check a basename against the exclusion set."""
    return name in excluded


# =============================================================================
# FILE COLLECTION
# =============================================================================

def _stat(path: Path) -> Optional[os.stat_result]:
    try:
        return path.stat()
    except OSError as e:
        logging.debug(f"Cannot stat {path}: {e}")
        return None


def walk_dir(directory: Path, excluded: FrozenSet[str] = DEFAULT_EXCLUDED) -> List[Path]:
    """
    List every regular file below ``directory``.

    A directory whose real path is one of its own ancestors on the walk is
    a symlink cycle and is not entered; symlinked aliases of other
    directories are walked under their own path. Unreadable directories and
    entries that fail to stat are skipped.
    """
    files: List[Path] = []
    # (directory, real paths of its ancestors)
    stack: List[Tuple[Path, FrozenSet[str]]] = [(directory, frozenset())]

    while stack:
        current, ancestors = stack.pop()
        real = os.path.realpath(current)
        if real in ancestors:
            logging.debug(f"Symlink cycle at {current}, skipping")
            continue
        ancestors = ancestors | {real}

        try:
            entries = list(current.iterdir())
        except OSError as e:
            logging.debug(f"Skipping unreadable directory {current}: {e}")
            continue

        for entry in entries:
            if is_excluded(entry.name, excluded):
                continue
            st = _stat(entry)
            if st is None:
                continue
            if stat.S_ISDIR(st.st_mode):
                stack.append((entry, ancestors))
            elif stat.S_ISREG(st.st_mode):
                files.append(entry)

    return files


def collect_files(
    selection: Iterable[Union[str, Path]],
    excluded: FrozenSet[str] = DEFAULT_EXCLUDED,
) -> Tuple[List[Path], List[Path]]:
    """
    Resolve a selection into ``(files, roots)``.

    ``files`` is deduplicated and sorted by absolute path string; ``roots``
    is the selection made absolute, in the order given.
    """
    roots = [Path(os.path.abspath(p)) for p in selection]
    found: Set[Path] = set()

    for root in roots:
        st = _stat(root)
        if st is None:
            continue
        if stat.S_ISREG(st.st_mode):
            found.add(root)
        elif stat.S_ISDIR(st.st_mode):
            found.update(walk_dir(root, excluded))

    return sorted(found, key=str), roots


# =============================================================================
# TREE RENDERER
# =============================================================================

def _tree_sort_key(name: str) -> Tuple[str, str]:
    # Case-insensitive first, code point order breaks ties ("Readme" < "readme")
    return name.casefold(), name


def _list_children(
    directory: Path, excluded: FrozenSet[str]
) -> List[Tuple[str, Path, bool]]:
    """Sorted (name, path, is_dir) for renderable children of a directory."""
    try:
        names = os.listdir(directory)
    except OSError as e:
        logging.debug(f"Cannot list {directory}: {e}")
        return []

    children = []
    for name in sorted(names, key=_tree_sort_key):
        if is_excluded(name, excluded):
            continue
        path = directory / name
        st = _stat(path)
        if st is None:
            continue
        children.append((name, path, stat.S_ISDIR(st.st_mode)))
    return children


def render_ascii_tree(
    root: Path, excluded: FrozenSet[str] = DEFAULT_EXCLUDED
) -> List[str]:
    """Render the entries below ``root`` as tree lines, without the heading."""
    lines: List[str] = []
    # (name, path, is_dir, prefix, is_last, ancestor real paths), popped in display order
    stack: List[Tuple[str, Path, bool, str, bool, FrozenSet[str]]] = []

    def push_children(directory: Path, prefix: str, ancestors: FrozenSet[str]) -> None:
        children = _list_children(directory, excluded)
        for idx in range(len(children) - 1, -1, -1):
            name, path, is_dir = children[idx]
            is_last = idx == len(children) - 1
            stack.append((name, path, is_dir, prefix, is_last, ancestors))

    push_children(root, "", frozenset({os.path.realpath(root)}))
    while stack:
        name, path, is_dir, prefix, is_last, ancestors = stack.pop()
        branch = GLYPH_LAST if is_last else GLYPH_CHILD
        lines.append(f"{prefix}{branch}{name}{'/' if is_dir else ''}")
        if not is_dir:
            continue
        real = os.path.realpath(path)
        # Listed but not expanded when it links back to an ancestor
        if real in ancestors:
            continue
        push_children(
            path,
            prefix + (GLYPH_SPACE if is_last else GLYPH_PIPE),
            ancestors | {real},
        )

    return lines


def render_tree_section(
    roots: Sequence[Path], excluded: FrozenSet[str] = DEFAULT_EXCLUDED
) -> str:
    lines = ["## Tree", "```text"]
    for root in roots:
        lines.append(root.name or str(root))
        lines.extend(render_ascii_tree(root, excluded))
    lines.extend(["```", ""])
    return "\n".join(lines)


# =============================================================================
# FILE CONTENT FORMATTER
# =============================================================================

def relative_label(path: Path, workspace: Optional[Path]) -> str:
    """Display path for a file: workspace-relative, absolute outside it, bare name without one."""
    if workspace is None:
        return path.name
    try:
        return path.relative_to(workspace).as_posix()
    except ValueError:
        return str(path)


def read_file_text(path: Path) -> str:
    """Read a file as strict UTF-8, or return an inline placeholder."""
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logging.warning(f"Could not read {path}: {e}")
        return UNREADABLE_TEMPLATE.format(reason=e)


def truncate_content(content: str, max_bytes: int = MAX_BYTES) -> str:
    """
    Keep the head and tail of content whose UTF-8 size exceeds ``max_bytes``.

    The byte size decides whether to truncate; the slices themselves count
    characters, so each side holds ``max_bytes // 2`` characters and no
    multi-byte sequence is ever split.
    """
    if len(content.encode("utf-8")) <= max_bytes:
        return content
    half = max_bytes // 2
    return (
        content[:half]
        + f"\n\n{TRUNCATION_MARKER}\n\n"
        + content[max(len(content) - half, 0):]
    )


def language_tag(path: Path) -> str:
    return path.suffix[1:] or "text"


def format_file(
    path: Path,
    workspace: Optional[Path] = None,
    max_bytes: int = MAX_BYTES,
) -> str:
    """Format one file as a labelled, fenced code block."""
    content = truncate_content(read_file_text(path), max_bytes)
    label = relative_label(path, workspace)
    return f"{label}:\n```{language_tag(path)}\n{content}\n```\n"


def render_files_section(
    files: Sequence[Path],
    workspace: Optional[Path] = None,
    max_workers: Optional[int] = None,
    max_bytes: int = MAX_BYTES,
) -> str:
    """Read files in parallel; blocks keep the order of ``files``."""
    parts = ["## Files"]
    if files:
        workers = max_workers or min(32, len(files))
        fmt = partial(format_file, workspace=workspace, max_bytes=max_bytes)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            parts.extend(executor.map(fmt, files))
    return "\n".join(parts)


# =============================================================================
# DIAGNOSTICS
# =============================================================================

def parse_severity(value: Any) -> Optional[Severity]:
    """Map a raw severity (number or name) to a Severity; None if unrecognised."""
    if isinstance(value, Severity):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            return Severity(value)
        except ValueError:
            return None
    if isinstance(value, str):
        return _SEVERITY_NAMES.get(value.strip().lower())
    return None


def severity_label(severity: Any) -> str:
    if isinstance(severity, Severity):
        return SEVERITY_LABELS[severity]
    return "Unknown"


def format_diagnostic(diagnostic: Diagnostic) -> str:
    pos = f"{diagnostic.line + 1}:{diagnostic.column + 1}"
    code = f" [{diagnostic.code}]" if diagnostic.code not in (None, "") else ""
    return f"- ({severity_label(diagnostic.severity)}) {pos}{code} — {diagnostic.message}"


class EmptyDiagnosticsSource:
    """Source used when no diagnostics are available."""

    def get_diagnostics(self) -> List[Tuple[Path, List[Diagnostic]]]:
        return []


class DiagnosticsRegistry:
    """In-memory diagnostics store, filled by whoever runs the analysis."""

    def __init__(self) -> None:
        self._entries: Dict[Path, List[Diagnostic]] = {}

    def set(self, path: Union[str, Path], diagnostics: Iterable[Diagnostic]) -> None:
        self._entries[Path(path)] = list(diagnostics)

    def add(self, path: Union[str, Path], diagnostic: Diagnostic) -> None:
        self._entries.setdefault(Path(path), []).append(diagnostic)

    def clear(self) -> None:
        self._entries.clear()

    def get_diagnostics(self) -> List[Tuple[Path, List[Diagnostic]]]:
        return [(path, list(diags)) for path, diags in self._entries.items()]


class JsonDiagnosticsSource:
    """
    Diagnostics snapshot stored as JSON.

    Either an object mapping path to a list of diagnostics, or a list of
    ``{"path": ..., "diagnostics": [...]}`` entries. Each diagnostic has a
    ``message`` and optional ``severity``, ``line``, ``column`` (0-based) and
    ``code``. Relative paths are taken relative to the JSON file.
    """

    def __init__(self, json_path: Union[str, Path]):
        self.json_path = Path(json_path)

    def get_diagnostics(self) -> List[Tuple[Path, List[Diagnostic]]]:
        try:
            data = json.loads(self.json_path.read_text(encoding="utf-8"))
        except OSError as e:
            raise DiagnosticsLoadError(
                f"Could not read diagnostics file '{self.json_path}': {e}"
            ) from e
        except ValueError as e:
            raise DiagnosticsLoadError(
                f"Invalid JSON in diagnostics file '{self.json_path}': {e}"
            ) from e

        base = Path(os.path.abspath(self.json_path)).parent
        entries = []
        for raw_path, raw_diags in self._iter_entries(data):
            if not isinstance(raw_diags, list):
                raise DiagnosticsLoadError(
                    f"Diagnostics for '{raw_path}' must be a list"
                )
            path = Path(raw_path)
            if not path.is_absolute():
                path = base / path
            entries.append((path, [self._parse_diagnostic(d) for d in raw_diags]))
        return entries

    def _iter_entries(self, data: Any) -> Iterable[Tuple[str, Any]]:
        if isinstance(data, dict):
            return list(data.items())
        if isinstance(data, list):
            entries = []
            for item in data:
                if not isinstance(item, dict) or "path" not in item:
                    raise DiagnosticsLoadError(
                        "Each diagnostics entry needs a 'path' key"
                    )
                entries.append((str(item["path"]), item.get("diagnostics", [])))
            return entries
        raise DiagnosticsLoadError(
            f"Diagnostics file '{self.json_path}' must hold an object or a list"
        )

    @staticmethod
    def _parse_diagnostic(raw: Any) -> Diagnostic:
        if not isinstance(raw, dict) or "message" not in raw:
            raise DiagnosticsLoadError(f"Diagnostic without a message: {raw!r}")
        code = raw.get("code")
        if isinstance(code, dict):
            code = code.get("value")
        try:
            line = int(raw.get("line", 0))
            column = int(raw.get("column", 0))
        except (TypeError, ValueError) as e:
            raise DiagnosticsLoadError(f"Bad diagnostic position in {raw!r}") from e
        return Diagnostic(
            severity=parse_severity(raw.get("severity", Severity.ERROR.value)),
            line=line,
            column=column,
            message=str(raw["message"]),
            code=code,
        )


def _container_prefix(root: Path) -> str:
    normalized = os.path.normpath(os.path.abspath(root))
    return normalized.rstrip(os.sep) + os.sep


def collect_diagnostics(
    files: Sequence[Path],
    roots: Sequence[Path],
    source: DiagnosticsSource,
) -> Dict[Path, List[Diagnostic]]:
    """
    Diagnostics belonging to the selection, grouped by file and ordered by path.

    A path belongs when it is one of ``files`` or lies strictly inside one of
    ``roots``. Within a file, registry order is kept.
    """
    file_set = {os.path.normpath(str(f)) for f in files}
    prefixes = [_container_prefix(r) for r in roots]
    by_file: Dict[str, List[Diagnostic]] = {}

    for path, diagnostics in source.get_diagnostics():
        p = os.path.normpath(os.path.abspath(path))
        if p in file_set or any(p.startswith(prefix) for prefix in prefixes):
            by_file.setdefault(p, []).extend(d for d in diagnostics if d is not None)

    return {Path(p): diags for p, diags in sorted(by_file.items()) if diags}


def render_diagnostics_section(
    files: Sequence[Path],
    roots: Sequence[Path],
    source: DiagnosticsSource,
    workspace: Optional[Path] = None,
) -> str:
    """
    Render the Diagnostics section.

    File groups are ordered by path, not by registry order; each group keeps
    its diagnostics in registry order.
    """
    by_file = collect_diagnostics(files, roots, source)
    lines = ["## Diagnostics"]

    if not by_file:
        lines.extend([NO_DIAGNOSTICS, ""])
        return "\n".join(lines)

    for path, diagnostics in by_file.items():
        lines.append(f"### {relative_label(path, workspace)}")
        lines.extend(format_diagnostic(d) for d in diagnostics)
        lines.append("")
    return "\n".join(lines)


# =============================================================================
# OUTPUT ASSEMBLER
# =============================================================================

def root_label(root: Path, workspace: Optional[Path]) -> str:
    if workspace is None:
        return str(root)
    try:
        rel = os.path.relpath(root, workspace)
    except ValueError:
        # Different drive on Windows
        return str(root)
    return root.name if rel == os.curdir else Path(rel).as_posix()


def build_header(roots: Sequence[Path], workspace: Optional[Path] = None) -> str:
    lines = [DOCUMENT_TITLE]
    if workspace is not None:
        lines.append(f"Workspace: `{workspace.name}`")
    labels = [f"`{root_label(r, workspace)}`" for r in roots]
    if len(labels) == 1:
        lines.append(f"Root: {labels[0]}")
    else:
        lines.append(f"Roots: {', '.join(labels)}")
    return "\n".join(lines)


def build_output(
    files: Sequence[Path],
    roots: Sequence[Path],
    sections: Iterable[Section],
    workspace: Optional[Path] = None,
    source: Optional[DiagnosticsSource] = None,
    excluded: FrozenSet[str] = DEFAULT_EXCLUDED,
    max_workers: Optional[int] = None,
    max_bytes: int = MAX_BYTES,
) -> str:
    """Assemble the document: header, then Tree, Files and Diagnostics as chosen."""
    chosen = frozenset(sections)
    parts: List[str] = []

    if Section.TREE in chosen:
        parts.append(render_tree_section(roots, excluded))
    if Section.FILES in chosen:
        parts.append(render_files_section(files, workspace, max_workers, max_bytes))
    if Section.DIAGNOSTICS in chosen:
        parts.append(render_diagnostics_section(
            files, roots, source or EmptyDiagnosticsSource(), workspace
        ))

    return "\n".join([build_header(roots, workspace), "", *parts])


# =============================================================================
# HOST ADAPTERS
# =============================================================================

class PyperclipClipboard:
    """Clipboard sink backed by pyperclip."""

    def write_text(self, text: str) -> None:
        pyperclip.copy(text)


class StdoutSink:
    """Writes the document to stdout, for hosts without a clipboard."""

    def write_text(self, text: str) -> None:
        print(text)


class ConsoleNotifier:
    """Prints notifications to stderr."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def _print(self, message: str) -> None:
        print(message, file=self.stream or sys.stderr)

    def info(self, message: str) -> None:
        self._print(f"✅ {message}")

    def warning(self, message: str) -> None:
        self._print(f"⚠️ {message}")

    def error(self, message: str) -> None:
        self._print(f"❌ {message}")


class InteractiveSectionPrompt:
    """Asks one yes/no question per section on the terminal."""

    def __init__(
        self,
        input_func: Callable[[], str] = input,
        stream: Optional[TextIO] = None,
    ):
        self.input_func = input_func
        self.stream = stream

    def ask(self, defaults: FrozenSet[Section]) -> Optional[FrozenSet[Section]]:
        out = self.stream or sys.stderr
        print(f"\n{PROMPT_TITLE} (Enter keeps the default, q cancels)", file=out)
        chosen: Set[Section] = set()
        try:
            for section in Section:
                default = section in defaults
                print(f"  {section.value} [{'Y/n' if default else 'y/N'}]: ",
                      end="", file=out, flush=True)
                answer = self.input_func().strip().lower()
                if answer == "q":
                    return None
                if answer in ("y", "yes"):
                    include = True
                elif answer in ("n", "no"):
                    include = False
                else:
                    include = default
                if include:
                    chosen.add(section)
        except (EOFError, KeyboardInterrupt):
            print(file=out)
            return None
        return frozenset(chosen)


class PresetSectionPrompt:
    """Answers the prompt without asking: a fixed choice, or the defaults."""

    def __init__(self, sections: Optional[Iterable[Section]] = None):
        self.sections = None if sections is None else frozenset(sections)

    def ask(self, defaults: FrozenSet[Section]) -> Optional[FrozenSet[Section]]:
        return defaults if self.sections is None else self.sections


# =============================================================================
# COMMAND
# =============================================================================

class CopyCommand:
    """
    One "copy as prompt" action.

    Owns the remembered section choice, so running the same command again
    offers the previous choice as the default.
    """

    def __init__(
        self,
        clipboard: ClipboardSink,
        notifier: Notifier,
        prompt: SectionPrompt,
        source: Optional[DiagnosticsSource] = None,
        memory: Optional[SectionMemory] = None,
        workspace: Optional[Path] = None,
        excluded: FrozenSet[str] = DEFAULT_EXCLUDED,
        max_workers: Optional[int] = None,
        max_bytes: int = MAX_BYTES,
    ):
        self.clipboard = clipboard
        self.notifier = notifier
        self.prompt = prompt
        self.source = source or EmptyDiagnosticsSource()
        self.memory = memory if memory is not None else SectionMemory()
        self.workspace = workspace
        self.excluded = excluded
        self.max_workers = max_workers
        self.max_bytes = max_bytes

    @staticmethod
    def normalize_targets(
        target: Optional[Union[str, Path]] = None,
        targets: Optional[Sequence[Union[str, Path]]] = None,
    ) -> List[Path]:
        """A multi-selection wins over the single target."""
        if targets:
            return [Path(t) for t in targets]
        if target:
            return [Path(target)]
        return []

    def run(
        self,
        target: Optional[Union[str, Path]] = None,
        targets: Optional[Sequence[Union[str, Path]]] = None,
    ) -> bool:
        """Run the command; True when the clipboard was written."""
        try:
            selection = self.normalize_targets(target, targets)
            if not selection:
                self.notifier.warning("Nothing selected.")
                return False

            sections = self.prompt.ask(self.memory.defaults())
            if sections is None:
                logging.debug("Section prompt dismissed")
                return False
            self.memory.remember(sections)

            files, roots = collect_files(selection, self.excluded)
            if not files:
                self.notifier.warning("No files found in selection.")
                return False
            logging.debug(f"Collected {len(files)} files from {len(roots)} roots")

            output = build_output(
                files,
                roots,
                sections,
                workspace=self.workspace,
                source=self.source,
                excluded=self.excluded,
                max_workers=self.max_workers,
                max_bytes=self.max_bytes,
            )
            self.clipboard.write_text(output)
            self.notifier.info("Copied to clipboard in AI-prompt format.")
            return True
        except Exception as e:
            logging.debug("Copy failed", exc_info=True)
            self.notifier.error(f"Error: {e}" if str(e) else "Unknown error occurred.")
            return False


# =============================================================================
# CONFIGURATION BUILDER
# =============================================================================

def parse_sections(value: str) -> FrozenSet[Section]:
    """Parse a comma-separated section list such as ``tree,files``."""
    value = value.strip().lower()
    if value in ("", "none"):
        return frozenset()
    by_name = {s.value.lower(): s for s in Section}
    chosen = set()
    for part in value.split(","):
        name = part.strip()
        if name not in by_name:
            raise argparse.ArgumentTypeError(
                f"unknown section '{name}' (choose from tree, files, diagnostics)"
            )
        chosen.add(by_name[name])
    return frozenset(chosen)


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


class ConfigBuilder:
    """Builds CopyConfig from CLI arguments."""

    @staticmethod
    def from_args(args: argparse.Namespace) -> CopyConfig:
        if args.no_workspace:
            workspace = None
        else:
            workspace = Path(os.path.abspath(args.workspace or os.curdir))

        excluded = DEFAULT_EXCLUDED | frozenset(args.exclude or [])

        return CopyConfig(
            targets=tuple(args.paths),
            workspace=workspace,
            excluded=excluded,
            sections=args.sections,
            output_mode=OutputMode.STDOUT if args.stdout else OutputMode.CLIPBOARD,
            diagnostics_file=args.diagnostics,
            max_workers=args.max_workers,
            max_bytes=args.max_bytes,
        )


def build_command(
    config: CopyConfig,
    prompt: Optional[SectionPrompt] = None,
    memory: Optional[SectionMemory] = None,
) -> CopyCommand:
    """Wire a CopyCommand to the terminal host."""
    if prompt is None:
        if config.sections is not None:
            prompt = PresetSectionPrompt(config.sections)
        elif sys.stdin.isatty():
            prompt = InteractiveSectionPrompt()
        else:
            prompt = PresetSectionPrompt()

    if config.output_mode == OutputMode.STDOUT:
        clipboard: ClipboardSink = StdoutSink()
    else:
        clipboard = PyperclipClipboard()

    if config.diagnostics_file is not None:
        source: DiagnosticsSource = JsonDiagnosticsSource(config.diagnostics_file)
    else:
        source = EmptyDiagnosticsSource()

    return CopyCommand(
        clipboard=clipboard,
        notifier=ConsoleNotifier(),
        prompt=prompt,
        source=source,
        memory=memory,
        workspace=config.workspace,
        excluded=config.excluded,
        max_workers=config.max_workers,
        max_bytes=config.max_bytes,
    )


# =============================================================================
# CLI PARSER
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="copyprompt",
        description="Copy files and folders to the clipboard as an LLM prompt",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  copyprompt src                       # Ask for sections, copy src/
  copyprompt a.py b.py --sections files
  copyprompt . --diagnostics lint.json # Include diagnostics from a snapshot
  copyprompt src --stdout | less       # Print instead of copying
        """,
    )

    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Files and directories to copy",
    )

    out = parser.add_argument_group("Output Options")
    out.add_argument(
        "--sections",
        type=parse_sections,
        metavar="LIST",
        help="Comma-separated sections (tree,files,diagnostics or none); skips the prompt",
    )
    out.add_argument("--stdout", action="store_true", help="Print to stdout instead of the clipboard")
    out.add_argument("--workspace", type=Path, metavar="DIR", help="Workspace directory for relative labels (default: current)")
    out.add_argument("--no-workspace", action="store_true", help="Omit the workspace line and relative labels")
    out.add_argument(
        "--max-bytes",
        type=positive_int,
        default=MAX_BYTES,
        metavar="N",
        help=f"Truncate files larger than N bytes (default: {MAX_BYTES})",
    )
    out.add_argument("--max-workers", type=positive_int, metavar="N", help="Threads used to read files")

    filt = parser.add_argument_group("Filtering")
    filt.add_argument("--exclude", action="append", metavar="NAME", help="Extra file or directory name to skip")

    diag = parser.add_argument_group("Diagnostics")
    diag.add_argument("--diagnostics", type=Path, metavar="FILE", help="JSON diagnostics snapshot")

    meta = parser.add_argument_group("Information")
    meta.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    meta.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")

    return parser


# =============================================================================
# MAIN
# =============================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    parser = create_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = ConfigBuilder.from_args(args)
    command = build_command(config)

    try:
        ok = command.run(targets=list(config.targets))
    except KeyboardInterrupt:
        print("\n⚠️ Interrupted", file=sys.stderr)
        return 130
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
