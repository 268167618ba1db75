from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

import copyprompt


class RecordingClipboard:
    def __init__(self, fail: Optional[Exception] = None):
        self.writes: List[str] = []
        self.fail = fail

    def write_text(self, text: str) -> None:
        if self.fail is not None:
            raise self.fail
        self.writes.append(text)


class RecordingNotifier:
    def __init__(self):
        self.messages: List[tuple] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))


class ScriptedPrompt:
    """Returns queued answers and records the defaults it was offered."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.offered: List[frozenset] = []

    def ask(self, defaults):
        self.offered.append(defaults)
        return self.answers.pop(0)


def write_files(root: Path, files: Dict[str, str]) -> Path:
    """Create ``files`` (relative path -> text) under ``root``."""
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


def make_symlink(link: Path, target: Path) -> None:
    try:
        link.symlink_to(target, target_is_directory=target.is_dir())
    except (OSError, NotImplementedError) as e:
        pytest.skip(f"symlinks unavailable: {e}")


def registry_with(entries: Iterable[tuple]) -> copyprompt.DiagnosticsRegistry:
    registry = copyprompt.DiagnosticsRegistry()
    for path, diagnostic in entries:
        registry.add(path, diagnostic)
    return registry
