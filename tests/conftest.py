from pathlib import Path

import pytest

from helpers import RecordingClipboard, RecordingNotifier, write_files


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """proj/ with a.txt, an excluded node_modules/ and an empty sub/."""
    proj = write_files(tmp_path / "proj", {
        "a.txt": "hello",
        "node_modules/pkg/index.js": "module.exports = 1;",
    })
    (proj / "sub").mkdir()
    return proj


@pytest.fixture
def clipboard() -> RecordingClipboard:
    return RecordingClipboard()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
