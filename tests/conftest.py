from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, List

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class RecordingSink:
    """Sink that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: List[object] = []

    def send(self, event) -> None:
        self.events.append(event)

    def of_type(self, kind) -> List[object]:
        return [event for event in self.events if isinstance(event, kind)]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def write_book(tmp_path):
    def _write(lines: Iterable[str], name: str = "book.txt") -> Path:
        path = tmp_path / name
        path.write_bytes("".join(f"{line}\n" for line in lines).encode("utf-8"))
        return path

    return _write


def chapter_files(folder: Path) -> List[Path]:
    return sorted(folder.glob("*.txt"), key=lambda path: int(path.stem))
