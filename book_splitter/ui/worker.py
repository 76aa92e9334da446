"""Qt thread that runs a split and relays its progress as signals."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QThread, Signal

from ..events import ChaptersSplit, Done, Failed, LinesParsed, NewTitle, ProgressEvent, Started
from ..runner import split_chapters
from ..sink import CallbackSink


class SplitWorker(QThread):
    started_split = Signal()
    lines_parsed = Signal(int)
    new_title = Signal(str)
    chapters_split = Signal(int)
    done = Signal(Path)
    error = Signal(str)

    def __init__(
        self,
        *,
        pattern: str,
        book_path: Path,
        result_folder: Path,
        start_chapter: int = 1,
    ) -> None:
        super().__init__()
        self.pattern = pattern
        self.book_path = Path(book_path)
        self.result_folder = Path(result_folder)
        self.start_chapter = start_chapter

    def run(self) -> None:
        split_chapters(
            self.pattern,
            self.book_path,
            self.result_folder,
            self.start_chapter,
            CallbackSink(self._relay),
        )

    def _relay(self, event: ProgressEvent) -> None:
        if isinstance(event, Started):
            self.started_split.emit()
        elif isinstance(event, LinesParsed):
            self.lines_parsed.emit(event.count)
        elif isinstance(event, NewTitle):
            self.new_title.emit(event.title)
        elif isinstance(event, ChaptersSplit):
            self.chapters_split.emit(event.next_index)
        elif isinstance(event, Done):
            self.done.emit(self.result_folder)
        elif isinstance(event, Failed):
            self.error.emit(event.message)


__all__ = ["SplitWorker"]
