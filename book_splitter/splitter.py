"""Streaming chapter splitter.

The engine walks a text file one line at a time, so books of any size can be
split without holding more than the current chapter in memory. Every line that
matches the boundary pattern starts a new chapter; the chapter being collected
so far is written out as ``NNNN.txt`` in the output folder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, List, Union
import logging
import re
import time

from .errors import DecodeError, OpenError, PatternError, WriteError
from .events import ChaptersSplit, LinesParsed, NewTitle, Started
from .sink import ProgressSink

__all__ = [
    "BoundaryPattern",
    "SplitEngine",
    "SplitRequest",
    "SplitResult",
    "chapter_filename",
]

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_PROGRESS_EVERY = 1000


def chapter_filename(index: int) -> str:
    return f"{index:04d}.txt"


@dataclass
class SplitRequest:
    """Inputs for a single split run."""

    pattern: str
    source_path: Path
    output_dir: Path
    start_chapter: int = 1

    def __post_init__(self) -> None:
        self.source_path = Path(self.source_path)
        self.output_dir = Path(self.output_dir)
        if self.start_chapter < 0:
            raise ValueError("start_chapter must not be negative")


@dataclass
class SplitResult:
    """Outcome returned after a successful run."""

    output_dir: Path
    chapter_files: List[Path] = field(default_factory=list)
    lines_processed: int = 0
    next_chapter: int = 0
    elapsed_seconds: float = 0.0


class BoundaryPattern:
    """A compiled, read-only line matcher."""

    __slots__ = ("_regex",)

    def __init__(self, pattern: str) -> None:
        try:
            self._regex = re.compile(pattern)
        except (re.error, OverflowError, RecursionError) as exc:
            raise PatternError(f"Invalid header pattern {pattern!r}: {exc}") from exc

    def __repr__(self) -> str:
        return f"BoundaryPattern({self.pattern!r})"

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    def matches(self, line: str) -> bool:
        return self._regex.search(line) is not None


class SplitEngine:
    """Split one source file into numbered chapter files.

    Two counters are kept. ``chapter_index`` counts boundaries and is what
    :class:`ChaptersSplit` reports. ``file_index`` names the files and only
    moves when a chapter is actually written, so the output never has a gap:
    a boundary on the very first line has nothing to flush and the chapter it
    opens is still written as ``start_chapter``.
    """

    def __init__(self, progress_every: int = DEFAULT_PROGRESS_EVERY) -> None:
        if progress_every <= 0:
            raise ValueError("progress_every must be positive")
        self.progress_every = progress_every

    # Public API -----------------------------------------------------------------
    def run(
        self,
        pattern: str,
        source_path: PathLike,
        output_dir: PathLike,
        start_chapter: int,
        sink: ProgressSink,
    ) -> SplitResult:
        """Announce the run on ``sink``, then split according to the inputs."""

        sink.send(Started())
        request = SplitRequest(pattern, Path(source_path), Path(output_dir), start_chapter)
        return self._split(request, sink)

    def _split(self, request: SplitRequest, sink: ProgressSink) -> SplitResult:
        start_time = time.perf_counter()
        boundary = BoundaryPattern(request.pattern)
        self._ensure_output_dir(request.output_dir)
        logger.info(
            "Splitting %s into %s with pattern %r",
            request.source_path,
            request.output_dir,
            boundary.pattern,
        )

        result = SplitResult(output_dir=request.output_dir)
        chapter_index = request.start_chapter
        file_index = request.start_chapter
        buffer: List[str] = []
        line_count = 0

        with self._open_source(request.source_path) as handle:
            for line in self._read_lines(handle, request.source_path):
                if boundary.matches(line):
                    sink.send(NewTitle(line))
                    if buffer:
                        result.chapter_files.append(
                            self._flush(buffer, request.output_dir, file_index)
                        )
                        file_index += 1
                    chapter_index += 1
                    sink.send(ChaptersSplit(chapter_index))

                buffer.append(line + "\n")

                line_count += 1
                if line_count % self.progress_every == 0:
                    sink.send(LinesParsed(line_count))

        if buffer:
            result.chapter_files.append(self._flush(buffer, request.output_dir, file_index))

        result.lines_processed = line_count
        result.next_chapter = chapter_index
        result.elapsed_seconds = time.perf_counter() - start_time
        logger.info(
            "Wrote %d chapters from %d lines in %.2fs",
            len(result.chapter_files),
            line_count,
            result.elapsed_seconds,
        )
        return result

    # Input handling --------------------------------------------------------------
    def _ensure_output_dir(self, folder: Path) -> None:
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OpenError(f"Cannot create output folder ({exc.strerror or exc})", folder) from exc

    def _open_source(self, path: Path) -> BinaryIO:
        try:
            return path.open("rb")
        except OSError as exc:
            raise OpenError(f"Cannot open book ({exc.strerror or exc})", path) from exc

    def _read_lines(self, handle: BinaryIO, path: Path) -> Iterator[str]:
        line_number = 0
        while True:
            try:
                raw = handle.readline()
            except OSError as exc:
                raise OpenError(f"Cannot read book ({exc.strerror or exc})", path) from exc
            if not raw:
                return
            line_number += 1
            yield self._decode_line(raw, path, line_number)

    def _decode_line(self, raw: bytes, path: Path, line_number: int) -> str:
        if raw.endswith(b"\n"):
            raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Book is not valid UTF-8 ({exc.reason})", path, line_number) from exc

    # Output ----------------------------------------------------------------------
    def _flush(self, buffer: List[str], folder: Path, index: int) -> Path:
        target = folder / chapter_filename(index)
        payload = "".join(buffer).encode("utf-8")
        try:
            with target.open("wb") as out:
                out.write(payload)
        except OSError as exc:
            raise WriteError(f"Cannot write chapter ({exc.strerror or exc})", target) from exc
        buffer.clear()
        logger.debug("Wrote chapter %s (%d lines)", target.name, payload.count(b"\n"))
        return target

