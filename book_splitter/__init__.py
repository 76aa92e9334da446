"""Split large plain-text books into numbered chapter files."""

from __future__ import annotations

__version__ = "0.1.0"

from .errors import DecodeError, OpenError, PatternError, SplitError, WriteError
from .events import (
    ChaptersSplit,
    Done,
    Failed,
    LinesParsed,
    NewTitle,
    ProgressEvent,
    Started,
    is_terminal,
)
from .runner import SplitThread, split_chapters, split_chapters_async, start_split
from .sink import CallbackSink, ProgressReceiver, ProgressTracker, progress_channel
from .splitter import BoundaryPattern, SplitEngine, SplitRequest, SplitResult

__all__ = [
    "BoundaryPattern",
    "CallbackSink",
    "ChaptersSplit",
    "DecodeError",
    "Done",
    "Failed",
    "LinesParsed",
    "NewTitle",
    "OpenError",
    "PatternError",
    "ProgressEvent",
    "ProgressReceiver",
    "ProgressTracker",
    "SplitEngine",
    "SplitError",
    "SplitRequest",
    "SplitResult",
    "SplitThread",
    "Started",
    "WriteError",
    "is_terminal",
    "progress_channel",
    "split_chapters",
    "split_chapters_async",
    "start_split",
]
