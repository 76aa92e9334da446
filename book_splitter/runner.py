"""Run the splitter in the background and report how it ended.

:func:`split_chapters` is the single place that turns the engine's outcome into
the terminal :class:`Done` or :class:`Failed` event. The thread and asyncio
helpers only decide where that call executes.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Optional

from .errors import SplitError
from .events import Done, Failed
from .sink import ProgressSink
from .splitter import PathLike, SplitEngine, SplitResult

__all__ = ["SplitThread", "split_chapters", "split_chapters_async", "start_split"]

LOGGER = logging.getLogger(__name__)


def split_chapters(
    pattern: str,
    source: PathLike,
    folder: PathLike,
    start_chapter: int,
    sink: ProgressSink,
) -> Optional[SplitResult]:
    """Split ``source`` into chapter files and finish with one terminal event.

    Errors are reported through ``sink`` as :class:`Failed` instead of being
    raised. Returns the :class:`SplitResult`, or ``None`` when the run failed.
    """

    try:
        result = SplitEngine().run(pattern, source, folder, start_chapter, sink)
    except (SplitError, ValueError) as exc:
        LOGGER.debug("Split failed: %s", exc)
        sink.send(Failed(str(exc), exc))
        return None
    except Exception as exc:
        LOGGER.exception("Unexpected error while splitting %s", source)
        sink.send(Failed(str(exc) or type(exc).__name__, exc))
        return None
    sink.send(Done())
    return result


class SplitThread(threading.Thread):
    """Thread running :func:`split_chapters`; ``result`` is set once it ends."""

    def __init__(
        self,
        pattern: str,
        source: PathLike,
        folder: PathLike,
        start_chapter: int,
        sink: ProgressSink,
    ) -> None:
        super().__init__(name=f"split-{Path(source).name}")
        self._inputs = (pattern, source, folder, start_chapter, sink)
        self.result: Optional[SplitResult] = None

    def run(self) -> None:
        self.result = split_chapters(*self._inputs)


def start_split(
    pattern: str,
    source: PathLike,
    folder: PathLike,
    start_chapter: int,
    sink: ProgressSink,
) -> SplitThread:
    """Run :func:`split_chapters` on a new thread and return it once started."""

    thread = SplitThread(pattern, source, folder, start_chapter, sink)
    thread.start()
    return thread


async def split_chapters_async(
    pattern: str,
    source: PathLike,
    folder: PathLike,
    start_chapter: int,
    sink: ProgressSink,
) -> Optional[SplitResult]:
    """Await :func:`split_chapters` without blocking the running event loop."""

    return await asyncio.to_thread(split_chapters, pattern, source, folder, start_chapter, sink)
