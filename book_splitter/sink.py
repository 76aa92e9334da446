"""Event channel between a split run and whoever is watching it.

The producer side never blocks: events go into an unbounded queue and are
silently dropped once the consumer has gone away. Losing the consumer cancels
observation only; the split itself keeps running to completion.
"""

from __future__ import annotations

import logging
import queue
import threading
import weakref
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Protocol, Tuple

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

__all__ = [
    "ProgressSink",
    "ChannelSink",
    "ProgressReceiver",
    "CallbackSink",
    "ProgressTracker",
    "progress_channel",
]

LOGGER = logging.getLogger(__name__)

EventCallback = Callable[[ProgressEvent], None]


class ProgressSink(Protocol):
    def send(self, event: ProgressEvent) -> None:
        ...


class _Channel:
    def __init__(self) -> None:
        self.events: "queue.SimpleQueue[ProgressEvent]" = queue.SimpleQueue()
        self.disconnected = threading.Event()


class ChannelSink:
    """Producer end of :func:`progress_channel`."""

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel

    @property
    def connected(self) -> bool:
        return not self._channel.disconnected.is_set()

    def send(self, event: ProgressEvent) -> None:
        if self._channel.disconnected.is_set():
            return
        self._channel.events.put(event)


class ProgressReceiver:
    """Consumer end of :func:`progress_channel`.

    Closing the receiver, leaving its ``with`` block or letting it be garbage
    collected disconnects the channel; anything sent afterwards is discarded.
    """

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel
        self._finalizer = weakref.finalize(self, channel.disconnected.set)

    def __enter__(self) -> "ProgressReceiver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __iter__(self) -> Iterator[ProgressEvent]:
        """Yield events as they arrive, stopping after the terminal event."""

        while True:
            event = self.get()
            yield event
            if is_terminal(event):
                return

    @property
    def closed(self) -> bool:
        return self._channel.disconnected.is_set()

    def close(self) -> None:
        self._finalizer()

    def get(self, timeout: Optional[float] = None) -> ProgressEvent:
        """Block for the next event; raises :class:`queue.Empty` on timeout."""

        return self._channel.events.get(timeout=timeout)

    def try_get(self) -> Optional[ProgressEvent]:
        try:
            return self._channel.events.get_nowait()
        except queue.Empty:
            return None

    def drain(self) -> List[ProgressEvent]:
        """Return every pending event without waiting for new ones."""

        pending: List[ProgressEvent] = []
        while True:
            event = self.try_get()
            if event is None:
                return pending
            pending.append(event)


def progress_channel() -> Tuple[ChannelSink, ProgressReceiver]:
    """Create a connected single-producer, single-consumer event channel."""

    channel = _Channel()
    return ChannelSink(channel), ProgressReceiver(channel)


class CallbackSink:
    """Deliver events by calling ``callback`` on the producer's thread.

    A consumer that raises is treated as gone: the failure is logged once and
    later events are dropped.
    """

    def __init__(self, callback: EventCallback) -> None:
        self._callback = callback
        self.connected = True

    def send(self, event: ProgressEvent) -> None:
        if not self.connected:
            return
        try:
            self._callback(event)
        except Exception:
            LOGGER.warning("Progress consumer raised; ignoring further events", exc_info=True)
            self.connected = False


@dataclass
class ProgressTracker:
    """Fold a stream of events into the latest values a display needs."""

    NOT_STARTED = "not-started"
    WORKING = "working"
    DONE = "done"
    ERROR = "error"

    status: str = NOT_STARTED
    lines_processed: int = 0
    chapters_saved: int = 0
    last_hit: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.status in {self.DONE, self.ERROR}

    def apply(self, event: ProgressEvent) -> None:
        if isinstance(event, Started):
            self.status = self.WORKING
            self.lines_processed = 0
            self.chapters_saved = 0
            self.last_hit = None
            self.error_message = None
        elif isinstance(event, LinesParsed):
            self.lines_processed = event.count
        elif isinstance(event, ChaptersSplit):
            self.chapters_saved = event.next_index
        elif isinstance(event, NewTitle):
            self.last_hit = event.title
        elif isinstance(event, Failed):
            self.status = self.ERROR
            self.error_message = event.message
        elif isinstance(event, Done):
            self.status = self.DONE
        else:
            raise TypeError(f"Unknown progress event: {event!r}")

    def poll(self, receiver: ProgressReceiver) -> bool:
        """Apply every pending event; return ``True`` once the run has ended."""

        for event in receiver.drain():
            self.apply(event)
        return self.finished
