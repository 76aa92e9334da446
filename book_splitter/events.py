"""Progress events reported by a split run.

A run always reports :class:`Started` first and finishes with exactly one of
:class:`Done` or :class:`Failed`. Everything in between arrives in the order the
engine observed it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

__all__ = [
    "Started",
    "LinesParsed",
    "NewTitle",
    "ChaptersSplit",
    "Done",
    "Failed",
    "ProgressEvent",
    "is_terminal",
]


@dataclass(frozen=True)
class Started:
    """The run has begun."""


@dataclass(frozen=True)
class LinesParsed:
    """``count`` input lines have been consumed so far."""

    count: int


@dataclass(frozen=True)
class NewTitle:
    """A boundary line was found."""

    title: str


@dataclass(frozen=True)
class ChaptersSplit:
    """A boundary moved the chapter counter to ``next_index``."""

    next_index: int


@dataclass(frozen=True)
class Done:
    """The run finished successfully."""


@dataclass(frozen=True)
class Failed:
    """The run was aborted; ``message`` is meant for display."""

    message: str
    error: Optional[BaseException] = field(default=None, compare=False, repr=False)


ProgressEvent = Union[Started, LinesParsed, NewTitle, ChaptersSplit, Done, Failed]


def is_terminal(event: ProgressEvent) -> bool:
    return isinstance(event, (Done, Failed))
