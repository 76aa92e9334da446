"""Exceptions raised while splitting a book into chapter files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

__all__ = [
    "SplitError",
    "PatternError",
    "OpenError",
    "DecodeError",
    "WriteError",
]


class SplitError(Exception):
    """Base exception for every failure that aborts a split run."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path}"


class PatternError(SplitError):
    """The boundary pattern is not a valid regular expression."""


class OpenError(SplitError):
    """The source could not be opened or the output folder could not be created."""


class DecodeError(SplitError):
    """The source contains bytes that are not valid UTF-8."""

    def __init__(
        self, message: str, path: Optional[Path] = None, line_number: Optional[int] = None
    ) -> None:
        super().__init__(message, path)
        self.line_number = line_number

    def __str__(self) -> str:
        if self.line_number is None:
            return super().__str__()
        return f"{super().__str__()} (line {self.line_number})"


class WriteError(SplitError):
    """A chapter file could not be created or written."""
