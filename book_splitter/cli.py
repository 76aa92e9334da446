"""Command line interface for Book Splitter."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .events import LinesParsed, NewTitle
from .runner import start_split
from .sink import ProgressTracker, progress_channel

logger = logging.getLogger(__name__)


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError("start chapter must not be negative")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="book-splitter",
        description="Split a plain-text book into numbered chapter files at every header line.",
    )
    parser.add_argument("--in", dest="input_path", type=Path, required=True, help="Input UTF-8 text file")
    parser.add_argument("--out", dest="output_dir", type=Path, required=True, help="Folder for the chapter files")
    parser.add_argument(
        "--pattern",
        required=True,
        help="Regular expression that identifies a chapter header line",
    )
    parser.add_argument(
        "--start",
        dest="start_chapter",
        type=non_negative_int,
        default=1,
        help="Number of the first chapter file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")
    parser.add_argument("--version", action="version", version=f"book-splitter {__version__}")
    return parser


def configure_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def watch(receiver, tracker: ProgressTracker) -> None:
    """Consume events until the run ends, logging the interesting ones."""

    for event in receiver:
        tracker.apply(event)
        if isinstance(event, LinesParsed):
            logger.info("Processed %d lines", event.count)
        elif isinstance(event, NewTitle):
            logger.debug("Found header: %s", event.title)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    sink, receiver = progress_channel()
    tracker = ProgressTracker()
    with receiver:
        worker = start_split(args.pattern, args.input_path, args.output_dir, args.start_chapter, sink)
        watch(receiver, tracker)
    worker.join()

    result = worker.result
    if result is None:
        logger.error(tracker.error_message)
        return 1

    print(f"Split {args.input_path} into {result.output_dir}")
    print(f"Lines: {result.lines_processed}")
    print(f"Chapters: {len(result.chapter_files)}")
    if tracker.last_hit is not None:
        print(f"Last hit: {tracker.last_hit}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
