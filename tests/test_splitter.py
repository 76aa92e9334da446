from __future__ import annotations

import pytest

from book_splitter.errors import DecodeError, OpenError, PatternError, WriteError
from book_splitter.events import ChaptersSplit, LinesParsed, NewTitle, Started
from book_splitter.splitter import BoundaryPattern, SplitEngine, SplitRequest, chapter_filename

from conftest import chapter_files

CHAPTER = r"^Chapter"


def _run(source, out, sink, *, pattern=CHAPTER, start=1, engine=None):
    engine = engine or SplitEngine()
    return engine.run(pattern, source, out, start, sink)


def test_worked_example_produces_two_chapters(tmp_path, write_book, sink):
    source = write_book(["Chapter 1", "hello", "world", "Chapter 2", "foo"])
    out = tmp_path / "out"

    result = _run(source, out, sink)

    assert [path.name for path in chapter_files(out)] == ["0001.txt", "0002.txt"]
    assert (out / "0001.txt").read_text(encoding="utf-8") == "Chapter 1\nhello\nworld\n"
    assert (out / "0002.txt").read_text(encoding="utf-8") == "Chapter 2\nfoo\n"
    assert sink.events == [
        Started(),
        NewTitle("Chapter 1"),
        ChaptersSplit(2),
        NewTitle("Chapter 2"),
        ChaptersSplit(3),
    ]
    assert result.chapter_files == [out / "0001.txt", out / "0002.txt"]
    assert result.lines_processed == 5
    assert result.next_chapter == 3


def test_leading_lines_become_the_start_chapter(tmp_path, write_book, sink):
    source = write_book(["Title page", "", "Chapter 1", "text"])
    out = tmp_path / "out"

    _run(source, out, sink, start=5)

    assert (out / "0005.txt").read_text(encoding="utf-8") == "Title page\n\n"
    assert (out / "0006.txt").read_text(encoding="utf-8") == "Chapter 1\ntext\n"
    assert sink.of_type(ChaptersSplit) == [ChaptersSplit(6)]


def test_no_match_writes_whole_input_to_start_chapter(tmp_path, write_book, sink):
    lines = ["just", "some", "prose"]
    source = write_book(lines)
    out = tmp_path / "out"

    _run(source, out, sink, start=7)

    assert [path.name for path in chapter_files(out)] == ["0007.txt"]
    assert (out / "0007.txt").read_bytes() == source.read_bytes()
    assert sink.of_type(NewTitle) == []


def test_empty_input_writes_nothing(tmp_path, sink):
    source = tmp_path / "empty.txt"
    source.write_bytes(b"")
    out = tmp_path / "out"

    result = _run(source, out, sink)

    assert out.is_dir()
    assert chapter_files(out) == []
    assert result.chapter_files == []
    assert sink.events == [Started()]


def test_consecutive_headers_keep_single_line_chapter(tmp_path, write_book, sink):
    source = write_book(["Chapter 1", "Chapter 2", "body"])
    out = tmp_path / "out"

    _run(source, out, sink)

    assert (out / "0001.txt").read_text(encoding="utf-8") == "Chapter 1\n"
    assert (out / "0002.txt").read_text(encoding="utf-8") == "Chapter 2\nbody\n"


@pytest.mark.parametrize(
    "lines",
    [
        ["Chapter 1", "a", "Chapter 2", "b", "c"],
        ["preface", "Chapter 1", "Chapter 2", "Chapter 3"],
        ["nothing to see"],
        ["x", "", "Chapter 9", "", "y", "Chapter 10"],
    ],
)
def test_output_files_partition_the_input(tmp_path, write_book, sink, lines):
    source = write_book(lines)
    out = tmp_path / "out"

    _run(source, out, sink)

    files = chapter_files(out)
    joined = b"".join(path.read_bytes() for path in files)
    assert joined == source.read_bytes()

    matches = sum(1 for line in lines if line.startswith("Chapter"))
    leading = 0 if lines[0].startswith("Chapter") else 1
    assert len(files) == matches + leading
    assert [int(path.stem) for path in files] == list(range(1, len(files) + 1))


def test_progress_reported_every_thousand_lines(tmp_path, write_book, sink):
    source = write_book(f"line {number}" for number in range(2500))

    _run(source, tmp_path / "out", sink)

    assert sink.of_type(LinesParsed) == [LinesParsed(1000), LinesParsed(2000)]


def test_progress_cadence_is_configurable(tmp_path, write_book, sink):
    source = write_book(["a", "b", "c", "d", "e"])

    _run(source, tmp_path / "out", sink, engine=SplitEngine(progress_every=2))

    assert [event.count for event in sink.of_type(LinesParsed)] == [2, 4]


def test_progress_every_must_be_positive():
    with pytest.raises(ValueError):
        SplitEngine(progress_every=0)


def test_crlf_terminators_are_normalized(tmp_path, sink):
    source = tmp_path / "dos.txt"
    source.write_bytes(b"Chapter 1\r\nfirst\r\nChapter 2\r\nlast")
    out = tmp_path / "out"

    _run(source, out, sink)

    assert (out / "0001.txt").read_bytes() == b"Chapter 1\nfirst\n"
    assert (out / "0002.txt").read_bytes() == b"Chapter 2\nlast\n"
    assert sink.of_type(NewTitle) == [NewTitle("Chapter 1"), NewTitle("Chapter 2")]


def test_pattern_matches_anywhere_in_line(tmp_path, write_book, sink):
    source = write_book(["intro", "   * * *   ", "after"])
    out = tmp_path / "out"

    _run(source, out, sink, pattern=r"\* \* \*")

    assert (out / "0001.txt").read_text(encoding="utf-8") == "intro\n"
    assert (out / "0002.txt").read_text(encoding="utf-8") == "   * * *   \nafter\n"


def test_output_folder_is_created_with_parents(tmp_path, write_book, sink):
    source = write_book(["text"])
    out = tmp_path / "nested" / "deeper" / "out"

    _run(source, out, sink)

    assert (out / "0001.txt").exists()


def test_chapter_filename_grows_past_four_digits():
    assert chapter_filename(0) == "0000.txt"
    assert chapter_filename(42) == "0042.txt"
    assert chapter_filename(12345) == "12345.txt"


def test_invalid_pattern_raises_before_any_io(tmp_path, write_book, sink):
    source = write_book(["Chapter 1"])
    out = tmp_path / "out"

    with pytest.raises(PatternError):
        _run(source, out, sink, pattern="Chapter (")

    assert not out.exists()
    assert sink.events == [Started()]


def test_missing_source_raises_open_error(tmp_path, sink):
    with pytest.raises(OpenError) as info:
        _run(tmp_path / "missing.txt", tmp_path / "out", sink)

    assert info.value.path == tmp_path / "missing.txt"


def test_uncreatable_output_folder_raises_open_error(tmp_path, write_book, sink):
    source = write_book(["text"])
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder", encoding="utf-8")

    with pytest.raises(OpenError):
        _run(source, blocker / "out", sink)


def test_invalid_utf8_aborts_and_keeps_flushed_chapters(tmp_path, sink):
    source = tmp_path / "broken.txt"
    source.write_bytes(b"Chapter 1\nok\nChapter 2\nbad \xff byte\nChapter 3\n")
    out = tmp_path / "out"

    with pytest.raises(DecodeError) as info:
        _run(source, out, sink)

    assert info.value.line_number == 4
    assert "line 4" in str(info.value)
    assert [path.name for path in chapter_files(out)] == ["0001.txt"]


def test_unwritable_chapter_raises_write_error(tmp_path, write_book, sink):
    source = write_book(["text"])
    out = tmp_path / "out"
    (out / "0001.txt").mkdir(parents=True)

    with pytest.raises(WriteError) as info:
        _run(source, out, sink)

    assert info.value.path == out / "0001.txt"


def test_negative_start_chapter_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        SplitRequest("x", tmp_path / "in.txt", tmp_path / "out", start_chapter=-1)


def test_boundary_pattern_reports_source():
    boundary = BoundaryPattern(r"^CHAPTER \d+")

    assert boundary.pattern == r"^CHAPTER \d+"
    assert boundary.matches("CHAPTER 12")
    assert not boundary.matches("chapter 12")


@pytest.mark.parametrize("pattern", ["Chapter (", "a{99999999999}"])
def test_every_invalid_pattern_is_a_pattern_error(pattern):
    with pytest.raises(PatternError):
        BoundaryPattern(pattern)


def test_decode_error_without_line_number_has_no_suffix(tmp_path):
    error = DecodeError("Book is not valid UTF-8", tmp_path / "book.txt")

    assert error.line_number is None
    assert str(error) == f"Book is not valid UTF-8: {tmp_path / 'book.txt'}"
