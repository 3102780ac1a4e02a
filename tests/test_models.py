"""Tests for the line codec and date rules."""

import pytest

from stamp.errors import FormatError, ValidationError
from stamp.models import (
    Note,
    Status,
    decode,
    encode,
    is_valid_date,
    strip_newlines,
    try_decode,
    validate_date,
)


class TestDecode:
    def test_category_line(self):
        note = decode("3\t2024-01-02\thello world\n")
        assert note == Note(id=3, date="2024-01-02", content="hello world")
        assert note.status is None

    def test_classic_line(self):
        note = decode("4\tP\t2024-01-02\twater plants\n", with_status=True)
        assert note.id == 4
        assert note.status is Status.POSTPONED
        assert note.date == "2024-01-02"
        assert note.content == "water plants"

    def test_content_keeps_extra_tabs(self):
        note = decode("1\t2024-01-01\ta\tb\n")
        assert note.content == "a\tb"

    def test_line_without_newline(self):
        assert decode("7\t2024-01-01\tx").id == 7

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "\t2024-01-01\tmissing id\n",
            "abc\t2024-01-01\tnot a number\n",
            "0\t2024-01-01\tzero id\n",
            "-3\t2024-01-01\tnegative\n",
            "1\t2024-01-01\n",
            "1\t2024-1-1\tshort date\n",
        ],
    )
    def test_malformed_lines(self, line):
        with pytest.raises(FormatError):
            decode(line)

    def test_unknown_status(self):
        with pytest.raises(FormatError) as exc:
            decode("1\tX\t2024-01-01\tc\n", with_status=True)
        assert exc.value.reason == "unknown status"

    def test_try_decode_skips_blank_and_malformed(self):
        assert try_decode("") is None
        assert try_decode("   ") is None
        assert try_decode("garbage") is None
        assert try_decode("2\t2024-01-01\tok").id == 2


class TestEncode:
    def test_round_trip(self):
        for line in (
            "1\t2024-01-01\tfirst\n",
            "12\t1999-12-31\tsomething longer, with punctuation!\n",
        ):
            assert encode(decode(line)) == line

    def test_round_trip_with_status(self):
        line = "5\tD\t2024-02-29\tfile taxes\n"
        assert encode(decode(line, with_status=True)) == line

    def test_round_trip_with_embedded_tab(self):
        line = "1\t2024-01-01\ta\tb\n"
        assert encode(decode(line)) == line

    def test_note_helpers(self):
        note = Note(id=2, date="2024-01-01", content="x", status=Status.UNDONE)
        assert note.to_line() == "2\tU\t2024-01-01\tx\n"
        assert note.without_date() == "2\tU\tx"
        assert Note(id=2, date="2024-01-01", content="x").without_date() == "2\tx"


class TestDates:
    @pytest.mark.parametrize("text", ["2024-02-29", "2000-02-29", "1970-01-01", "2023-12-31"])
    def test_valid(self, text):
        assert is_valid_date(text)
        assert validate_date(text) == text

    @pytest.mark.parametrize(
        "text",
        ["2023-02-29", "1900-02-29", "2024-13-01", "2024-00-10", "2024-04-31", "2024-01-00",
         "24-01-01", "2024/01/01", "hello", ""],
    )
    def test_invalid(self, text):
        assert not is_valid_date(text)
        with pytest.raises(ValidationError):
            validate_date(text)

    def test_error_names_the_problem(self):
        with pytest.raises(ValidationError, match="invalid month 13"):
            validate_date("2024-13-01")
        with pytest.raises(ValidationError, match="invalid day 29"):
            validate_date("2023-02-29")


def test_strip_newlines():
    assert strip_newlines("a\nb") == "ab"
    assert strip_newlines("a\r\nb\n") == "a\rb"
