"""Unit tests for the varnishlog entry parser."""

import os
import subprocess
import sys
from pathlib import Path
from textwrap import dedent

import pytest

from vslparser.exceptions import (
    EndOfInput,
    MalformedBody,
    MalformedHeader,
    TruncatedEntry,
    VSLParseError,
)
from vslparser.lines import LineReader
from vslparser.models.entry import Entry, EntryKind
from vslparser.parser import MAX_TRANSACTION_ID, iter_entries, parse


SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def reader(text: str) -> LineReader:
    """Build a line source over text."""
    return LineReader.from_text(text)


class TestParse:
    """Tests for parsing single entries."""

    def test_parse_empty_entry(self):
        """Test an entry with no records has an empty field mapping."""
        entry = parse(reader("* << BeReq >> 123\n- End"))

        assert entry == Entry(kind=EntryKind.BEREQ, transaction_id=123, fields={})

    def test_parse_repeated_tags(self):
        """Test repeated tags accumulate in order and trailing tabs survive."""
        text = "*   <<  Request >> 40000000\n- Foo Bar\n-Foo Baz\n- Bar     Foo  Bar    Baz\t\n- End"

        entry = parse(reader(text))

        assert entry.kind == EntryKind.REQUEST
        assert entry.transaction_id == 40000000
        assert entry.fields == {
            "Foo": ("Bar", "Baz"),
            "Bar": ("Foo  Bar    Baz\t",),
        }

    def test_parse_varnishlog_layout(self):
        """Test the column layout varnishlog actually prints."""
        text = dedent(
            """\
            *   << Request  >> 32770
            -   Begin          req 32769 rxreq
            -   ReqMethod      GET
            -   ReqURL         /index.html
            -   ReqHeader      Host: example.com
            -   ReqHeader      Accept: */*
            -   End
            """
        )

        entry = parse(reader(text))

        assert entry.kind == EntryKind.REQUEST
        assert entry.transaction_id == 32770
        assert entry.fields["Begin"] == ("req 32769 rxreq",)
        assert entry.fields["ReqHeader"] == ("Host: example.com", "Accept: */*")

    def test_parse_skips_leading_blank_lines(self):
        """Test blank and whitespace-only lines before the header are skipped."""
        entry = parse(reader("\n  \n\t\n* << Session >> 1\n- End"))

        assert entry.kind == EntryKind.SESSION
        assert entry.transaction_id == 1

    def test_parse_terminator_with_trailing_whitespace(self):
        """Test an End record padded with spaces still ends the entry."""
        entry = parse(reader("* << Raw >> 0\n-   End            \n"))

        assert entry.kind == EntryKind.RAW
        assert entry.transaction_id == 0
        assert entry.fields == {}

    def test_end_with_value_is_a_record(self):
        """Test an End tag carrying a value is an ordinary record."""
        entry = parse(reader("* << BeReq >> 5\n- End now\n- End"))

        assert entry.fields == {"End": ("now",)}

    def test_parse_stops_after_terminator(self):
        """Test lines after End are left in the source."""
        source = reader("* << BeReq >> 1\n- End\ngarbage")

        parse(source)

        assert next(source) == "garbage"

    def test_parse_multiple_entries(self):
        """Test successive calls read a chain of entries."""
        source = reader("* << BeReq >> 123\n- End\n\n* << BeReq >> 124\n- End")

        first = parse(source)
        second = parse(source)

        assert first == Entry(kind=EntryKind.BEREQ, transaction_id=123, fields={})
        assert second == Entry(kind=EntryKind.BEREQ, transaction_id=124, fields={})
        with pytest.raises(EndOfInput):
            parse(source)

    def test_parse_accepts_plain_iterators(self):
        """Test any iterator of lines works as a source."""
        entry = parse(iter(["* << Request >> 7", "- ReqURL /", "- End"]))

        assert entry.fields == {"ReqURL": ("/",)}

    def test_largest_transaction_id(self):
        """Test the largest unsigned 64-bit id is accepted."""
        entry = parse(reader(f"* << Request >> {MAX_TRANSACTION_ID}\n- End"))

        assert entry.transaction_id == MAX_TRANSACTION_ID

    def test_entries_are_independent(self):
        """Test entries do not share field mappings."""
        source = reader("* << BeReq >> 1\n- Foo a\n- End\n* << BeReq >> 2\n- Foo b\n- End")

        first = parse(source)
        second = parse(source)

        assert first.fields == {"Foo": ("a",)}
        assert second.fields == {"Foo": ("b",)}


class TestParseErrors:
    """Tests for grammar violations."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "- ",
            "* << Request >> 1\n - Foo Bar\n- End",
            "* << Request >> Foo",
            "* << Request >> 1",
        ],
    )
    def test_invalid_input_raises(self, text):
        """Test malformed or incomplete input never yields an entry."""
        with pytest.raises((EndOfInput, VSLParseError)):
            parse(reader(text))

    def test_empty_input_is_end_of_input(self):
        """Test an exhausted source raises EndOfInput and nothing else."""
        with pytest.raises(EndOfInput) as exc_info:
            parse(reader(""))

        assert not isinstance(exc_info.value, VSLParseError)

    def test_blank_only_input_is_end_of_input(self):
        """Test a source with only separators ends cleanly."""
        with pytest.raises(EndOfInput):
            parse(reader("\n\n   \n"))

    def test_body_line_before_header(self):
        """Test a record with no header is a header error."""
        with pytest.raises(MalformedHeader) as exc_info:
            parse(reader("- "))

        assert exc_info.value.line == "- "
        assert exc_info.value.line_number == 1

    @pytest.mark.parametrize(
        "header",
        [
            "* << Request >> Foo",
            "* << Request >> -1",
            "* << Request >> +1",
            "* << Request >> 1_000",
            "* << Request >> 12 3",
            "* << Request >> 1x",
            "* << Request >>",
            "* << request >> 1",
            "* << Unknown >> 1",
            "<< Request >> 1",
            "* < Request > 1",
            "** << BeReq >> 1",
            "* Request 1",
        ],
    )
    def test_malformed_headers(self, header):
        """Test headers deviating from the grammar are rejected."""
        with pytest.raises(MalformedHeader):
            parse(reader(f"{header}\n- End"))

    def test_transaction_id_overflow(self):
        """Test ids beyond the unsigned 64-bit range are rejected."""
        with pytest.raises(MalformedHeader, match="out of range"):
            parse(reader(f"* << Request >> {MAX_TRANSACTION_ID + 1}\n- End"))

    def test_unknown_kind_reason(self):
        """Test the error names the unknown kind."""
        with pytest.raises(MalformedHeader, match="unknown transaction kind 'Bogus'"):
            parse(reader("* << Bogus >> 1\n- End"))

    def test_record_with_leading_space(self):
        """Test the record marker must start the line."""
        with pytest.raises(MalformedBody) as exc_info:
            parse(reader("* << Request >> 1\n - Foo Bar\n- End"))

        assert exc_info.value.line == " - Foo Bar"
        assert exc_info.value.line_number == 2

    def test_record_without_marker(self):
        """Test a line without the marker inside an entry is rejected."""
        with pytest.raises(MalformedBody):
            parse(reader("* << Request >> 1\nReqURL /\n- End"))

    def test_blank_line_inside_entry(self):
        """Test blank lines are only allowed between entries."""
        with pytest.raises(MalformedBody):
            parse(reader("* << Request >> 1\n\n- End"))

    def test_record_without_tag(self):
        """Test a bare marker inside an entry is rejected."""
        with pytest.raises(MalformedBody, match="no tag"):
            parse(reader("* << Request >> 1\n-   \n- End"))

    def test_truncated_entry(self):
        """Test input ending before End is a truncation, not end of input."""
        with pytest.raises(TruncatedEntry) as exc_info:
            parse(reader("* << Request >> 1\n- ReqURL /"))

        assert exc_info.value.line is None
        assert "Request 1" in str(exc_info.value)

    def test_error_message_includes_line(self):
        """Test error messages carry line number and text."""
        with pytest.raises(MalformedHeader) as exc_info:
            parse(reader("\n* << Request >> Foo"))

        message = str(exc_info.value)
        assert message.startswith("line 2: ")
        assert "'* << Request >> Foo'" in message

    def test_plain_iterator_has_no_line_number(self):
        """Test errors from sources without line tracking omit the number."""
        with pytest.raises(MalformedHeader) as exc_info:
            parse(iter(["garbage"]))

        assert exc_info.value.line_number is None


class TestIterEntries:
    """Tests for iter_entries."""

    def test_iterates_until_end(self):
        """Test all entries are yielded and iteration stops cleanly."""
        text = "* << Request >> 1\n- End\n\n* << BeReq >> 2\n- End\n\n"

        entries = list(iter_entries(reader(text)))

        assert [(e.kind, e.transaction_id) for e in entries] == [
            (EntryKind.REQUEST, 1),
            (EntryKind.BEREQ, 2),
        ]

    def test_empty_source(self):
        """Test an empty source yields nothing."""
        assert list(iter_entries(reader(""))) == []

    def test_grammar_error_propagates(self):
        """Test errors surface after the preceding entries."""
        entries = iter_entries(reader("* << Request >> 1\n- End\n* << Request >> 2\n"))

        assert next(entries).transaction_id == 1
        with pytest.raises(TruncatedEntry):
            next(entries)


class TestSourceRequirements:
    """Tests for what parse accepts as a line source."""

    def test_list_is_rejected(self):
        """Test a re-iterable container is refused instead of re-read."""
        with pytest.raises(TypeError, match="iterator of lines"):
            parse(["* << Request >> 1", "- End"])

    def test_wrapped_list_is_accepted(self):
        """Test iter() over a list continues across calls."""
        source = iter(["* << Request >> 1", "- End", "* << BeReq >> 2", "- End"])

        assert parse(source).transaction_id == 1
        assert parse(source).transaction_id == 2


class TestLibraryIsSilent:
    """Tests that the parser writes nothing to the console."""

    def test_parse_error_prints_nothing(self):
        """Test a grammar error in a fresh interpreter leaves stdout and stderr empty."""
        script = dedent(
            """\
            import sys
            from vslparser import LineReader, MalformedHeader, parse, spawn_command
            try:
                parse(iter(["garbage"]))
            except MalformedHeader:
                pass
            with spawn_command([sys.executable, "-c", "print('* << BeReq >> 1')"]) as source:
                try:
                    parse(source)
                except Exception:
                    pass
            """
        )
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            filter(None, [str(SRC_DIR), env.get("PYTHONPATH")])
        )

        result = subprocess.run(
            [sys.executable, "-c", script],
            capture_output=True,
            text=True,
            env=env,
            timeout=60,
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout == ""
        assert result.stderr == ""
