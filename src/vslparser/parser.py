"""Parser for varnishlog's grouped text output.

varnishlog prints each transaction as a block of lines:

    *   << Request  >> 32770
    -   Begin          req 32769 rxreq
    -   ReqMethod      GET
    -   ReqHeader      Host: example.com
    -   End

A header line names the transaction kind and its identifier (VXID), each
body line carries one tag and its value, and a bare End record closes the
block. Blocks are separated by blank lines.

parse() reads exactly one block from a line source and returns it as an
Entry. It keeps no state between calls: calling it again on the same
source continues with the next block.
"""

import re
from typing import Iterator, Optional

from vslparser.exceptions import (
    EndOfInput,
    MalformedBody,
    MalformedHeader,
    TruncatedEntry,
)
from vslparser.models.entry import Entry, EntryKind
from vslparser.tokenizer import WHITESPACE, split_line


BODY_MARKER = "-"
END_TAG = "End"

# Identifiers are unsigned 64-bit integers
MAX_TRANSACTION_ID = 2**64 - 1

_HEADER_RE = re.compile(
    r"^\*[ \t]*<<[ \t]*(?P<kind>[^ \t<>]+)[ \t]*>>[ \t]*(?P<vxid>[^ \t]+)[ \t]*$"
)

_KINDS = {kind.value: kind for kind in EntryKind}


def parse(source: Iterator[str]) -> Entry:
    """Read the next entry from a line source.

    Blank lines before the header are skipped. Reading stops right after the
    End record, so nothing belonging to the next entry is consumed.

    Args:
        source: Iterator yielding lines without their trailing newline.
                It must be an iterator (a file, a LineReader, iter(list)),
                not a re-iterable container, so that successive calls
                continue where the previous one stopped. If it has a
                line_number attribute (see LineReader), errors report it.

    Returns:
        The parsed Entry

    Raises:
        TypeError: If source is not an iterator
        EndOfInput: If the source is exhausted before a header is found
        MalformedHeader: If the first non-blank line is not a valid header
        MalformedBody: If a line inside the entry is not a tagged body line
        TruncatedEntry: If the source ends before the End record
    """
    if iter(source) is not source:
        raise TypeError(
            f"parse() needs an iterator of lines, not {type(source).__name__}; "
            f"wrap it with iter() or LineReader"
        )

    header = _next_non_blank(source)
    if header is None:
        raise EndOfInput()

    kind, transaction_id = _parse_header(header, _line_number(source))
    fields: dict[str, list[str]] = {}

    for line in source:
        if not line.startswith(BODY_MARKER):
            raise MalformedBody("expected a '-' record", line, _line_number(source))

        tag, value = split_line(line[len(BODY_MARKER):])
        if tag == END_TAG and not value.rstrip(WHITESPACE):
            return Entry(kind=kind, transaction_id=transaction_id, fields=fields)
        if not tag:
            raise MalformedBody("record has no tag", line, _line_number(source))

        fields.setdefault(tag, []).append(value)

    raise TruncatedEntry(
        f"input ended inside {kind.value} {transaction_id}", None, _line_number(source)
    )


def iter_entries(source: Iterator[str]) -> Iterator[Entry]:
    """Yield entries from a line source until it is exhausted.

    Grammar errors are not caught; they propagate to the caller after the
    entries preceding them have been yielded.

    Examples:
        >>> for entry in iter_entries(LineReader(sys.stdin)):
        ...     print(entry.kind, entry.transaction_id)
    """
    while True:
        try:
            entry = parse(source)
        except EndOfInput:
            return
        yield entry


def _next_non_blank(source: Iterator[str]) -> Optional[str]:
    for line in source:
        if line.strip(WHITESPACE):
            return line
    return None


def _parse_header(line: str, line_number: Optional[int]) -> tuple[EntryKind, int]:
    match = _HEADER_RE.match(line)
    if not match:
        raise MalformedHeader("expected '* << Kind >> VXID'", line, line_number)

    kind = _KINDS.get(match.group("kind"))
    if kind is None:
        raise MalformedHeader(f"unknown transaction kind {match.group('kind')!r}", line, line_number)

    # int() would also accept signs and underscores
    vxid = match.group("vxid")
    if not vxid.isascii() or not vxid.isdigit():
        raise MalformedHeader(f"invalid transaction id {vxid!r}", line, line_number)

    transaction_id = int(vxid)
    if transaction_id > MAX_TRANSACTION_ID:
        raise MalformedHeader(f"transaction id {vxid} out of range", line, line_number)

    return kind, transaction_id


def _line_number(source: Iterator[str]) -> Optional[int]:
    return getattr(source, "line_number", None)
