"""vslparser - Read varnishlog transactions as structured entries.

Example:
    >>> from vslparser import LineReader, parse
    >>> reader = LineReader.from_text("* << BeReq >> 123\\n- BereqMethod GET\\n- End")
    >>> entry = parse(reader)
    >>> entry.kind, entry.transaction_id, entry.fields
    (<EntryKind.BEREQ: 'BeReq'>, 123, {'BereqMethod': ['GET']})
"""

from vslparser.exceptions import (
    EndOfInput,
    MalformedBody,
    MalformedHeader,
    TruncatedEntry,
    VSLParseError,
)
from vslparser.lines import LineReader, open_log, spawn_command
from vslparser.models.entry import Entry, EntryKind
from vslparser.parser import iter_entries, parse
from vslparser.tokenizer import split_line

__version__ = "0.1.0"

__all__ = [
    "EndOfInput",
    "Entry",
    "EntryKind",
    "LineReader",
    "MalformedBody",
    "MalformedHeader",
    "TruncatedEntry",
    "VSLParseError",
    "iter_entries",
    "open_log",
    "parse",
    "spawn_command",
    "split_line",
]
