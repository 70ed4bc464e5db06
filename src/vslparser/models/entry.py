"""Entry model for parsed varnishlog transactions."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class EntryKind(str, Enum):
    """Transaction kinds that varnishlog prints between << and >>."""

    SESSION = "Session"
    REQUEST = "Request"
    BEREQ = "BeReq"
    RAW = "Raw"


@dataclass(frozen=True)
class Entry:
    """One varnishlog transaction.

    Entries are immutable: fields is a read-only mapping whose values are
    tuples, whatever mapping of sequences the entry was built from.

    Attributes:
        kind: Transaction kind from the header line
        transaction_id: Transaction identifier (VXID) from the header line
        fields: Tag -> values, in the order the body lines appeared.
                A tag repeated on several lines keeps every value.
    """

    kind: EntryKind
    transaction_id: int
    fields: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        frozen = {tag: tuple(values) for tag, values in self.fields.items()}
        object.__setattr__(self, "fields", MappingProxyType(frozen))

    def __hash__(self) -> int:
        return hash((self.kind, self.transaction_id, frozenset(self.fields.items())))

    def get(self, tag: str, default: Optional[str] = None) -> Optional[str]:
        """Get the first value recorded for a tag.

        Args:
            tag: Tag name (case-sensitive)
            default: Returned when the tag is absent

        Returns:
            First value, or default

        Examples:
            >>> entry.get("ReqMethod")
            'GET'
        """
        values = self.fields.get(tag)
        if not values:
            return default
        return values[0]

    def get_all(self, tag: str) -> list[str]:
        """Get a copy of all values recorded for a tag (empty if absent)."""
        return list(self.fields.get(tag, ()))

    def headers(self, tag: str = "ReqHeader") -> list[tuple[str, str]]:
        """Split the values of a header tag into (name, value) pairs.

        Values without a colon are skipped. Whitespace around the header
        value is stripped.

        Args:
            tag: One of the header tags (ReqHeader, BerespHeader, ...)

        Returns:
            List of (name, value) pairs in log order
        """
        pairs = []
        for raw in self.fields.get(tag, ()):
            name, sep, value = raw.partition(":")
            if not sep:
                continue
            pairs.append((name.strip(), value.strip()))
        return pairs

    def header(self, name: str, tag: str = "ReqHeader") -> Optional[str]:
        """Look up the first header with the given name.

        Header names are compared case-insensitively, as HTTP does.

        Examples:
            >>> entry.header("host")
            'example.com'
            >>> entry.header("Content-Type", tag="BerespHeader")
            'text/html'
        """
        wanted = name.lower()
        for header_name, value in self.headers(tag):
            if header_name.lower() == wanted:
                return value
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict."""
        return {
            "kind": self.kind.value,
            "vxid": self.transaction_id,
            "fields": {tag: list(values) for tag, values in self.fields.items()},
        }
