"""Exceptions raised while reading varnishlog entries."""

from typing import Optional


class EndOfInput(EOFError):
    """Raised when the line source is exhausted before a new entry starts.

    This is the normal way a stream ends. It deliberately does not derive
    from VSLParseError so that a "parse until end of input" loop can stop
    on it without also swallowing grammar failures.
    """

    def __init__(self, message: str = "No more entries in input"):
        super().__init__(message)


class VSLParseError(Exception):
    """Base class for grammar violations in varnishlog output.

    Attributes:
        reason: Short description of what is wrong
        line: Offending line text (None when the input simply ran out)
        line_number: 1-based line number, if the source tracks it
    """

    def __init__(
        self,
        reason: str,
        line: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        """Initialize VSLParseError.

        Args:
            reason: Short description of what is wrong
            line: Offending line text
            line_number: 1-based line number of the offending line
        """
        self.reason = reason
        self.line = line
        self.line_number = line_number
        super().__init__(self._format())

    def _format(self) -> str:
        message = self.reason
        if self.line_number is not None:
            message = f"line {self.line_number}: {message}"
        if self.line is not None:
            message = f"{message}: {self.line!r}"
        return message


class MalformedHeader(VSLParseError):
    """Raised when the first non-blank line of an entry is not a valid header."""


class MalformedBody(VSLParseError):
    """Raised when a line inside an entry is not a valid tagged body line."""


class TruncatedEntry(VSLParseError):
    """Raised when the input ends after a header but before the End record."""
