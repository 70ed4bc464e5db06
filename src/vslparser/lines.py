"""Line sources feeding the entry parser.

The parser only needs an iterator of lines without their newline. These
helpers build such iterators from text streams, files and running
commands, and keep track of line numbers for error messages.
"""

import io
import subprocess
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union


class LineReader:
    """Iterator over the lines of a text stream, newline removed.

    The reader never reads ahead: each next() call reads exactly one line
    from the underlying stream, so several parse calls can share it.

    Attributes:
        line_number: Number of the last line returned (0 before the first)
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self.line_number = 0

    @classmethod
    def from_text(cls, text: str) -> "LineReader":
        """Create a reader over an in-memory string.

        Examples:
            >>> reader = LineReader.from_text("* << BeReq >> 1\\n- End")
            >>> list(reader)
            ['* << BeReq >> 1', '- End']
        """
        return cls(io.StringIO(text))

    def __iter__(self) -> "LineReader":
        return self

    def __next__(self) -> str:
        line = self._stream.readline()
        if not line:
            raise StopIteration
        self.line_number += 1

        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        return line


@contextmanager
def open_log(
    path: Union[str, Path],
    encoding: str = "utf-8",
    errors: str = "replace",
) -> Iterator[LineReader]:
    """Open a varnishlog text dump for reading.

    Standard input is decoded with the given encoding and error handler
    too, not with the interpreter's locale settings.

    Args:
        path: File path, or "-" for standard input
        encoding: Text encoding of the file
        errors: Codec error handler (strict, replace, ...)

    Yields:
        LineReader over the file; the file is closed on exit
        (standard input is left open)
    """
    if str(path) != "-":
        with open(path, encoding=encoding, errors=errors, newline="") as f:
            yield LineReader(f)
        return

    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is None:
        # stdin replaced by an in-memory text stream; nothing to decode
        yield LineReader(sys.stdin)
        return

    stream = io.TextIOWrapper(buffer, encoding=encoding, errors=errors, newline="")
    try:
        yield LineReader(stream)
    finally:
        stream.detach()


@contextmanager
def spawn_command(
    argv: list[str],
    encoding: str = "utf-8",
    errors: str = "replace",
    terminate_timeout: Optional[float] = 5.0,
) -> Iterator[LineReader]:
    """Run a command and read its standard output line by line.

    Typically used with varnishlog itself, e.g. ["varnishlog", "-g", "request"].

    Args:
        argv: Command and arguments
        encoding: Encoding of the command's output
        errors: Codec error handler
        terminate_timeout: Seconds to wait after SIGTERM before killing

    Yields:
        LineReader over the command's stdout

    Raises:
        FileNotFoundError: If the executable does not exist
    """
    process = subprocess.Popen(
        argv,
        stdout=subprocess.PIPE,
        encoding=encoding,
        errors=errors,
    )

    try:
        yield LineReader(process.stdout)
    finally:
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=terminate_timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
        process.stdout.close()
