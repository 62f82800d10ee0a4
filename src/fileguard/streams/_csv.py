# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Row-oriented CSV access layered on a :class:`Stream`.

The stream stays bytes-first; rows are decoded and encoded with the
instance's text encoding as they cross the boundary.

Records follow RFC 4180 with one extension: inside a quoted field the
escape character keeps the character after it literal, so ``\\"`` does not
close the field. The escape character itself is kept in the field. Outside
quotes it has no meaning, and backslashes are never dropped.
"""

from __future__ import annotations

import io
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import BinaryIO, Final, Self

from ..errors import ReadError, WriteError
from ._stream import Stream
from ._types import DEFAULT_DELIMITER, DEFAULT_ENCODING, DEFAULT_ESCAPE, DEFAULT_QUOTE

__all__ = ["CSVStream"]

# Characters that force a written field to be enclosed, besides the
# delimiter, quote and escape characters.
_ENCLOSE_CHARS: Final[frozenset[str]] = frozenset("\n\r\t ")


@dataclass(slots=True)
class CSVStream:
    """Reads and writes rows of comma separated values.

    Wraps any :class:`Stream`, so rows can be kept in a file
    (:meth:`CSVStream.open`) or in memory (``CSVStream(Stream.memory())``).
    Fields containing the delimiter, the quote or escape character,
    whitespace or a line break are quoted, and unescaped quotes inside them
    doubled.
    """

    _stream: Stream
    _encoding: str = DEFAULT_ENCODING

    @classmethod
    def open(
        cls,
        path: str | os.PathLike[str],
        mode: str,
        *,
        encoding: str = DEFAULT_ENCODING,
    ) -> CSVStream:
        """Open a CSV file; see :meth:`Stream.open` for ``mode``."""
        return cls(_stream=Stream.open(path, mode), _encoding=encoding)

    @property
    def stream(self) -> Stream:
        """The byte stream holding the rows."""
        return self._stream

    @property
    def encoding(self) -> str:
        """Text encoding of the rows."""
        return self._encoding

    def read_row(
        self,
        delimiter: str = DEFAULT_DELIMITER,
        quote: str = DEFAULT_QUOTE,
        escape: str = DEFAULT_ESCAPE,
        max_len: int = 0,
    ) -> list[str] | None:
        """Parse the next record into a list of fields.

        A quoted field may continue over several physical lines. A blank
        line yields ``None`` rather than a list, so it is distinguishable
        from a row holding one empty field (``[""]``).

        Args:
            delimiter: Field separator.
            quote: Character enclosing fields.
            escape: Character keeping the next character inside a quoted
                field literal; empty disables it.
            max_len: Maximum length of the first physical line; 0 is unlimited.

        Raises:
            ReadError: At end-of-stream, or if the record could not be read
                or parsed.
            ValueError: If ``delimiter``, ``quote`` or ``escape`` is not a
                single character (``escape`` may also be empty).
        """
        escape = _check_dialect(delimiter, quote, escape)
        handle = self._stream.handle
        first = self._read_line(handle, max_len)
        if not first:
            msg = f'No row could be read from the file stream "{self._stream.name}".'
            raise ReadError(msg)
        try:
            return _parse_record(
                self._decoded_lines(handle, first), delimiter, quote, escape
            )
        except ValueError as err:
            msg = f'The row could not be parsed from the file stream "{self._stream.name}".'
            raise ReadError(msg) from err

    def rows(
        self,
        delimiter: str = DEFAULT_DELIMITER,
        quote: str = DEFAULT_QUOTE,
        escape: str = DEFAULT_ESCAPE,
    ) -> Iterator[list[str]]:
        """Yield every remaining non-blank row until end-of-stream."""
        while not self._stream.eof():
            row = self.read_row(delimiter, quote, escape)
            if row is not None:
                yield row

    def write_row(
        self,
        fields: Iterable[object],
        delimiter: str = DEFAULT_DELIMITER,
        quote: str = DEFAULT_QUOTE,
        escape: str = DEFAULT_ESCAPE,
    ) -> int:
        """Serialize ``fields`` as one record terminated by ``\\n``.

        Non-string fields are converted with ``str()``; ``None`` becomes an
        empty field. An escape character inside a field is written as is,
        and a quote directly after it is not doubled.

        Returns:
            Number of bytes written.

        Raises:
            WriteError: If the row could not be serialized or written.
            ValueError: If ``delimiter``, ``quote`` or ``escape`` is not a
                single character (``escape`` may also be empty).
        """
        escape = _check_dialect(delimiter, quote, escape)
        buffer = io.StringIO()
        try:
            for index, value in enumerate(fields):
                if index:
                    _ = buffer.write(delimiter)
                _ = buffer.write(_format_field(value, delimiter, quote, escape))
        except TypeError as err:
            msg = f'The row could not be written to the file stream "{self._stream.name}".'
            raise WriteError(msg) from err
        _ = buffer.write("\n")
        return self._stream.write(buffer.getvalue().encode(self._encoding))

    def release(self) -> None:
        """Release the underlying stream."""
        self._stream.release()

    def __enter__(self) -> Self:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Release the stream unless it was released inside the block."""
        if not self._stream.released:
            self._stream.release()

    def _read_line(self, handle: BinaryIO, limit: int = 0) -> bytes:
        try:
            return handle.readline(limit if limit > 0 else -1)
        except OSError as err:
            msg = f'The file stream "{self._stream.name}" could not be read.'
            raise ReadError(msg) from err

    def _decoded_lines(self, handle: BinaryIO, first: bytes) -> Iterator[str]:
        # Continuation lines are only pulled while a quoted field is open.
        yield first.decode(self._encoding)
        while line := self._read_line(handle):
            yield line.decode(self._encoding)


def _check_dialect(delimiter: str, quote: str, escape: str) -> str:
    """Validate the dialect characters and return the effective escape."""
    if len(delimiter) != 1 or len(quote) != 1:
        msg = f"Delimiter and quote must be single characters: {delimiter!r}, {quote!r}"
        raise ValueError(msg)
    if len(escape) > 1:
        msg = f"Escape must be a single character or empty: {escape!r}"
        raise ValueError(msg)
    if delimiter == quote:
        msg = f"Delimiter and quote must differ: {delimiter!r}"
        raise ValueError(msg)
    # An escape equal to the quote is the doubled-quote rule already.
    return "" if escape == quote else escape


def _parse_record(
    lines: Iterator[str], delimiter: str, quote: str, escape: str
) -> list[str] | None:
    """Parse one record, pulling more lines only while a quote is open.

    Raises:
        ValueError: If the stream ends inside a quoted field, or a line
            could not be decoded.
    """
    line = next(lines)
    if not line.strip("\r\n"):
        return None

    fields: list[str] = []
    field: list[str] = []
    enclosed = False
    in_quotes = False
    escaped = False
    index = 0
    while True:
        if index >= len(line):
            if not in_quotes:
                break
            line = next(lines, None)
            if line is None:
                msg = "The stream ended inside a quoted field."
                raise ValueError(msg)
            index = 0
            continue
        char = line[index]
        index += 1

        if in_quotes:
            if escaped:
                escaped = False
                field.append(char)
            elif escape and char == escape:
                escaped = True
                field.append(char)
            elif char != quote:
                field.append(char)
            elif line.startswith(quote, index):
                field.append(quote)
                index += 1
            else:
                in_quotes = False
        elif char == delimiter:
            fields.append("".join(field))
            field = []
            enclosed = False
        elif char in "\r\n" and line[index:] in ("", "\n"):
            break
        elif char == quote and not field and not enclosed:
            in_quotes = enclosed = True
        else:
            field.append(char)

    fields.append("".join(field))
    return fields


def _format_field(value: object, delimiter: str, quote: str, escape: str) -> str:
    text = "" if value is None else str(value)
    specials = _ENCLOSE_CHARS | ({delimiter, quote, escape} - {""})
    if not any(char in specials for char in text):
        return text

    parts = [quote]
    escaped = False
    for char in text:
        if escape and char == escape:
            escaped = True
        elif not escaped and char == quote:
            parts.append(quote)
        else:
            escaped = False
        parts.append(char)
    parts.append(quote)
    return "".join(parts)
