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

"""Exception-raising wrapper around a single open binary handle.

``Stream`` owns exactly one handle, either a file on the host filesystem
(:meth:`Stream.open`) or an ``io.BytesIO`` buffer (:meth:`Stream.memory`).
Every operation converts the failure of the underlying call into one of the
errors from :mod:`fileguard.errors` at the point it is detected.

Example usage::

    from fileguard.streams import Seek, Stream

    with Stream.open("/tmp/data.bin", "w+") as stream:
        stream.write(b"hello world")
        stream.seek(0)
        assert stream.read(5) == b"hello"

        for chunk in stream.iterate(buffer=2):
            process(chunk)
"""

from __future__ import annotations

import fcntl
import io
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import BinaryIO, Self

from ..errors import CursorError, LockError, ReadError, ResourceError, WriteError
from ..logging import StructuredLogger, get_logger
from ._types import (
    DEFAULT_BUFFER_SIZE,
    MEMORY_NAME,
    READ_CHUNK_SIZE,
    SIZE_CHUNK_SIZE,
    ChunkSource,
    Seek,
)

__all__ = ["Stream"]

_logger: StructuredLogger = get_logger(__name__, context={"component": "streams"})

_CREATE_MODES = frozenset({"c", "c+"})


@dataclass(slots=True)
class Stream:
    """Exclusive owner of one open binary handle.

    Once :meth:`release` has been called the stream is unusable: every
    further operation, including a second ``release()``, raises
    :class:`~fileguard.errors.ResourceError`. Using the stream as a context
    manager releases it on exit unless it was released earlier.

    Streams created with ``append=True`` (or opened in an ``a`` mode) always
    write at the end regardless of where the cursor was moved for reading.
    """

    _handle: BinaryIO | None = field(repr=False)
    _name: str
    _mode: str
    _append: bool = False

    @classmethod
    def open(cls, path: str | os.PathLike[str], mode: str) -> Stream:
        """Open a file on the host filesystem.

        ``mode`` follows ``fopen`` conventions: ``r``, ``r+``, ``w``, ``w+``,
        ``a``, ``a+``, ``x``, ``x+`` and ``c``, ``c+`` (create if missing,
        never truncate). Binary mode is implied; a trailing ``b`` is accepted.

        Raises:
            ResourceError: If the file could not be opened in ``mode``.
        """
        name = os.fspath(path)
        try:
            handle = _open_handle(name, mode)
        except (OSError, ValueError) as err:
            msg = f'The file "{name}" could not be opened ({mode}).'
            raise ResourceError(msg) from err
        _logger.debug(
            "Opened file stream.",
            event="stream.opened",
            context={"path": name, "mode": mode},
        )
        return cls(_handle=handle, _name=name, _mode=mode)

    @classmethod
    def memory(cls, content: bytes | str = b"", *, append: bool = False) -> Stream:
        """Create a stream backed by an in-memory buffer.

        Without ``append`` the content is written and the cursor reset to the
        start, so it can be read back immediately. With ``append`` the
        content is seeded, the cursor stays at the end and every later write
        is appended. ``str`` content is encoded as UTF-8.

        Raises:
            ResourceError: If the buffer could not be allocated.
        """
        payload = content.encode() if isinstance(content, str) else content
        try:
            handle = io.BytesIO()
        except MemoryError as err:
            msg = "A new in-memory file stream could not be created."
            raise ResourceError(msg) from err
        stream = cls(
            _handle=handle,
            _name=MEMORY_NAME,
            _mode="a+" if append else "w+",
            _append=append,
        )
        if payload:
            _ = stream.write(payload)
        if not append:
            _ = stream.seek(0)
        return stream

    @property
    def name(self) -> str:
        """Path of the file, or ``<memory>`` for in-memory streams."""
        return self._name

    @property
    def mode(self) -> str:
        """Mode the stream was opened with."""
        return self._mode

    @property
    def released(self) -> bool:
        """True once the handle has been released."""
        return self._handle is None

    @property
    def seekable(self) -> bool:
        """True if the cursor can be moved."""
        return self._handle is not None and self._handle.seekable()

    @property
    def lockable(self) -> bool:
        """True if the handle is backed by a descriptor that supports flock."""
        if self._handle is None:
            return False
        try:
            _ = self._handle.fileno()
        except OSError:
            return False
        return True

    @property
    def handle(self) -> BinaryIO:
        """The underlying handle.

        Raises:
            ResourceError: If the stream has been released.
        """
        return self._require_handle()

    def read(self, length: int = 0) -> bytes:
        """Read exactly ``length`` bytes, or everything left when ``length`` is 0.

        Raises:
            ReadError: If the stream ended before ``length`` bytes were read.
            ValueError: If ``length`` is negative.
        """
        if length < 0:
            msg = f"Cannot read a negative number of bytes: {length}"
            raise ValueError(msg)
        if length == 0:
            return b"".join(self._iterate_all(READ_CHUNK_SIZE))
        data = self._read_chunk(length)
        if len(data) != length:
            msg = f"Only {len(data)} of {length} bytes could be read from the file stream."
            raise ReadError(msg)
        return data

    def write(self, data: bytes) -> int:
        """Write all of ``data`` and flush it to the handle.

        Returns:
            Number of bytes written.

        Raises:
            WriteError: If the write failed or was partial.
        """
        handle = self._require_handle()
        expected = len(data)
        try:
            if self._append:
                _ = handle.seek(0, os.SEEK_END)
            written = handle.write(data) or 0
            handle.flush()
        except OSError as err:
            msg = f"The {expected} bytes could not be written to the file stream."
            raise WriteError(msg) from err
        if written != expected:
            msg = f"Only {written} of {expected} bytes could be written to the file stream."
            raise WriteError(msg)
        return written

    def seek(self, position: int, mode: Seek | int = Seek.EXACT) -> int:
        """Move the cursor and return the new absolute offset.

        Raises:
            CursorError: If the cursor could not be moved.
            ValueError: If ``mode`` is not a :class:`Seek` value.
        """
        handle = self._require_handle()
        whence = Seek(mode)
        try:
            return handle.seek(position, whence)
        except (OSError, ValueError) as err:
            msg = (
                "The internal cursor for the file stream could not be moved "
                f"to {position} ({whence.name})."
            )
            raise CursorError(msg) from err

    def tell(self) -> int:
        """Return the current cursor offset.

        Raises:
            CursorError: If the position could not be determined.
        """
        handle = self._require_handle()
        try:
            return handle.tell()
        except OSError as err:
            msg = "The internal cursor position for the file stream could not be determined."
            raise CursorError(msg) from err

    def eof(self) -> bool:
        """Return True if no more bytes can be read.

        Checks by reading one byte and seeking back over it when one was
        returned. The check is not atomic with respect to other writers.

        Raises:
            CursorError: If the one-byte read or the seek back failed.
        """
        handle = self._require_handle()
        try:
            peeked = handle.read(1)
        except OSError as err:
            msg = "The file stream could not be read to trigger an end-of-stream check."
            raise CursorError(msg) from err
        if not peeked:
            return True
        _ = self.seek(-1, Seek.RELATIVE)
        return False

    def size(self) -> int:
        """Count the bytes in the stream by reading it from the start.

        Works for streams without filesystem metadata. Leaves the cursor at
        the end of the stream.

        Raises:
            CursorError: If the cursor could not be rewound.
            ReadError: If the stream could not be read.
        """
        _ = self.seek(0)
        return sum(len(chunk) for chunk in self._iterate_all(SIZE_CHUNK_SIZE))

    def iterate(
        self, length: int = 0, buffer: int = DEFAULT_BUFFER_SIZE
    ) -> Iterator[bytes]:
        """Lazily yield chunks of at most ``buffer`` bytes from the cursor.

        With ``length == 0`` chunks are produced until end-of-stream.
        Otherwise exactly ``length`` bytes are produced, the last request
        shrunk so it does not overshoot.

        Each call returns an independent iterator that advances this
        stream's cursor as it is consumed; it cannot be restarted.

        Raises:
            ReadError: While iterating, if the stream ends before ``length``
                bytes were produced.
            ValueError: If ``length`` is negative or ``buffer`` is not positive.
        """
        if length < 0:
            msg = f"Cannot iterate a negative number of bytes: {length}"
            raise ValueError(msg)
        if buffer < 1:
            msg = f"Buffer size must be positive: {buffer}"
            raise ValueError(msg)
        _ = self._require_handle()
        if length == 0:
            return self._iterate_all(buffer)
        return self._iterate_length(length, buffer)

    def __iter__(self) -> Iterator[bytes]:
        """Iterate over chunks of the default size until end-of-stream."""
        return self.iterate()

    def stream(
        self, source: ChunkSource, length: int = 0, buffer: int = DEFAULT_BUFFER_SIZE
    ) -> int:
        """Copy chunks from ``source.iterate(length, buffer)`` into this stream.

        Returns:
            Total number of bytes written.
        """
        total = 0
        for chunk in source.iterate(length, buffer):
            total += self.write(chunk)
        return total

    def lock(self, exclusive: bool = False, non_blocking: bool = False) -> None:
        """Acquire an advisory lock on the handle.

        Args:
            exclusive: Take an exclusive lock instead of a shared one.
            non_blocking: Fail immediately instead of waiting for a
                conflicting lock to be released.

        Raises:
            LockError: If locking is unsupported or the lock was not acquired.
        """
        descriptor = self._require_descriptor()
        operation = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        if non_blocking:
            operation |= fcntl.LOCK_NB
        try:
            fcntl.flock(descriptor, operation)
        except OSError as err:
            kind = "exclusive" if exclusive else "shared"
            msg = f'The file stream "{self._name}" could not be locked ({kind}).'
            raise LockError(msg) from err
        _logger.debug(
            "Locked file stream.",
            event="stream.locked",
            context={
                "path": self._name,
                "exclusive": exclusive,
                "non_blocking": non_blocking,
            },
        )

    def unlock(self) -> None:
        """Release the advisory lock held on the handle.

        Raises:
            LockError: If locking is unsupported or the lock was not released.
        """
        descriptor = self._require_descriptor()
        try:
            fcntl.flock(descriptor, fcntl.LOCK_UN)
        except OSError as err:
            msg = f'The file stream "{self._name}" could not be unlocked.'
            raise LockError(msg) from err
        _logger.debug(
            "Unlocked file stream.",
            event="stream.unlocked",
            context={"path": self._name},
        )

    def release(self) -> None:
        """Close the underlying handle.

        Raises:
            ResourceError: If the stream was already released or the handle
                could not be closed.
        """
        handle = self._require_handle()
        self._handle = None
        try:
            handle.close()
        except OSError as err:
            msg = f'The file stream "{self._name}" could not be closed.'
            raise ResourceError(msg) from err
        _logger.debug(
            "Released file stream.",
            event="stream.released",
            context={"path": self._name},
        )

    def __enter__(self) -> Self:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Release the handle unless it was released inside the block."""
        if self._handle is not None:
            self.release()

    def _require_handle(self) -> BinaryIO:
        if self._handle is None:
            msg = f'The file stream "{self._name}" is no longer available.'
            raise ResourceError(msg)
        return self._handle

    def _require_descriptor(self) -> int:
        handle = self._require_handle()
        if not self.lockable:
            msg = f'The file stream "{self._name}" does not support locking.'
            raise LockError(msg)
        return handle.fileno()

    def _read_chunk(self, size: int) -> bytes:
        handle = self._require_handle()
        try:
            return handle.read(size) or b""
        except OSError as err:
            msg = f'The file stream "{self._name}" could not be read.'
            raise ReadError(msg) from err

    def _iterate_all(self, buffer: int) -> Iterator[bytes]:
        while chunk := self._read_chunk(buffer):
            yield chunk

    def _iterate_length(self, length: int, buffer: int) -> Iterator[bytes]:
        remaining = length
        while remaining > 0:
            chunk = self._read_chunk(min(buffer, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk
        if remaining:
            msg = (
                f"Only {length - remaining} of {length} bytes could be iterated "
                "through the file stream."
            )
            raise ReadError(msg)


def _open_handle(path: str, mode: str) -> BinaryIO:
    """Open ``path`` in binary ``mode``, adding the ``c`` modes open() lacks."""
    base = mode.replace("b", "")
    if base in _CREATE_MODES:
        flags = os.O_CREAT | (os.O_RDWR if base == "c+" else os.O_WRONLY)
        descriptor = os.open(path, flags, 0o666)
        try:
            return os.fdopen(descriptor, "r+b" if base == "c+" else "wb")
        except BaseException:
            os.close(descriptor)
            raise
    return open(path, base + "b")  # noqa: SIM115
