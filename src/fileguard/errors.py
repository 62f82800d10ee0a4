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

"""Base exception hierarchy for :mod:`fileguard`."""

from __future__ import annotations


class FileguardError(Exception):
    """Base class for all fileguard exceptions.

    Every wrapped operation either succeeds or raises one of the subclasses
    below; none of them returns a sentinel failure value. Catching this class
    catches any library-specific failure while letting unrelated exceptions
    propagate normally.

    Example:
        Catch any fileguard-specific error::

            try:
                with Stream.open("/var/data/report.bin", "r") as stream:
                    payload = stream.read(16)
            except FileguardError as e:
                logger.error("File operation failed: %s", e)

    Note:
        Subclasses also inherit from :class:`OSError`, so handlers written
        for standard I/O failures keep working.
    """


class PathError(FileguardError, OSError):
    """Raised when a path-level operation fails.

    Covers paths that do not exist and failures of ``remove``,
    ``duplicate``, ``resolve``, ``modified`` and ``permissions``. The message
    names the exact path that could not be processed.
    """


class TempError(PathError):
    """Raised when a temporary path, file or directory cannot be produced.

    Common causes:
        - The template lacks exactly one placeholder
        - The parent directory does not exist or is not writable
        - The directory or file could not be created
    """


class ResourceError(FileguardError, OSError):
    """Raised when the underlying handle cannot be opened or released.

    Also raised for any operation on a stream that was already released,
    including a second call to ``release()``.
    """


class ReadError(FileguardError, OSError):
    """Raised when a read does not return the expected data.

    The message reports how many bytes were read against how many were
    requested when the stream ended early.
    """


class WriteError(FileguardError, OSError):
    """Raised when a write does not commit the expected byte count."""


class CursorError(FileguardError, OSError):
    """Raised when the cursor cannot be moved or its position determined."""


class LockError(FileguardError, OSError):
    """Raised when an advisory lock is unsupported or cannot be changed.

    Non-blocking acquisition raises immediately when another handle holds a
    conflicting lock.
    """


__all__ = [
    "CursorError",
    "FileguardError",
    "LockError",
    "PathError",
    "ReadError",
    "ResourceError",
    "TempError",
    "WriteError",
]
