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

"""Shared constants and cursor modes for stream implementations."""

from __future__ import annotations

import os
from collections.abc import Iterator
from enum import IntEnum
from typing import Final, Protocol, runtime_checkable

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_DELIMITER",
    "DEFAULT_ENCODING",
    "DEFAULT_ESCAPE",
    "DEFAULT_QUOTE",
    "MEMORY_NAME",
    "READ_CHUNK_SIZE",
    "SIZE_CHUNK_SIZE",
    "ChunkSource",
    "Seek",
]

#: Default chunk size yielded by ``Stream.iterate`` and ``Stream.stream``.
DEFAULT_BUFFER_SIZE: Final[int] = 1024

#: Chunk size used when reading a stream to its end.
READ_CHUNK_SIZE: Final[int] = 1024

#: Chunk size used by ``Stream.size`` when counting bytes.
SIZE_CHUNK_SIZE: Final[int] = 8192

#: Display name of in-memory streams.
MEMORY_NAME: Final[str] = "<memory>"

DEFAULT_DELIMITER: Final[str] = ","
DEFAULT_QUOTE: Final[str] = '"'
DEFAULT_ESCAPE: Final[str] = "\\"
DEFAULT_ENCODING: Final[str] = "utf-8"


class Seek(IntEnum):
    """Cursor addressing modes accepted by ``Stream.seek``."""

    EXACT = os.SEEK_SET
    """Absolute offset from the start of the stream."""

    RELATIVE = os.SEEK_CUR
    """Offset relative to the current position."""

    RELATIVE_END = os.SEEK_END
    """Offset relative to the end of the stream."""


@runtime_checkable
class ChunkSource(Protocol):
    """Anything that can hand out its bytes as a lazy sequence of chunks.

    ``Stream.stream`` copies from any ``ChunkSource``; ``Stream`` itself is
    the canonical implementation.
    """

    def iterate(
        self, length: int = 0, buffer: int = DEFAULT_BUFFER_SIZE
    ) -> Iterator[bytes]:
        """Yield chunks of at most ``buffer`` bytes.

        Args:
            length: Exact number of bytes to produce. ``0`` means until
                end-of-stream.
            buffer: Maximum size of each chunk.
        """
        ...
