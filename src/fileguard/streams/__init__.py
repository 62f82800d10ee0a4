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

"""Exception-raising byte streams over files and in-memory buffers.

Every operation either succeeds or raises a typed error from
:mod:`fileguard.errors`; none returns a sentinel failure value.

Example usage::

    from fileguard.streams import CSVStream, Stream

    with Stream.memory(b"hello world") as stream:
        assert stream.read(5) == b"hello"

    with CSVStream.open("rows.csv", "w+") as rows:
        rows.write_row(["a", "beta test", 123])
"""

from __future__ import annotations

from ._csv import CSVStream
from ._stream import Stream
from ._types import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_DELIMITER,
    DEFAULT_ENCODING,
    DEFAULT_ESCAPE,
    DEFAULT_QUOTE,
    MEMORY_NAME,
    READ_CHUNK_SIZE,
    SIZE_CHUNK_SIZE,
    ChunkSource,
    Seek,
)

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_DELIMITER",
    "DEFAULT_ENCODING",
    "DEFAULT_ESCAPE",
    "DEFAULT_QUOTE",
    "MEMORY_NAME",
    "READ_CHUNK_SIZE",
    "SIZE_CHUNK_SIZE",
    "CSVStream",
    "ChunkSource",
    "Seek",
    "Stream",
]
