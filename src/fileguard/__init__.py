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

"""Fail-fast file and stream I/O.

``fileguard`` wraps the file primitives (open, read, write, seek, lock,
iterate, copy, remove, resolve, temp creation) so that each one either
succeeds or raises a typed error from :mod:`fileguard.errors`.
"""

from __future__ import annotations

from .errors import (
    CursorError,
    FileguardError,
    LockError,
    PathError,
    ReadError,
    ResourceError,
    TempError,
    WriteError,
)
from .paths import (
    duplicate,
    modified,
    permissions,
    remove,
    resolve,
    temp_dir,
    temp_file,
    temp_path,
)
from .streams import CSVStream, Seek, Stream

__all__ = [
    "CSVStream",
    "CursorError",
    "FileguardError",
    "LockError",
    "PathError",
    "ReadError",
    "ResourceError",
    "Seek",
    "Stream",
    "TempError",
    "WriteError",
    "duplicate",
    "modified",
    "permissions",
    "remove",
    "resolve",
    "temp_dir",
    "temp_file",
    "temp_path",
]
