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

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from fileguard.streams import Stream

type FileFactory = Callable[[str, bytes], Path]


@pytest.fixture
def make_file(tmp_path: Path) -> FileFactory:
    """Return a factory writing ``content`` to ``name`` under ``tmp_path``."""

    def factory(name: str, content: bytes = b"") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_bytes(content)
        return path

    return factory


@pytest.fixture
def memory() -> Callable[[bytes], Stream]:
    """Return a factory for in-memory streams seeded with ``content``."""

    def factory(content: bytes = b"") -> Stream:
        return Stream.memory(content)

    return factory
