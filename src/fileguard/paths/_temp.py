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

"""Temporary path, file and directory creation.

Templates name the entry inside the temporary directory and must contain the
placeholder exactly once, for example ``"upload-%s.bin"``. The placeholder is
replaced with a random hex token.
"""

from __future__ import annotations

import os
import tempfile
from typing import Final
from uuid import uuid4

from ..errors import TempError
from ..logging import StructuredLogger, get_logger

__all__ = [
    "DEFAULT_TEMP_TEMPLATE",
    "TEMP_PLACEHOLDER",
    "temp_dir",
    "temp_file",
    "temp_path",
]

_logger: StructuredLogger = get_logger(__name__, context={"component": "paths"})

#: Token replaced with a random hex string in temp templates.
TEMP_PLACEHOLDER: Final[str] = "%s"

#: Template used when none is given.
DEFAULT_TEMP_TEMPLATE: Final[str] = "tmp-%s"

_MAX_ATTEMPTS: Final[int] = 100


def temp_path(
    template: str | None = None, directory: str | os.PathLike[str] | None = None
) -> str:
    """Generate a unique path that does not exist yet, without creating it.

    Args:
        template: Entry name containing :data:`TEMP_PLACEHOLDER` once.
            Defaults to :data:`DEFAULT_TEMP_TEMPLATE`.
        directory: Parent directory. Defaults to ``tempfile.gettempdir()``.

    Raises:
        TempError: If ``directory`` does not exist or is not writable, the
            template does not contain the placeholder exactly once, or no
            unused name was found.
    """
    if template is None:
        template = DEFAULT_TEMP_TEMPLATE
    if template.count(TEMP_PLACEHOLDER) != 1:
        msg = f'The template "{template}" must contain "{TEMP_PLACEHOLDER}" exactly once.'
        raise TempError(msg)

    if directory is None:
        parent = tempfile.gettempdir()
    else:
        parent = os.fspath(directory)
        if not os.path.isdir(parent) or not os.access(parent, os.W_OK):
            msg = f'The directory "{parent}" does not exist or is not writable.'
            raise TempError(msg)

    for _ in range(_MAX_ATTEMPTS):
        candidate = os.path.join(
            parent, template.replace(TEMP_PLACEHOLDER, uuid4().hex)
        )
        if not os.path.lexists(candidate):
            return candidate

    msg = f'No unused temporary path could be generated in "{parent}" from "{template}".'
    raise TempError(msg)


def temp_dir(
    template: str | None = None, directory: str | os.PathLike[str] | None = None
) -> str:
    """Create a new, empty temporary directory and return its path.

    Raises:
        TempError: If the path could not be generated or the directory
            could not be created.
    """
    path = temp_path(template, directory)
    try:
        os.mkdir(path)
    except OSError as err:
        msg = f'The temporary directory "{path}" could not be created.'
        raise TempError(msg) from err
    _logger.debug(
        "Created temporary directory.", event="temp.created", context={"path": path}
    )
    return path


def temp_file(
    template: str | None = None, directory: str | os.PathLike[str] | None = None
) -> str:
    """Create a new, empty temporary file and return its path.

    Raises:
        TempError: If the path could not be generated or the file could not
            be created.
    """
    path = temp_path(template, directory)
    try:
        descriptor = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
    except OSError as err:
        msg = f'The temporary file "{path}" could not be created.'
        raise TempError(msg) from err
    os.close(descriptor)
    _logger.debug(
        "Created temporary file.", event="temp.created", context={"path": path}
    )
    return path
