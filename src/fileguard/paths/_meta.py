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

"""Getters and setters for path metadata."""

from __future__ import annotations

import os
import stat

from ..errors import PathError

__all__ = ["modified", "permissions"]


def modified(path: str | os.PathLike[str], time: float | None = None) -> float:
    """Return the last modified timestamp of ``path``, or set it to ``time``.

    Setting the timestamp also sets the access time, like ``touch``.

    Returns:
        The current (or newly set) timestamp in seconds since the epoch.

    Raises:
        PathError: If the path does not exist or the timestamp could not be
            read or set.
    """
    name = _require_existing(path)
    if time is None:
        try:
            return os.stat(name).st_mtime
        except OSError as err:
            msg = f'The last modified timestamp for the path "{name}" could not be read.'
            raise PathError(msg) from err
    try:
        os.utime(name, (time, time))
    except OSError as err:
        msg = f'The last modified timestamp for the path "{name}" could not be set to "{time}".'
        raise PathError(msg) from err
    return time


def permissions(path: str | os.PathLike[str], perms: int | None = None) -> int:
    """Return the permission bits of ``path``, or set them to ``perms``.

    Returns:
        The permission bits (``stat.S_IMODE``), e.g. ``0o644``.

    Raises:
        PathError: If the path does not exist or the permissions could not
            be read or set.
    """
    name = _require_existing(path)
    if perms is None:
        try:
            return stat.S_IMODE(os.stat(name).st_mode)
        except OSError as err:
            msg = f'The permissions for the path "{name}" could not be read.'
            raise PathError(msg) from err
    try:
        os.chmod(name, perms)
    except OSError as err:
        msg = f'The permissions for the path "{name}" could not be set to "{perms:o}".'
        raise PathError(msg) from err
    return perms


def _require_existing(path: str | os.PathLike[str]) -> str:
    name = os.fspath(path)
    if not os.path.exists(name):
        msg = f'The path "{name}" does not exist.'
        raise PathError(msg)
    return name
