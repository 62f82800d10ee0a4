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

"""Recursive tree operations: remove, duplicate and symlink resolution.

None of these operations is atomic. A failure part way through a walk
leaves the tree partially removed or partially copied, and the error names
the exact path that could not be processed.
"""

from __future__ import annotations

import os
import shutil
from typing import Final

from ..errors import PathError
from ..logging import StructuredLogger, get_logger

__all__ = ["UNLIMITED_DEPTH", "duplicate", "remove", "resolve"]

_logger: StructuredLogger = get_logger(__name__, context={"component": "paths"})

#: Depth value telling ``duplicate`` to copy the whole tree.
UNLIMITED_DEPTH: Final[int] = -1

_MAX_LINK_HOPS: Final[int] = 40


def remove(path: str | os.PathLike[str], follow_symlinks: bool = False) -> None:
    """Remove a file, or a directory and everything below it.

    Children are removed depth-first before their directory. A symbolic
    link to a directory is unlinked without touching its target unless
    ``follow_symlinks`` is true, in which case the target's contents are
    removed first and then the link itself.

    Raises:
        PathError: If any path in the tree could not be removed.
    """
    name = os.fspath(path)
    link = os.path.islink(name)

    if os.path.isdir(name) and (not link or follow_symlinks):
        try:
            children = os.listdir(name)
        except OSError as err:
            msg = f'The directory "{name}" could not be opened.'
            raise PathError(msg) from err

        last: str | None = None
        for child in children:
            last = os.path.join(name, child)
            remove(last, follow_symlinks)

        if link:
            _unlink(name)
            return
        try:
            os.rmdir(name)
        except OSError as err:
            hint = "" if last is None else f' The path "{last}" was probably not deleted.'
            msg = f'The directory "{name}" could not be removed.{hint}'
            raise PathError(msg) from err
        _logger.debug(
            "Removed directory.", event="path.removed", context={"path": name}
        )
        return

    _unlink(name)


def duplicate(
    source: str | os.PathLike[str],
    target: str | os.PathLike[str],
    overwrite: bool = True,
    depth: int = UNLIMITED_DEPTH,
) -> None:
    """Recursively copy ``source`` to ``target``.

    ``depth`` limits how many levels are visited: ``0`` does nothing, a
    negative value is unlimited, and each level below ``source`` consumes
    one. Directories are created before their children are copied. Files
    are copied when ``overwrite`` is true or ``target`` does not exist yet;
    an existing target is otherwise left untouched.

    Raises:
        PathError: If ``source`` does not exist, the parent of ``target`` is
            missing, ``target`` lies inside the ``source`` directory, or a
            directory or file could not be created or copied.
    """
    if depth == 0:
        return

    source_name = os.fspath(source)
    target_name = os.fspath(target)

    if not os.path.exists(source_name):
        msg = f'The path "{source_name}" does not exist.'
        raise PathError(msg)

    parent = os.path.dirname(os.path.abspath(target_name))
    if not os.path.isdir(parent):
        msg = f'The parent directory "{parent}" of "{target_name}" does not exist.'
        raise PathError(msg)

    next_depth = depth - 1 if depth > 0 else depth

    if os.path.isdir(source_name):
        source_real = os.path.realpath(source_name)
        if os.path.commonpath([source_real, os.path.realpath(target_name)]) == source_real:
            msg = f'The directory "{source_name}" cannot be copied into itself ("{target_name}").'
            raise PathError(msg)
        if not os.path.isdir(target_name):
            try:
                os.mkdir(target_name)
            except OSError as err:
                msg = f'The directory "{target_name}" could not be created.'
                raise PathError(msg) from err
        try:
            children = os.listdir(source_name)
        except OSError as err:
            msg = f'The directory "{source_name}" could not be opened.'
            raise PathError(msg) from err
        for child in children:
            duplicate(
                os.path.join(source_name, child),
                os.path.join(target_name, child),
                overwrite,
                next_depth,
            )
        return

    if not overwrite and os.path.lexists(target_name):
        return

    try:
        _ = shutil.copyfile(source_name, target_name)
    except OSError as err:
        msg = f'The path "{source_name}" could not be copied to "{target_name}".'
        raise PathError(msg) from err
    _logger.debug(
        "Copied file.",
        event="path.duplicated",
        context={"source": source_name, "target": target_name},
    )


def resolve(link: str | os.PathLike[str], recursive: bool = True) -> str:
    """Return the target of a symbolic link.

    With ``recursive`` the chain is followed until the result is not a
    symbolic link; otherwise only one level is followed. The final target
    is not required to exist. Relative targets are joined to the directory
    of the link that holds them.

    Raises:
        PathError: If ``link`` is not a symbolic link, a link could not be
            read, or the chain loops back on itself.
    """
    name = os.fspath(link)
    if not os.path.islink(name):
        msg = f'The path "{name}" is not a symbolic link.'
        raise PathError(msg)

    current = name
    for _ in range(_MAX_LINK_HOPS):
        try:
            target = os.readlink(current)
        except OSError as err:
            msg = f'The symbolic link "{current}" for "{name}" could not be resolved.'
            raise PathError(msg) from err
        current = os.path.join(os.path.dirname(current), target)
        if not recursive or not os.path.islink(current):
            return current

    msg = f'The symbolic link "{name}" has more than {_MAX_LINK_HOPS} levels of indirection.'
    raise PathError(msg)


def _unlink(name: str) -> None:
    try:
        os.unlink(name)
    except OSError as err:
        msg = f'The path "{name}" could not be removed.'
        raise PathError(msg) from err
    _logger.debug("Removed path.", event="path.removed", context={"path": name})
