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

"""Tests for remove, duplicate and resolve."""

from __future__ import annotations

import os
import re
from pathlib import Path
from unittest.mock import patch

import pytest

from fileguard.errors import PathError
from fileguard.paths import duplicate, remove, resolve


def _tree(root: Path) -> Path:
    """Create ``root/sub/dir/file`` and return ``root``."""
    (root / "sub" / "dir").mkdir(parents=True)
    _ = (root / "sub" / "dir" / "file").write_text("leaf")
    _ = (root / "top.txt").write_text("top")
    return root


class TestRemove:
    """Tests for remove()."""

    def test_removes_file(self, tmp_path: Path) -> None:
        """A plain file is unlinked."""
        path = tmp_path / "file.txt"
        _ = path.write_text("data")
        remove(path)
        assert not path.exists()

    def test_removes_directory_tree(self, tmp_path: Path) -> None:
        """A directory is removed together with every descendant."""
        root = _tree(tmp_path / "root")
        remove(str(root))
        assert not root.exists()

    def test_missing_path_raises(self, tmp_path: Path) -> None:
        """Removing a path that does not exist names the path."""
        path = tmp_path / "does" / "not" / "exist"
        with pytest.raises(PathError, match=re.escape(f'"{path}" could not be removed')):
            remove(path)

    def test_symlinked_directory_is_not_followed(self, tmp_path: Path) -> None:
        """Only the link goes; the linked directory keeps its contents."""
        target = tmp_path / "target"
        target.mkdir()
        _ = (target / "test").write_text("keep")
        link = tmp_path / "link"
        link.symlink_to(target, target_is_directory=True)

        remove(link)

        assert not link.is_symlink()
        assert (target / "test").exists()

    def test_symlinked_directory_is_followed(self, tmp_path: Path) -> None:
        """With follow_symlinks the target's contents go too."""
        target = tmp_path / "target"
        target.mkdir()
        _ = (target / "test").write_text("gone")
        link = tmp_path / "link"
        link.symlink_to(target, target_is_directory=True)

        remove(link, follow_symlinks=True)

        assert not link.is_symlink()
        assert not (target / "test").exists()
        assert target.is_dir()

    def test_symlink_to_file_is_unlinked(self, tmp_path: Path) -> None:
        """A link to a file is removed without touching the file."""
        target = tmp_path / "target.txt"
        _ = target.write_text("keep")
        link = tmp_path / "link.txt"
        link.symlink_to(target)

        remove(link)

        assert not link.is_symlink()
        assert target.exists()

    def test_directory_failure_names_last_child(self, tmp_path: Path) -> None:
        """A failed rmdir names the directory and the last child visited."""
        root = tmp_path / "root"
        root.mkdir()
        _ = (root / "child").write_text("x")

        with (
            patch("fileguard.paths._tree.os.rmdir", side_effect=OSError("busy")),
            pytest.raises(PathError, match="was probably not deleted") as info,
        ):
            remove(root)

        assert f'"{root}" could not be removed' in str(info.value)
        assert str(root / "child") in str(info.value)

    def test_unreadable_directory_raises(self, tmp_path: Path) -> None:
        """A directory that cannot be listed is a PathError."""
        root = tmp_path / "root"
        root.mkdir()
        with (
            patch("fileguard.paths._tree.os.listdir", side_effect=OSError("denied")),
            pytest.raises(PathError, match="could not be opened"),
        ):
            remove(root)


class TestDuplicate:
    """Tests for duplicate()."""

    def test_copies_tree_recursively(self, tmp_path: Path) -> None:
        """Every level of the tree is copied."""
        source = _tree(tmp_path / "a")
        target = tmp_path / "b"

        duplicate(source, target)

        assert (target / "sub" / "dir" / "file").read_text() == "leaf"
        assert (target / "top.txt").read_text() == "top"

    def test_copy_into_own_subtree_raises(self, tmp_path: Path) -> None:
        """A target inside the source tree is refused before anything is made."""
        source = _tree(tmp_path / "a")
        target = source / "copy"

        with pytest.raises(PathError, match="cannot be copied into itself"):
            duplicate(source, target)

        assert not target.exists()

    def test_copy_onto_itself_raises(self, tmp_path: Path) -> None:
        """Duplicating a directory onto its own path is refused."""
        source = _tree(tmp_path / "a")

        with pytest.raises(PathError, match="cannot be copied into itself"):
            duplicate(source, source)

    def test_sibling_sharing_prefix_is_allowed(self, tmp_path: Path) -> None:
        """Only real containment counts, not a shared name prefix."""
        source = _tree(tmp_path / "a")
        target = tmp_path / "ab"

        duplicate(source, target)

        assert (target / "sub" / "dir" / "file").read_text() == "leaf"

    def test_depth_limits_copy(self, tmp_path: Path) -> None:
        """Each level consumes one unit of depth."""
        source = _tree(tmp_path / "a")
        target = tmp_path / "b"

        duplicate(source, target, depth=3)

        assert (target / "sub" / "dir").is_dir()
        assert not (target / "sub" / "dir" / "file").exists()

    def test_depth_one_copies_top_entry_only(self, tmp_path: Path) -> None:
        """Depth 1 creates the top directory but nothing below it."""
        source = _tree(tmp_path / "a")
        target = tmp_path / "b"

        duplicate(source, target, depth=1)

        assert target.is_dir()
        assert list(target.iterdir()) == []

    def test_depth_zero_is_noop(self, tmp_path: Path) -> None:
        """Depth 0 copies nothing at all."""
        source = _tree(tmp_path / "a")
        target = tmp_path / "b"

        duplicate(source, target, depth=0)

        assert not target.exists()

    def test_copies_into_existing_directory(self, tmp_path: Path) -> None:
        """An existing destination directory is reused."""
        source = _tree(tmp_path / "a")
        target = tmp_path / "b"
        target.mkdir()
        _ = (target / "other").write_text("stays")

        duplicate(source, target)

        assert (target / "other").read_text() == "stays"
        assert (target / "top.txt").exists()

    def test_copies_file(self, tmp_path: Path) -> None:
        """A file is copied over an existing destination by default."""
        source = tmp_path / "a.txt"
        _ = source.write_text("new")
        target = tmp_path / "b.txt"
        _ = target.write_text("old")

        duplicate(source, target)

        assert target.read_text() == "new"

    def test_overwrite_false_leaves_destination(self, tmp_path: Path) -> None:
        """Without overwrite an existing file keeps content and mtime."""
        source = tmp_path / "a.txt"
        _ = source.write_text("new")
        target = tmp_path / "b.txt"
        _ = target.write_text("old")
        os.utime(target, (1_000_000, 1_000_000))

        duplicate(source, target, overwrite=False)

        assert target.read_text() == "old"
        assert target.stat().st_mtime == 1_000_000

    def test_overwrite_false_still_copies_missing_files(self, tmp_path: Path) -> None:
        """Without overwrite, absent files are still copied."""
        source = _tree(tmp_path / "a")
        target = tmp_path / "b"

        duplicate(source, target, overwrite=False)

        assert (target / "sub" / "dir" / "file").exists()

    def test_missing_parent_raises(self, tmp_path: Path) -> None:
        """The destination's parent directory must already exist."""
        source = tmp_path / "a.txt"
        _ = source.write_text("data")
        target = tmp_path / "missing" / "b.txt"

        with pytest.raises(PathError, match="parent directory"):
            duplicate(source, target)

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        """A source that does not exist is a PathError."""
        with pytest.raises(PathError, match="does not exist"):
            duplicate(tmp_path / "nope", tmp_path / "b")

    def test_copy_failure_names_both_paths(self, tmp_path: Path) -> None:
        """A failed file copy names source and destination."""
        source = tmp_path / "a.txt"
        _ = source.write_text("data")
        target = tmp_path / "b.txt"

        with (
            patch(
                "fileguard.paths._tree.shutil.copyfile",
                side_effect=OSError("disk full"),
            ),
            pytest.raises(PathError, match="could not be copied") as info,
        ):
            duplicate(source, target)

        assert str(source) in str(info.value)
        assert str(target) in str(info.value)

    def test_directory_create_failure_raises(self, tmp_path: Path) -> None:
        """A destination directory that cannot be created is a PathError."""
        source = _tree(tmp_path / "a")
        with (
            patch("fileguard.paths._tree.os.mkdir", side_effect=OSError("denied")),
            pytest.raises(PathError, match="could not be created"),
        ):
            duplicate(source, tmp_path / "b")


class TestResolve:
    """Tests for resolve()."""

    @pytest.fixture
    def chain(self, tmp_path: Path) -> tuple[Path, Path, Path]:
        """Create ``c -> b -> a`` with absolute link targets."""
        a = tmp_path / "a"
        _ = a.write_text("real")
        b = tmp_path / "b"
        b.symlink_to(a)
        c = tmp_path / "c"
        c.symlink_to(b)
        return a, b, c

    def test_recursive_resolution(self, chain: tuple[Path, Path, Path]) -> None:
        """The chain is followed to the first non-link."""
        a, _, c = chain
        assert resolve(c) == str(a)

    def test_single_level_resolution(self, chain: tuple[Path, Path, Path]) -> None:
        """Without recursion only one level is followed."""
        _, b, c = chain
        assert resolve(c, recursive=False) == str(b)

    def test_non_link_raises(self, tmp_path: Path) -> None:
        """A path that is not a symbolic link is a PathError."""
        path = tmp_path / "plain"
        _ = path.write_text("x")
        with pytest.raises(PathError, match=re.escape(f'"{path}" is not a symbolic link')):
            resolve(path)

    def test_missing_path_raises(self) -> None:
        """A missing path is not a symbolic link either."""
        with pytest.raises(PathError, match="is not a symbolic link"):
            resolve("/does/not/exist")

    def test_relative_target_joined_to_link_directory(self, tmp_path: Path) -> None:
        """Relative targets resolve against the link's directory."""
        (tmp_path / "nested").mkdir()
        link = tmp_path / "nested" / "link"
        link.symlink_to("target.txt")
        assert resolve(link) == str(tmp_path / "nested" / "target.txt")

    def test_dangling_target_is_returned(self, tmp_path: Path) -> None:
        """The final target need not exist."""
        link = tmp_path / "dangling"
        link.symlink_to(tmp_path / "missing")
        assert resolve(link) == str(tmp_path / "missing")

    def test_cycle_raises(self, tmp_path: Path) -> None:
        """A loop of links is reported instead of followed forever."""
        x = tmp_path / "x"
        y = tmp_path / "y"
        x.symlink_to(y)
        y.symlink_to(x)
        with pytest.raises(PathError, match="levels of indirection"):
            resolve(x)

    def test_unreadable_link_raises(self, tmp_path: Path) -> None:
        """A link that cannot be read is a PathError."""
        link = tmp_path / "link"
        link.symlink_to(tmp_path / "target")
        with (
            patch("fileguard.paths._tree.os.readlink", side_effect=OSError("io")),
            pytest.raises(PathError, match="could not be resolved"),
        ):
            resolve(link)
