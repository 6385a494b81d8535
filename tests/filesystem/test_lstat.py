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

"""Tests for lstat emulation by parent directory scanning."""

from __future__ import annotations

import errno
import stat
from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from linkfs import (
    DirEntry,
    File,
    FileInfo,
    InvalidPathError,
    MapFile,
    MapFilesystem,
    NotFoundError,
    PathError,
    UnsupportedError,
    lstat,
)
from linkfs import stat as fs_stat

LINK_MODE = stat.S_IFLNK | 0o666


@dataclass
class _ScriptedDir:
    """Directory handle serving ``entries`` in batches, optionally failing."""

    entries: list[DirEntry]
    fail_after: int | None = None
    error: Exception | None = None
    requests: list[int] = field(default_factory=list)
    closed: bool = False
    _offset: int = 0

    def stat(self) -> FileInfo:
        return FileInfo(name=".", mode=stat.S_IFDIR | 0o755)

    def read(self, size: int = -1) -> bytes:
        raise InvalidPathError("read", ".", "is a directory")

    def read_dir(self, count: int = -1) -> Sequence[DirEntry]:
        self.requests.append(count)
        if self.fail_after is not None and len(self.requests) > self.fail_after:
            assert self.error is not None
            raise self.error
        batch = self.entries[self._offset : self._offset + count]
        self._offset += len(batch)
        return batch

    def close(self) -> None:
        self.closed = True


@dataclass
class _PlainFile:
    closed: bool = False

    def stat(self) -> FileInfo:
        return FileInfo(name="x", mode=stat.S_IFDIR | 0o755)

    def read(self, size: int = -1) -> bytes:
        return b""

    def close(self) -> None:
        self.closed = True


@dataclass
class _SingleDirFilesystem:
    """Filesystem whose every directory is the same scripted handle."""

    handle: File
    opened: list[str] = field(default_factory=list)

    def open(self, path: str) -> File:
        self.opened.append(path)
        return self.handle


def _entries(count: int) -> list[DirEntry]:
    return [
        DirEntry(FileInfo(name=f"entry-{index:03d}", mode=stat.S_IFREG | 0o644))
        for index in range(count)
    ]


class TestLinkMetadata:
    def test_describes_link_not_target(self) -> None:
        fsys = MapFilesystem(
            {
                "file": MapFile(mode=0o600),
                "link": MapFile(b"file", mode=LINK_MODE),
            }
        )

        info = lstat(fsys, "link")

        assert info.name == "link"
        assert info.mode == LINK_MODE
        assert info.is_symlink
        assert info.size == len(b"file")
        resolved = fs_stat(fsys, "link")
        assert not resolved.is_symlink
        assert resolved.mode == stat.S_IFREG | 0o600

    def test_regular_file_matches_stat(self, map_fs: MapFilesystem) -> None:
        assert lstat(map_fs, "dir/a.txt") == fs_stat(map_fs, "dir/a.txt")

    def test_nested_link(self, map_fs: MapFilesystem) -> None:
        info = lstat(map_fs, "dir/nested/deep")
        assert info.name == "deep"
        assert info.is_symlink

    def test_dangling_link(self, map_fs: MapFilesystem) -> None:
        assert lstat(map_fs, "broken").is_symlink

    def test_parent_reached_through_link(self, map_fs: MapFilesystem) -> None:
        # dir/up -> .. so its children are the top-level entries
        assert lstat(map_fs, "dir/up/link").mode == LINK_MODE

    def test_directory_entry(self, map_fs: MapFilesystem) -> None:
        info = lstat(map_fs, "dir")
        assert info.is_dir
        assert info.name == "dir"


class TestRoot:
    def test_root_is_plain_stat(self, map_fs: MapFilesystem) -> None:
        assert lstat(map_fs, ".") == fs_stat(map_fs, ".")

    def test_root_does_not_scan(self) -> None:
        handle = _ScriptedDir(entries=[])
        fsys = _SingleDirFilesystem(handle)
        info = lstat(fsys, ".")
        assert info.is_dir
        assert handle.requests == []
        assert handle.closed


class TestBatching:
    def test_scans_across_batches(self) -> None:
        entries = _entries(250)
        handle = _ScriptedDir(entries=entries)
        fsys = _SingleDirFilesystem(handle)

        info = lstat(fsys, "entry-249")

        assert info.name == "entry-249"
        assert handle.requests == [100, 100, 100]
        assert fsys.opened == ["."]
        assert handle.closed

    def test_batch_size_is_configurable(self) -> None:
        handle = _ScriptedDir(entries=_entries(10))
        fsys = _SingleDirFilesystem(handle)
        _ = lstat(fsys, "entry-009", batch_size=3)
        assert handle.requests == [3, 3, 3, 3]

    def test_exhausted_directory_is_not_found(self) -> None:
        handle = _ScriptedDir(entries=_entries(150))
        fsys = _SingleDirFilesystem(handle)

        with pytest.raises(NotFoundError) as exc_info:
            _ = lstat(fsys, "dir/missing")

        assert exc_info.value.op == "lstat"
        assert exc_info.value.path == "dir/missing"
        assert fsys.opened == ["dir"]
        assert handle.requests == [100, 100, 100]
        assert handle.closed

    def test_missing_entry_in_map_fs(self, map_fs: MapFilesystem) -> None:
        with pytest.raises(NotFoundError):
            _ = lstat(map_fs, "dir/nope")


class TestErrors:
    def test_enumeration_error_exposes_underlying_cause(self) -> None:
        cause = OSError(errno.EIO, "input/output error")
        handle = _ScriptedDir(
            entries=_entries(250),
            fail_after=1,
            error=PathError("readdir", "dir", cause),
        )
        fsys = _SingleDirFilesystem(handle)

        with pytest.raises(PathError) as exc_info:
            _ = lstat(fsys, "dir/entry-249")

        error = exc_info.value
        assert not isinstance(error, NotFoundError)
        assert error.op == "lstat"
        assert error.path == "dir/entry-249"
        assert error.cause is cause
        assert handle.closed

    def test_enumeration_error_keeps_its_kind(self) -> None:
        handle = _ScriptedDir(
            entries=[],
            fail_after=0,
            error=UnsupportedError("readdir", "dir", "not implemented"),
        )
        with pytest.raises(UnsupportedError) as exc_info:
            _ = lstat(_SingleDirFilesystem(handle), "dir/x")
        assert exc_info.value.cause == "not implemented"

    def test_raw_os_error_is_translated(self) -> None:
        cause = OSError(errno.EIO, "input/output error")
        handle = _ScriptedDir(entries=[], fail_after=0, error=cause)
        with pytest.raises(PathError) as exc_info:
            _ = lstat(_SingleDirFilesystem(handle), "x")
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause

    def test_parent_without_enumeration_is_unsupported(self) -> None:
        handle = _PlainFile()
        with pytest.raises(UnsupportedError) as exc_info:
            _ = lstat(_SingleDirFilesystem(handle), "dir/x")
        assert exc_info.value.op == "lstat"
        assert handle.closed

    @pytest.mark.parametrize("batch_size", [0, -1])
    def test_batch_size_must_be_positive(self, batch_size: int) -> None:
        handle = _ScriptedDir(entries=_entries(3))
        fsys = _SingleDirFilesystem(handle)

        with pytest.raises(InvalidPathError, match="batch size must be positive"):
            _ = lstat(fsys, "entry-001", batch_size=batch_size)

        assert fsys.opened == []
        assert handle.requests == []

    def test_batch_size_error_is_value_error(self, map_fs: MapFilesystem) -> None:
        with pytest.raises(ValueError):
            _ = lstat(map_fs, ".", batch_size=0)

    @pytest.mark.parametrize("path", ["", "/link", "a//b", "./a", "a/.."])
    def test_invalid_path(self, path: str) -> None:
        fsys = _SingleDirFilesystem(_ScriptedDir(entries=[]))
        with pytest.raises(InvalidPathError) as exc_info:
            _ = lstat(fsys, path)
        assert exc_info.value.op == "lstat"
        assert fsys.opened == []

    def test_missing_parent_propagates(self, map_fs: MapFilesystem) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            _ = lstat(map_fs, "nope/link")
        assert exc_info.value.op == "open"
        assert exc_info.value.path == "nope"
