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

"""In-memory filesystem backend.

This module provides a read-only filesystem built from a mapping of paths to
:class:`MapFile` records. It is the reference host for tests and for callers
that want to describe a tree, links included, without touching disk.

Example usage::

    import stat
    from linkfs import MapFile, MapFilesystem, lstat, read_link

    fsys = MapFilesystem(
        {
            "file": MapFile(b"hello", mode=0o600),
            "link": MapFile(b"file", mode=stat.S_IFLNK | 0o666),
        }
    )

    assert fsys.read_file("link") == b"hello"  # open/stat follow links
    assert read_link(fsys, "link") == "file"
    assert lstat(fsys, "link").is_symlink
"""

from __future__ import annotations

import errno
import stat as stat_module
from collections import deque
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

from ._path import ROOT, base, join, parent, valid_path, validate_path
from ._protocol import File
from ._types import MAX_LINK_HOPS, DirEntry, FileInfo
from .errors import InvalidPathError, NotFoundError, PathError

__all__ = ["MapFile", "MapFilesystem"]

_DIRECTORY_MODE = stat_module.S_IFDIR | 0o555


@dataclass(slots=True, frozen=True)
class MapFile:
    """Description of one entry of a :class:`MapFilesystem`.

    Attributes:
        data: File contents, or the target text for a symbolic link.
        mode: POSIX mode bits. Permission-only modes describe regular files;
            include ``stat.S_IFLNK`` for links or ``stat.S_IFDIR`` for
            directories.
        modified_at: Modification time reported by ``stat``.
    """

    data: bytes = b""
    mode: int = 0o644
    modified_at: datetime | None = None

    @property
    def full_mode(self) -> int:
        """Mode with the regular-file type bit filled in when none is set."""
        if stat_module.S_IFMT(self.mode) == 0:
            return self.mode | stat_module.S_IFREG
        return self.mode

    def link_target(self) -> str:
        """Link text of ``data``; undecodable bytes survive as in ``os.readlink``."""
        return self.data.decode("utf-8", errors="surrogateescape")

    def info(self, name: str) -> FileInfo:
        size = 0 if stat_module.S_ISDIR(self.full_mode) else len(self.data)
        return FileInfo(
            name=name, mode=self.full_mode, size=size, modified_at=self.modified_at
        )


_SYNTHESIZED_DIRECTORY = MapFile(mode=_DIRECTORY_MODE)


def _empty_entries() -> dict[str, MapFile]:
    return {}


def _empty_children() -> dict[str, tuple[str, ...]]:
    return {}


@dataclass(slots=True, frozen=True)
class MapFilesystem:
    """Read-only filesystem backed by a mapping of paths to ``MapFile``.

    Parent directories missing from the mapping are synthesized. ``open``,
    ``stat`` and ``read_file`` follow symbolic links, giving up after
    ``MAX_LINK_HOPS`` links; ``read_link`` and directory listings describe
    links without following them.
    """

    files: Mapping[str, MapFile] = field(default_factory=dict[str, MapFile])
    _entries: dict[str, MapFile] = field(
        init=False, repr=False, default_factory=_empty_entries
    )
    _children: dict[str, tuple[str, ...]] = field(
        init=False, repr=False, default_factory=_empty_children
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", MappingProxyType(dict(self.files)))
        entries: dict[str, MapFile] = {ROOT: _SYNTHESIZED_DIRECTORY}
        for name, file in self.files.items():
            if not valid_path(name):
                raise InvalidPathError("map", name)
            entries[name] = file
            directory = parent(name) if name != ROOT else ROOT
            while directory != ROOT and directory not in entries:
                entries[directory] = _SYNTHESIZED_DIRECTORY
                directory = parent(directory)

        children: dict[str, list[str]] = {}
        for name in entries:
            if name == ROOT:
                continue
            directory = parent(name)
            if not stat_module.S_ISDIR(entries[directory].full_mode):
                raise InvalidPathError("map", name, "parent is not a directory")
            children.setdefault(directory, []).append(name)

        self._entries.update(entries)
        self._children.update(
            {directory: tuple(sorted(names)) for directory, names in children.items()}
        )

    def _lookup(
        self, op: str, path: str, *, follow: bool = True
    ) -> tuple[str, MapFile]:
        """Return the resolved name and entry of ``path``.

        Links along the way are followed; the final component only when
        ``follow`` is true.
        """
        _ = validate_path(path, op=op)
        if path == ROOT:
            return ROOT, self._entries[ROOT]
        pending = deque(path.split("/"))
        current = ROOT
        hops = 0
        while pending:
            segment = pending.popleft()
            if segment == "..":
                if current == ROOT:
                    raise NotFoundError(op, path, "link target escapes filesystem")
                current = parent(current)
                continue
            candidate = join(current, segment)
            entry = self._entries.get(candidate)
            if entry is None:
                raise NotFoundError(op, path)
            mode = entry.full_mode
            if stat_module.S_ISLNK(mode) and (pending or follow):
                hops += 1
                if hops > MAX_LINK_HOPS:
                    raise PathError(
                        op,
                        path,
                        OSError(errno.ELOOP, "too many levels of symbolic links"),
                    )
                target = entry.link_target()
                if target.startswith("/"):
                    raise NotFoundError(op, path, "absolute link target")
                pending.extendleft(
                    reversed([s for s in target.split("/") if s not in {"", "."}])
                )
                continue
            if pending and not stat_module.S_ISDIR(mode):
                raise InvalidPathError(op, path, "not a directory")
            current = candidate
        return current, self._entries[current]

    def _dir_entries(self, directory: str) -> list[DirEntry]:
        return [
            DirEntry(self._entries[name].info(base(name)))
            for name in self._children.get(directory, ())
        ]

    def open(self, path: str) -> File:
        resolved, entry = self._lookup("open", path)
        name = base(path) if path != ROOT else ROOT
        if stat_module.S_ISDIR(entry.full_mode):
            return _MapDirHandle(
                path=path,
                file_info=entry.info(name),
                entries=tuple(self._dir_entries(resolved)),
            )
        return _MapFileHandle(path=path, file_info=entry.info(name), data=entry.data)

    def stat(self, path: str) -> FileInfo:
        _, entry = self._lookup("stat", path)
        return entry.info(base(path) if path != ROOT else ROOT)

    def read_dir(self, path: str) -> Sequence[DirEntry]:
        resolved, entry = self._lookup("readdir", path)
        if not stat_module.S_ISDIR(entry.full_mode):
            raise InvalidPathError("readdir", path, "not a directory")
        return self._dir_entries(resolved)

    def read_file(self, path: str) -> bytes:
        _, entry = self._lookup("read", path)
        if stat_module.S_ISDIR(entry.full_mode):
            raise InvalidPathError("read", path, "is a directory")
        return entry.data

    def read_link(self, path: str) -> str:
        _, entry = self._lookup("readlink", path, follow=False)
        if not stat_module.S_ISLNK(entry.full_mode):
            raise InvalidPathError("readlink", path, "not a symbolic link")
        return entry.link_target()


@dataclass(slots=True)
class _MapHandle:
    path: str
    file_info: FileInfo
    _closed: bool = field(default=False, init=False)

    def _check_open(self, op: str) -> None:
        if self._closed:
            raise PathError(op, self.path, "file already closed")

    def stat(self) -> FileInfo:
        self._check_open("stat")
        return self.file_info

    def close(self) -> None:
        self._closed = True


@dataclass(slots=True)
class _MapFileHandle(_MapHandle):
    data: bytes = b""
    _offset: int = field(default=0, init=False)

    def read(self, size: int = -1) -> bytes:
        self._check_open("read")
        end = len(self.data) if size < 0 else self._offset + size
        chunk = self.data[self._offset : end]
        self._offset += len(chunk)
        return chunk


@dataclass(slots=True)
class _MapDirHandle(_MapHandle):
    entries: tuple[DirEntry, ...] = ()
    _offset: int = field(default=0, init=False)

    def read(self, size: int = -1) -> bytes:
        raise InvalidPathError("read", self.path, "is a directory")

    def read_dir(self, count: int = -1) -> Sequence[DirEntry]:
        self._check_open("readdir")
        end = len(self.entries) if count <= 0 else self._offset + count
        batch = self.entries[self._offset : end]
        self._offset += len(batch)
        return list(batch)
