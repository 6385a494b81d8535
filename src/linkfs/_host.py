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

"""Host filesystem backend.

This module provides a read-only filesystem backed by a host directory, with
path restrictions preventing access outside the root.

Example usage::

    from linkfs import HostFilesystem, lstat, read_link

    fsys = HostFilesystem(root="/srv/releases")

    info = lstat(fsys, "current")
    if info.is_symlink:
        print(read_link(fsys, "current"))
"""

from __future__ import annotations

import errno
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from ._path import ROOT, base, parent, validate_path
from ._protocol import File
from ._types import DirEntry, FileInfo
from .errors import InvalidPathError, PathError, from_os_error

__all__ = ["HostFilesystem"]


# ---------------------------------------------------------------------------
# HostFilesystem Implementation
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class HostFilesystem:
    """Read-only filesystem backed by a host directory.

    Paths are rooted relative paths resolved against ``root``. Symbolic links
    are followed by ``open``, ``stat``, ``read_file`` and ``read_dir`` only
    while their resolution stays inside ``root``; ``read_link`` returns the
    raw link text and directory listings describe links without following
    them.
    """

    root: str

    def _resolve_path(self, op: str, path: str) -> Path:
        """Resolve a rooted relative path to an absolute host path within root.

        Raises:
            InvalidPathError: ``path`` is not a valid rooted relative path.
            PathError: The resolved path escapes the root directory.
        """
        _ = _validate_host_path(path, op=op)
        root_path = Path(self.root).resolve()
        if path == ROOT:
            return root_path

        candidate = (root_path / path).resolve()
        try:
            _ = candidate.relative_to(root_path)
        except ValueError:
            cause = PermissionError(errno.EACCES, "path escapes root directory")
            raise PathError(op, path, cause) from None
        return candidate

    @staticmethod
    def _name(path: str) -> str:
        return ROOT if path == ROOT else base(path)

    def open(self, path: str) -> File:
        resolved = self._resolve_path("open", path)
        try:
            result = resolved.stat()
            info = FileInfo.from_stat_result(self._name(path), result)
            if info.is_dir:
                return _HostDirHandle(path=path, host_path=resolved, file_info=info)
            return _HostFileHandle(
                path=path, file_info=info, stream=resolved.open("rb")
            )
        except OSError as error:
            raise from_os_error("open", path, error) from error

    def stat(self, path: str) -> FileInfo:
        resolved = self._resolve_path("stat", path)
        try:
            return FileInfo.from_stat_result(self._name(path), resolved.stat())
        except OSError as error:
            raise from_os_error("stat", path, error) from error

    def read_dir(self, path: str) -> Sequence[DirEntry]:
        resolved = self._resolve_path("readdir", path)
        try:
            with os.scandir(resolved) as iterator:
                entries = [_dir_entry(item) for item in iterator]
        except OSError as error:
            raise from_os_error("readdir", path, error) from error
        entries.sort(key=lambda entry: entry.name)
        return entries

    def read_file(self, path: str) -> bytes:
        resolved = self._resolve_path("read", path)
        try:
            return resolved.read_bytes()
        except OSError as error:
            raise from_os_error("read", path, error) from error

    def read_link(self, path: str) -> str:
        """Return the raw text of the link at ``path``.

        The link itself is not followed; parent directories are resolved
        like any other path.
        """
        _ = _validate_host_path(path, op="readlink")
        if path == ROOT:
            raise InvalidPathError("readlink", path, "not a symbolic link")
        directory = self._resolve_path("readlink", parent(path))
        try:
            return os.readlink(directory / base(path))
        except OSError as error:
            raise from_os_error("readlink", path, error) from error


def _validate_host_path(path: str, *, op: str) -> str:
    """Validate ``path`` and reject characters the host cannot represent."""
    _ = validate_path(path, op=op)
    if "\x00" in path:
        raise InvalidPathError(op, path, "embedded null byte")
    return path


def _dir_entry(item: os.DirEntry[str]) -> DirEntry:
    return DirEntry(
        FileInfo.from_stat_result(item.name, item.stat(follow_symlinks=False))
    )


@dataclass(slots=True)
class _HostFileHandle:
    path: str
    file_info: FileInfo
    stream: BinaryIO

    def stat(self) -> FileInfo:
        return self.file_info

    def read(self, size: int = -1) -> bytes:
        try:
            return self.stream.read(size)
        except (OSError, ValueError) as error:
            raise PathError("read", self.path, error) from error

    def close(self) -> None:
        self.stream.close()


@dataclass(slots=True)
class _HostDirHandle:
    path: str
    host_path: Path
    file_info: FileInfo
    _iterator: Iterator[os.DirEntry[str]] | None = field(default=None, init=False)
    _exhausted: bool = field(default=False, init=False)

    def stat(self) -> FileInfo:
        return self.file_info

    def read(self, size: int = -1) -> bytes:
        raise InvalidPathError("read", self.path, "is a directory")

    def read_dir(self, count: int = -1) -> Sequence[DirEntry]:
        if self._exhausted:
            return []
        try:
            if self._iterator is None:
                self._iterator = os.scandir(self.host_path)
            batch: list[DirEntry] = []
            for item in self._iterator:
                batch.append(_dir_entry(item))
                if 0 < count <= len(batch):
                    return batch
        except OSError as error:
            raise from_os_error("readdir", self.path, error) from error
        self._exhausted = True
        self.close()
        return batch

    def close(self) -> None:
        if self._iterator is not None:
            close = getattr(self._iterator, "close", None)
            if close is not None:
                close()
            self._iterator = None
