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

"""Filesystem protocol and optional capability protocols.

The base :class:`Filesystem` protocol only knows how to open a path. Every
other ability is an optional capability a backend may implement and callers
discover at runtime with ``isinstance``::

    if isinstance(fsys, ReadLinkFilesystem):
        target = fsys.read_link("current")

All protocols are ``runtime_checkable``, so the check only inspects method
names. Implementations do not need to inherit from them.

All paths are rooted relative strings (see :mod:`linkfs._path`). Failures
are reported with :class:`~linkfs.errors.PathError` subclasses carrying the
operation, the path and the underlying cause.

Core implementations:

- ``linkfs.MapFilesystem``: In-memory tree built from a mapping
- ``linkfs.HostFilesystem``: Read-only access to a host directory
- ``linkfs.SubtreeView``: A subdirectory of another filesystem
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ._types import DirEntry, FileInfo


@runtime_checkable
class File(Protocol):
    """An open file or directory returned by ``Filesystem.open``."""

    def stat(self) -> FileInfo:
        """Describe the opened entry."""
        ...

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes (everything when negative).

        Raises:
            InvalidPathError: The opened entry is a directory.
        """
        ...

    def close(self) -> None:
        """Release the handle. Closing twice is harmless."""
        ...


@runtime_checkable
class ReadDirFile(File, Protocol):
    """Open directory supporting bounded, resumable enumeration."""

    def read_dir(self, count: int = -1) -> Sequence[DirEntry]:
        """Read the next batch of directory entries.

        Args:
            count: With ``count > 0`` return at most ``count`` entries and an
                empty sequence once the directory is exhausted. With
                ``count <= 0`` return every remaining entry.

        Returns:
            Entries in directory order. Each call resumes where the previous
            one stopped.
        """
        ...


@runtime_checkable
class Filesystem(Protocol):
    """Minimal read-only filesystem: a tree of entries that can be opened.

    Example::

        def first_line(fsys: Filesystem, path: str) -> bytes:
            with contextlib.closing(fsys.open(path)) as f:
                return f.read().split(b"\\n", 1)[0]
    """

    def open(self, path: str) -> File:
        """Open ``path``, following symbolic links.

        Raises:
            InvalidPathError: ``path`` is not a valid rooted relative path.
            NotFoundError: ``path`` does not exist.
        """
        ...


@runtime_checkable
class ReadLinkFilesystem(Filesystem, Protocol):
    """Filesystem able to report the text stored in a symbolic link."""

    def read_link(self, path: str) -> str:
        """Return the raw, unvalidated target text of the link at ``path``.

        Raises:
            NotFoundError: ``path`` does not exist.
            InvalidPathError: ``path`` is not a symbolic link.
        """
        ...


@runtime_checkable
class SubFilesystem(Filesystem, Protocol):
    """Filesystem able to produce a view rooted at one of its directories."""

    def sub(self, directory: str) -> Filesystem:
        """Return a filesystem whose root is ``directory``."""
        ...


@runtime_checkable
class StatFilesystem(Filesystem, Protocol):
    """Filesystem with a direct ``stat`` operation."""

    def stat(self, path: str) -> FileInfo:
        """Describe ``path``, following symbolic links."""
        ...


@runtime_checkable
class ReadDirFilesystem(Filesystem, Protocol):
    """Filesystem with a direct directory listing operation."""

    def read_dir(self, path: str) -> Sequence[DirEntry]:
        """List the directory at ``path`` sorted by name."""
        ...


@runtime_checkable
class ReadFileFilesystem(Filesystem, Protocol):
    """Filesystem with a direct whole-file read operation."""

    def read_file(self, path: str) -> bytes:
        """Return the full contents of the file at ``path``."""
        ...


__all__ = [
    "File",
    "Filesystem",
    "ReadDirFile",
    "ReadDirFilesystem",
    "ReadFileFilesystem",
    "ReadLinkFilesystem",
    "StatFilesystem",
    "SubFilesystem",
]
