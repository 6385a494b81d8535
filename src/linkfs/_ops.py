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

"""Generic operations over any :class:`~linkfs.Filesystem`.

Each helper uses the matching optional capability when the filesystem
provides it and otherwise falls back to ``open`` on the base protocol.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import closing

from ._protocol import (
    Filesystem,
    ReadDirFile,
    ReadDirFilesystem,
    ReadFileFilesystem,
    StatFilesystem,
)
from ._types import DirEntry, FileInfo
from .errors import UnsupportedError

__all__ = ["read_dir", "read_file", "stat"]


def stat(fsys: Filesystem, path: str) -> FileInfo:
    """Describe ``path``, following symbolic links."""
    if isinstance(fsys, StatFilesystem):
        return fsys.stat(path)
    with closing(fsys.open(path)) as f:
        return f.stat()


def read_dir(fsys: Filesystem, path: str) -> Sequence[DirEntry]:
    """List the directory at ``path`` sorted by name.

    Raises:
        UnsupportedError: The opened entry cannot enumerate its children.
    """
    if isinstance(fsys, ReadDirFilesystem):
        return fsys.read_dir(path)
    with closing(fsys.open(path)) as f:
        if not isinstance(f, ReadDirFile):
            raise UnsupportedError("readdir", path, "not implemented")
        entries = list(f.read_dir(-1))
    entries.sort(key=lambda entry: entry.name)
    return entries


def read_file(fsys: Filesystem, path: str) -> bytes:
    """Return the full contents of the file at ``path``."""
    if isinstance(fsys, ReadFileFilesystem):
        return fsys.read_file(path)
    with closing(fsys.open(path)) as f:
        return f.read()
