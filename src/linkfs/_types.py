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

"""Metadata types returned by linkfs filesystems.

All types are immutable frozen dataclasses and carry everything callers need
without further I/O:

- ``FileInfo``: name, mode, size and modification time of one entry
- ``DirEntry``: a directory listing entry wrapping its ``FileInfo``

Modes use the POSIX ``st_mode`` layout, so the helpers from the standard
:mod:`stat` module apply directly (``stat.S_ISLNK(info.mode)``).

Constants:

- ``LSTAT_BATCH_SIZE``: Directory entries requested per batch by ``lstat`` (100)
- ``MAX_LINK_HOPS``: Symlinks followed before a host gives up resolving (40)
"""

from __future__ import annotations

import os
import stat as stat_module
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Final

LSTAT_BATCH_SIZE: Final[int] = 100
MAX_LINK_HOPS: Final[int] = 40


@dataclass(slots=True, frozen=True)
class FileInfo:
    """Metadata for a file, directory or symbolic link.

    Attributes:
        name: Base name of the entry (``"."`` for a filesystem root).
        mode: POSIX mode bits including the file-type bits. A link described
            by ``lstat`` carries ``stat.S_IFLNK``.
        size: Size in bytes. For links this is the length of the target text.
        modified_at: Last modification time, or ``None`` when unknown.

    Example::

        info = lstat(fsys, "current")
        if info.is_symlink:
            target = read_link(fsys, "current")
    """

    name: str
    mode: int
    size: int = 0
    modified_at: datetime | None = None

    @property
    def is_dir(self) -> bool:
        """True if the entry is a directory."""
        return stat_module.S_ISDIR(self.mode)

    @property
    def is_symlink(self) -> bool:
        """True if the entry is a symbolic link."""
        return stat_module.S_ISLNK(self.mode)

    @property
    def is_regular(self) -> bool:
        """True if the entry is a regular file."""
        return stat_module.S_ISREG(self.mode)

    @property
    def permissions(self) -> int:
        """Permission bits without the file-type bits."""
        return stat_module.S_IMODE(self.mode)

    @classmethod
    def from_stat_result(cls, name: str, result: os.stat_result) -> FileInfo:
        """Build a ``FileInfo`` from an ``os.stat`` / ``os.lstat`` result."""
        return cls(
            name=name,
            mode=result.st_mode,
            size=result.st_size,
            modified_at=datetime.fromtimestamp(result.st_mtime, tz=UTC),
        )


@dataclass(slots=True, frozen=True)
class DirEntry:
    """Directory listing entry returned by ``read_dir``.

    The entry holds the ``FileInfo`` captured while the directory was read,
    so describing it never requires another call to the host. Links are
    described, not followed.
    """

    entry_info: FileInfo

    @property
    def name(self) -> str:
        return self.entry_info.name

    @property
    def is_dir(self) -> bool:
        return self.entry_info.is_dir

    @property
    def is_symlink(self) -> bool:
        return self.entry_info.is_symlink

    @property
    def type(self) -> int:
        """File-type bits of the entry mode."""
        return stat_module.S_IFMT(self.entry_info.mode)

    def info(self) -> FileInfo:
        return self.entry_info


__all__ = [
    "LSTAT_BATCH_SIZE",
    "MAX_LINK_HOPS",
    "DirEntry",
    "FileInfo",
]
