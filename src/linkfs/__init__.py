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

"""Symbolic-link awareness for read-only filesystem abstractions.

The :class:`Filesystem` protocol only knows how to open paths. This package
adds the link operations such a filesystem lacks:

- ``read_link``: read the text stored in a link, when the filesystem
  implements ``ReadLinkFilesystem``
- ``lstat``: describe a link itself by scanning its parent directory
- ``sub``: expose a subdirectory as an independent root that still
  forwards ``read_link`` and reports errors relative to itself

Example usage::

    from linkfs import HostFilesystem, lstat, read_link, sub

    fsys = sub(HostFilesystem(root="/srv"), "releases")
    if lstat(fsys, "current").is_symlink:
        print(read_link(fsys, "current"))

Backends provided here:

- ``MapFilesystem``: In-memory tree built from a mapping
- ``HostFilesystem``: Read-only access to a host directory
"""

from __future__ import annotations

from ._host import HostFilesystem
from ._lstat import lstat
from ._memory import MapFile, MapFilesystem
from ._ops import read_dir, read_file, stat
from ._path import (
    DEFAULT_LINK_POLICY,
    LINK_POLICIES,
    RELATIVE_LINK_POLICY,
    ROOT,
    STRICT_LINK_POLICY,
    LinkTargetPolicy,
    valid_path,
    validate_link_target,
    validate_path,
)
from ._protocol import (
    File,
    Filesystem,
    ReadDirFile,
    ReadDirFilesystem,
    ReadFileFilesystem,
    ReadLinkFilesystem,
    StatFilesystem,
    SubFilesystem,
)
from ._readlink import read_link
from ._sub import SubtreeView, sub
from ._types import LSTAT_BATCH_SIZE, MAX_LINK_HOPS, DirEntry, FileInfo
from .errors import (
    ConfigError,
    InvalidPathError,
    LinkfsError,
    MalformedLinkError,
    NotFoundError,
    PathError,
    UnsupportedError,
)

__all__ = [
    "DEFAULT_LINK_POLICY",
    "LINK_POLICIES",
    "LSTAT_BATCH_SIZE",
    "MAX_LINK_HOPS",
    "RELATIVE_LINK_POLICY",
    "ROOT",
    "STRICT_LINK_POLICY",
    "ConfigError",
    "DirEntry",
    "File",
    "FileInfo",
    "Filesystem",
    "HostFilesystem",
    "InvalidPathError",
    "LinkTargetPolicy",
    "LinkfsError",
    "MalformedLinkError",
    "MapFile",
    "MapFilesystem",
    "NotFoundError",
    "PathError",
    "ReadDirFile",
    "ReadDirFilesystem",
    "ReadFileFilesystem",
    "ReadLinkFilesystem",
    "StatFilesystem",
    "SubFilesystem",
    "SubtreeView",
    "UnsupportedError",
    "lstat",
    "read_dir",
    "read_file",
    "read_link",
    "stat",
    "sub",
    "valid_path",
    "validate_link_target",
    "validate_path",
]
