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

"""Describe a symbolic link itself rather than the file it points to."""

from __future__ import annotations

from contextlib import closing

from ._ops import stat
from ._path import ROOT, base, parent, validate_path
from ._protocol import Filesystem, ReadDirFile
from ._types import LSTAT_BATCH_SIZE, FileInfo
from .errors import (
    InvalidPathError,
    NotFoundError,
    PathError,
    UnsupportedError,
    from_os_error,
    rewrap,
)
from .logging import get_logger

__all__ = ["lstat"]

_logger = get_logger(__name__)


def lstat(
    fsys: Filesystem, path: str, *, batch_size: int = LSTAT_BATCH_SIZE
) -> FileInfo:
    """Describe ``path`` without following it when it is a symbolic link.

    The base ``Filesystem`` protocol has no way to stat an entry without
    resolving it, so the parent directory is opened and scanned for an entry
    with a matching name. Each call therefore costs O(number of siblings);
    callers doing repeated lookups in large directories should list the
    directory once with ``read_dir`` instead.

    The root cannot be a link, so ``lstat(fsys, ".")`` is ``stat(fsys, ".")``.

    Args:
        fsys: Filesystem to query.
        path: Rooted relative path of the entry.
        batch_size: Directory entries requested per enumeration call.

    Raises:
        InvalidPathError: ``path`` is not a valid rooted relative path, or
            ``batch_size`` is not positive.
        UnsupportedError: The parent directory cannot be enumerated.
        NotFoundError: The parent holds no entry named like ``path``.
        PathError: Opening or enumerating the parent failed. Enumeration
            failures carry the underlying cause of the host error.
    """
    if batch_size <= 0:
        raise InvalidPathError(
            "lstat", path, f"batch size must be positive (got {batch_size})"
        )
    if path == ROOT:
        return stat(fsys, ROOT)
    _ = validate_path(path, op="lstat")
    name = base(path)
    with closing(fsys.open(parent(path))) as directory:
        if not isinstance(directory, ReadDirFile):
            raise UnsupportedError("lstat", path, "parent directory cannot be read")
        batches = 0
        while True:
            try:
                entries = directory.read_dir(batch_size)
            except PathError as error:
                raise rewrap("lstat", path, error) from error
            except OSError as error:
                raise from_os_error("lstat", path, error) from error
            batches += 1
            for entry in entries:
                if entry.name == name:
                    _logger.debug(
                        "Found entry in parent directory",
                        event="linkfs.lstat.found",
                        context={"path": path, "batches": batches},
                    )
                    return entry.info()
            if not entries:
                _logger.debug(
                    "Parent directory exhausted",
                    event="linkfs.lstat.not_found",
                    context={"path": path, "batches": batches},
                )
                raise NotFoundError("lstat", path)
