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

"""Expose a subdirectory of a filesystem as an independent root.

Example usage::

    from linkfs import HostFilesystem, read_file, read_link, sub

    fsys = HostFilesystem(root="/srv/releases")
    current = sub(fsys, "app/current")

    # Paths and errors are relative to app/current
    data = read_file(current, "config.toml")
    target = read_link(current, "logs")
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from . import _ops
from ._path import (
    DEFAULT_LINK_POLICY,
    ROOT,
    LinkTargetPolicy,
    join,
    valid_path,
    validate_path,
)
from ._protocol import File, Filesystem, SubFilesystem
from ._readlink import read_link
from ._types import DirEntry
from .errors import InvalidPathError, PathError
from .logging import get_logger

__all__ = ["SubtreeView", "sub"]

_logger = get_logger(__name__)

_T = TypeVar("_T")


def sub(
    fsys: Filesystem,
    directory: str,
    *,
    policy: LinkTargetPolicy = DEFAULT_LINK_POLICY,
) -> Filesystem:
    """Return a filesystem rooted at ``directory`` inside ``fsys``.

    ``sub(fsys, ".")`` is ``fsys`` itself. Filesystems implementing
    ``SubFilesystem`` build the view themselves; any other filesystem is
    wrapped in a :class:`SubtreeView`, which also forwards link reading.

    Args:
        fsys: Filesystem to take the subtree from.
        directory: Rooted relative path of the new root.
        policy: Link-target grammar applied by the view's ``read_link``.

    Raises:
        InvalidPathError: ``directory`` is not a valid rooted relative path.
    """
    if not valid_path(directory):
        raise InvalidPathError("sub", directory)
    if directory == ROOT:
        return fsys
    if isinstance(fsys, SubFilesystem):
        return fsys.sub(directory)
    _logger.debug(
        "Wrapping filesystem in subtree view",
        event="linkfs.sub.wrap",
        context={"directory": directory, "filesystem": type(fsys).__qualname__},
    )
    return SubtreeView(fsys, directory, policy=policy)


@dataclass(slots=True, frozen=True)
class SubtreeView:
    """Filesystem presenting ``directory`` of ``fsys`` as its root.

    Every operation validates the caller's path, joins it onto
    ``directory``, delegates to ``fsys`` and rewrites the path of any
    ``PathError`` so it is relative to the view. Nested views flatten to a
    single view over the original filesystem.

    Attributes:
        fsys: Wrapped filesystem.
        directory: Valid rooted relative path of the view root inside ``fsys``.
        policy: Link-target grammar applied by ``read_link``.
    """

    fsys: Filesystem
    directory: str
    policy: LinkTargetPolicy = DEFAULT_LINK_POLICY

    def _full_name(self, op: str, name: str) -> str:
        return join(self.directory, validate_path(name, op=op))

    def _shorten(self, name: str) -> str | None:
        """Map ``name`` back under the view root, or ``None`` if outside it."""
        if name == self.directory:
            return ROOT
        prefix = f"{self.directory}/"
        if len(name) > len(prefix) and name.startswith(prefix):
            return name[len(prefix) :]
        return None

    def _call(self, func: Callable[[str], _T], full: str) -> _T:
        try:
            return func(full)
        except PathError as error:
            short = self._shorten(error.path)
            if short is not None:
                error.path = short
            raise

    def open(self, path: str) -> File:
        return self._call(self.fsys.open, self._full_name("open", path))

    def read_dir(self, path: str) -> Sequence[DirEntry]:
        full = self._full_name("read", path)
        return self._call(lambda name: _ops.read_dir(self.fsys, name), full)

    def read_file(self, path: str) -> bytes:
        full = self._full_name("read", path)
        return self._call(lambda name: _ops.read_file(self.fsys, name), full)

    def read_link(self, path: str) -> str:
        """Read the link at ``path`` through the wrapped filesystem.

        The wrapped filesystem is checked for ``ReadLinkFilesystem`` on every
        call, so the capability survives any depth of nesting.
        """
        full = self._full_name("readlink", path)
        return self._call(
            lambda name: read_link(self.fsys, name, policy=self.policy), full
        )

    def sub(self, directory: str) -> Filesystem:
        if directory == ROOT:
            return self
        full = self._full_name("sub", directory)
        return SubtreeView(self.fsys, full, policy=self.policy)
