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

"""Read the text stored in a symbolic link on any filesystem."""

from __future__ import annotations

from ._path import DEFAULT_LINK_POLICY, LinkTargetPolicy, validate_link_target
from ._protocol import Filesystem, ReadLinkFilesystem
from .errors import UnsupportedError
from .logging import get_logger

__all__ = ["read_link"]

_logger = get_logger(__name__)


def read_link(
    fsys: Filesystem,
    path: str,
    *,
    policy: LinkTargetPolicy = DEFAULT_LINK_POLICY,
) -> str:
    """Return the target of the symbolic link at ``path``.

    The link is never followed; the stored text is returned as-is once it
    passes ``policy``. Targets are relative to the directory holding the link
    and must never be absolute.

    Args:
        fsys: Filesystem holding the link.
        path: Rooted relative path of the link.
        policy: Link-target grammar to enforce on the returned text.

    Raises:
        UnsupportedError: ``fsys`` does not implement ``ReadLinkFilesystem``.
            The message names the concrete filesystem type.
        MalformedLinkError: The stored text violates ``policy``.
        PathError: Any failure raised by ``fsys.read_link`` propagates
            unchanged.
    """
    if not isinstance(fsys, ReadLinkFilesystem):
        kind = type(fsys).__qualname__
        _logger.debug(
            "Filesystem cannot read links",
            event="linkfs.readlink.unsupported",
            context={"path": path, "filesystem": kind},
        )
        raise UnsupportedError(
            "readlink",
            path,
            f"symlink found in file system which does not implement "
            f"ReadLinkFilesystem: {kind}",
        )
    target = fsys.read_link(path)
    return validate_link_target(target, op="readlink", path=path, policy=policy)
