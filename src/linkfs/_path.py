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

"""Path and link-target grammar shared by every linkfs operation.

Paths handed to a linkfs filesystem are *rooted relative paths*: slash
separated, no leading slash, no empty segments and no ``.`` or ``..``
segments. The single string ``"."`` names the root itself.

Link targets follow a looser grammar because they are relative to the
directory holding the link and may climb out of it. The exact boundary is
still being settled upstream, so it is expressed as a versioned
:class:`LinkTargetPolicy` rather than a fixed rule.

Constants:
    ROOT: The path naming the filesystem root (``"."``).
    DEFAULT_LINK_POLICY: Policy applied when callers do not choose one.
    LINK_POLICIES: Registry of known policies keyed by name.

Functions:
    valid_path: Check the rooted relative path grammar.
    validate_path: Return a path or raise ``InvalidPathError``.
    validate_link_target: Return a link target or raise ``MalformedLinkError``.
    join: Join a directory and a relative name.
    parent: Directory component of a path.
    base: Final component of a path.
"""

from __future__ import annotations

import posixpath
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from .errors import InvalidPathError, MalformedLinkError

ROOT: Final[str] = "."
_PARENT: Final[str] = ".."
_PARENT_PREFIX: Final[str] = "../"


def valid_path(name: str) -> bool:
    """Report whether ``name`` is a valid rooted relative path.

    Examples:
        >>> valid_path("a/b")
        True
        >>> valid_path(".")
        True
        >>> valid_path("./a")
        False
        >>> valid_path("/etc")
        False
    """
    if name == ROOT:
        return True
    if not name:
        return False
    return all(segment not in {"", ".", ".."} for segment in name.split("/"))


def validate_path(name: str, *, op: str) -> str:
    """Return ``name`` unchanged when valid.

    Raises:
        InvalidPathError: ``name`` violates the path grammar. The error is
            tagged with ``op`` so callers see which operation rejected it.
    """
    if not valid_path(name):
        raise InvalidPathError(op, name)
    return name


@dataclass(slots=True, frozen=True)
class LinkTargetPolicy:
    """Versioned rule set deciding which link targets are well formed.

    Attributes:
        name: Registry key identifying this policy and its version.
        allow_parent: Accept the bare ``".."`` target.
        allow_parent_prefix: Accept targets starting with ``"../"``.
        strict_parent_suffix: When a target starts with one or more
            ``"../"`` segments, also require the remainder to be ``".."``
            or a valid non-root path. When ``False`` the remainder is not
            inspected.
    """

    name: str
    allow_parent: bool = True
    allow_parent_prefix: bool = True
    strict_parent_suffix: bool = False

    def accepts(self, target: str) -> bool:
        """Report whether ``target`` is well formed under this policy."""
        if target == _PARENT:
            return self.allow_parent
        if target.startswith(_PARENT_PREFIX):
            if not self.allow_parent_prefix:
                return False
            if not self.strict_parent_suffix:
                return True
            rest = target
            while rest.startswith(_PARENT_PREFIX):
                rest = rest[len(_PARENT_PREFIX) :]
            return rest == _PARENT or (rest != ROOT and valid_path(rest))
        return valid_path(target)


RELATIVE_LINK_POLICY: Final[LinkTargetPolicy] = LinkTargetPolicy(name="relative-v1")
STRICT_LINK_POLICY: Final[LinkTargetPolicy] = LinkTargetPolicy(
    name="strict-v1", strict_parent_suffix=True
)
DEFAULT_LINK_POLICY: Final[LinkTargetPolicy] = RELATIVE_LINK_POLICY

LINK_POLICIES: Final[Mapping[str, LinkTargetPolicy]] = MappingProxyType(
    {policy.name: policy for policy in (RELATIVE_LINK_POLICY, STRICT_LINK_POLICY)}
)


def validate_link_target(
    target: str,
    *,
    op: str,
    path: str,
    policy: LinkTargetPolicy = DEFAULT_LINK_POLICY,
) -> str:
    """Return ``target`` unchanged when ``policy`` accepts it.

    Args:
        target: Raw link text returned by the host.
        op: Operation name used when reporting a failure.
        path: Path of the link whose text is being validated.
        policy: Grammar to apply. Defaults to ``relative-v1``.

    Raises:
        MalformedLinkError: The target is absolute, empty or otherwise
            outside the grammar.
    """
    if not policy.accepts(target):
        raise MalformedLinkError(op, path, target)
    return target


def join(directory: str, name: str) -> str:
    """Join two valid paths, treating ``"."`` as the root."""
    if directory == ROOT:
        return name
    if name == ROOT:
        return directory
    return f"{directory}/{name}"


def parent(name: str) -> str:
    """Return the directory containing ``name`` (``"."`` for top-level names)."""
    return posixpath.dirname(name) or ROOT


def base(name: str) -> str:
    """Return the final path component of ``name``."""
    return posixpath.basename(name)


__all__ = [
    "DEFAULT_LINK_POLICY",
    "LINK_POLICIES",
    "RELATIVE_LINK_POLICY",
    "ROOT",
    "STRICT_LINK_POLICY",
    "LinkTargetPolicy",
    "base",
    "join",
    "parent",
    "valid_path",
    "validate_link_target",
    "validate_path",
]
