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

"""Base exception hierarchy for :mod:`linkfs`.

Exception hierarchy::

    LinkfsError
    ├── PathError (operation, path and cause of a failed filesystem call)
    │   ├── InvalidPathError (path or argument rejected before any I/O)
    │   ├── UnsupportedError (optional capability missing on a handle)
    │   ├── NotFoundError (entry does not exist)
    │   └── MalformedLinkError (link target text violates its grammar)
    └── ConfigError (invalid configuration values)

Example::

    from linkfs import NotFoundError, PathError, lstat

    try:
        info = lstat(fsys, "docs/latest")
    except NotFoundError:
        info = None
    except PathError as e:
        logger.error("lstat failed: %s", e)
"""

from __future__ import annotations

import errno

__all__ = [
    "ConfigError",
    "InvalidPathError",
    "LinkfsError",
    "MalformedLinkError",
    "NotFoundError",
    "PathError",
    "UnsupportedError",
    "from_os_error",
    "rewrap",
    "unwrap",
]


class LinkfsError(Exception):
    """Base class for all linkfs exceptions.

    Callers can catch every library-specific failure with a single handler
    while standard Python exceptions raised by host code still propagate
    normally.

    Note:
        Subclasses may also inherit from standard exception types (e.g.,
        ``ValueError``, ``LookupError``) to enable more specific handling
        when needed.
    """


class PathError(LinkfsError):
    """Raised when a filesystem operation on a path fails.

    Attributes:
        op: Name of the failed operation (``"open"``, ``"lstat"``, ...).
        path: Path the operation was applied to. Subtree views rewrite this
            attribute so it is always relative to the root the caller sees.
        cause: Underlying reason for the failure. Usually an exception raised
            by the host, sometimes a short description string.

    A bare ``PathError`` (rather than one of its subclasses) represents an
    opaque host failure propagated unchanged.
    """

    def __init__(self, op: str, path: str, cause: BaseException | str) -> None:
        super().__init__(op, path, cause)
        self.op = op
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.op} {self.path}: {self.cause}"


class InvalidPathError(PathError, ValueError):
    """Raised when a path or argument fails validation.

    Grammar violations are detected locally and never reach the host. Hosts
    also raise this error for structurally invalid requests such as listing a
    regular file or reading the link text of a non-link.
    """

    def __init__(
        self, op: str, path: str, cause: BaseException | str = "invalid name"
    ) -> None:
        super().__init__(op, path, cause)


class UnsupportedError(PathError, NotImplementedError):
    """Raised when a handle lacks an optional capability an operation needs."""


class NotFoundError(PathError, LookupError):
    """Raised when the requested entry does not exist."""

    def __init__(
        self, op: str, path: str, cause: BaseException | str = "file does not exist"
    ) -> None:
        super().__init__(op, path, cause)


class MalformedLinkError(PathError, ValueError):
    """Raised when the text stored in a link violates the link-target grammar.

    Attributes:
        target: The offending link text, exactly as returned by the host.
    """

    def __init__(self, op: str, path: str, target: str) -> None:
        super().__init__(op, path, f"malformed link target: {target!r}")
        self.target = target
        self.args = (op, path, target)


class ConfigError(LinkfsError, ValueError):
    """Raised when the linkfs configuration is invalid."""


def unwrap(error: BaseException) -> BaseException | str:
    """Return the underlying cause of ``error``.

    ``PathError`` instances yield their ``cause``; other exceptions yield
    their explicit ``__cause__`` when chained, otherwise themselves.
    """

    if isinstance(error, PathError):
        return error.cause
    if error.__cause__ is not None:
        return error.__cause__
    return error


_UNSUPPORTED_ERRNOS = frozenset(
    {errno.ENOSYS, errno.ENOTSUP, getattr(errno, "EOPNOTSUPP", errno.ENOTSUP)}
)


def from_os_error(op: str, path: str, error: OSError) -> PathError:
    """Translate an ``OSError`` raised by the host into the linkfs taxonomy.

    The original exception is kept as the ``cause`` of the returned error.
    """

    if isinstance(error, FileNotFoundError):
        return NotFoundError(op, path, error)
    if (
        isinstance(error, (NotADirectoryError, IsADirectoryError))
        or error.errno == errno.EINVAL
    ):
        return InvalidPathError(op, path, error)
    if error.errno in _UNSUPPORTED_ERRNOS:
        return UnsupportedError(op, path, error)
    return PathError(op, path, error)


def rewrap(op: str, path: str, error: PathError) -> PathError:
    """Return an error of the same kind as ``error`` reported for ``op`` on ``path``.

    The new error carries the unwrapped cause of ``error`` so callers see the
    root failure rather than the intermediate operation that surfaced it.
    """

    for kind in (InvalidPathError, UnsupportedError, NotFoundError):
        if isinstance(error, kind):
            return kind(op, path, unwrap(error))
    return PathError(op, path, unwrap(error))
