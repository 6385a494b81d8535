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

"""Configuration loading for linkfs applications.

Settings come from a TOML or YAML file (or an in-memory mapping), then
environment variables override individual keys::

    batch_size = 250
    link_policy = "strict-v1"

    # or, nested
    [lstat]
    batch_size = 250

    [links]
    policy = "strict-v1"
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from ._path import DEFAULT_LINK_POLICY, LINK_POLICIES, LinkTargetPolicy
from ._types import LSTAT_BATCH_SIZE
from .errors import ConfigError

DEFAULT_CONFIG_PATH = Path("~/.config/linkfs/config.toml")

ENV_BATCH_SIZE = "LINKFS_BATCH_SIZE"
ENV_LINK_POLICY = "LINKFS_LINK_POLICY"

__all__ = ["DEFAULT_CONFIG_PATH", "LinkfsConfig", "load_config"]


@dataclass(frozen=True, slots=True)
class LinkfsConfig:
    """Resolved linkfs settings.

    Attributes:
        batch_size: Directory entries requested per batch by ``lstat``.
        link_policy: Name of the link-target policy in ``LINK_POLICIES``.
    """

    batch_size: int = LSTAT_BATCH_SIZE
    link_policy: str = DEFAULT_LINK_POLICY.name

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            msg = f"batch_size must be positive (got {self.batch_size})."
            raise ConfigError(msg)
        if self.link_policy not in LINK_POLICIES:
            known = ", ".join(sorted(LINK_POLICIES))
            msg = f"Unknown link policy {self.link_policy!r}; expected one of: {known}."
            raise ConfigError(msg)

    @property
    def policy(self) -> LinkTargetPolicy:
        return LINK_POLICIES[self.link_policy]


def load_config(
    source: Path | Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> LinkfsConfig:
    """Load and validate the linkfs configuration.

    Parameters
    ----------
    source:
        Path to a ``.toml``, ``.yaml`` or ``.yml`` file, or a mapping. ``None``
        falls back to ``~/.config/linkfs/config.toml`` when it exists.
    env:
        Optional environment mapping. Defaults to :data:`os.environ`.

    Raises
    ------
    ConfigError
        A value is malformed or out of range.
    FileNotFoundError
        An explicitly requested file does not exist.
    """

    env_map = os.environ if env is None else env

    if isinstance(source, Mapping):
        raw: dict[str, object] = dict(cast(Mapping[str, object], source))
    else:
        config_path = (
            source if source is not None else DEFAULT_CONFIG_PATH.expanduser()
        )
        raw = _load_config_file(config_path)

    values = _normalise_config(raw)
    if ENV_BATCH_SIZE in env_map:
        values["batch_size"] = env_map[ENV_BATCH_SIZE]
    if ENV_LINK_POLICY in env_map:
        values["link_policy"] = env_map[ENV_LINK_POLICY]

    return LinkfsConfig(
        batch_size=_coerce_int("batch_size", values.get("batch_size")),
        link_policy=_coerce_str("link_policy", values.get("link_policy")),
    )


def _load_config_file(path: Path) -> dict[str, object]:
    if not path.exists():
        if path == DEFAULT_CONFIG_PATH.expanduser():
            return {}
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    suffix = path.suffix.lower()
    data: object
    try:
        if suffix == ".toml" or not suffix:
            with path.open("rb") as handle:
                data = tomllib.load(handle)
        elif suffix in {".yaml", ".yml"}:
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        else:
            msg = f"Unsupported configuration format: {path.suffix}"
            raise ConfigError(msg)
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as error:
        msg = f"Could not parse configuration file {path}: {error}"
        raise ConfigError(msg) from error

    if not isinstance(data, MutableMapping):
        msg = "Configuration file must contain a mapping at the root."
        raise ConfigError(msg)

    typed: dict[str, object] = {}
    for key, value in cast(MutableMapping[object, object], data).items():
        if not isinstance(key, str):
            msg = f"Configuration keys must be strings (got {key!r})."
            raise ConfigError(msg)
        typed[key] = value
    return typed


def _normalise_config(raw: Mapping[str, object]) -> dict[str, object]:
    values: dict[str, object] = {
        "batch_size": raw.get("batch_size"),
        "link_policy": raw.get("link_policy"),
    }
    lstat_section = raw.get("lstat")
    if isinstance(lstat_section, Mapping) and values["batch_size"] is None:
        values["batch_size"] = cast(Mapping[str, object], lstat_section).get(
            "batch_size"
        )
    links_section = raw.get("links")
    if isinstance(links_section, Mapping) and values["link_policy"] is None:
        values["link_policy"] = cast(Mapping[str, object], links_section).get(
            "policy"
        )
    return values


def _coerce_int(key: str, value: object) -> int:
    if value is None:
        return LSTAT_BATCH_SIZE
    if isinstance(value, bool):
        msg = f"{key} must be an integer (got {value!r})."
        raise ConfigError(msg)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            msg = f"{key} must be an integer (got {value!r})."
            raise ConfigError(msg) from None
    msg = f"{key} must be an integer (got {value!r})."
    raise ConfigError(msg)


def _coerce_str(key: str, value: object) -> str:
    if value is None:
        return DEFAULT_LINK_POLICY.name
    if isinstance(value, str) and value.strip():
        return value.strip()
    msg = f"{key} must be a non-empty string (got {value!r})."
    raise ConfigError(msg)
