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

"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from linkfs import (
    LSTAT_BATCH_SIZE,
    RELATIVE_LINK_POLICY,
    STRICT_LINK_POLICY,
    ConfigError,
)
from linkfs.config import LinkfsConfig, load_config


class TestDefaults:
    def test_empty_mapping_uses_defaults(self) -> None:
        config = load_config({}, env={})
        assert config == LinkfsConfig()
        assert config.batch_size == LSTAT_BATCH_SIZE
        assert config.policy is RELATIVE_LINK_POLICY

    def test_missing_default_file_uses_defaults(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        assert load_config(env={}) == LinkfsConfig()


class TestSources:
    def test_flat_mapping(self) -> None:
        config = load_config({"batch_size": 5, "link_policy": "strict-v1"}, env={})
        assert config.batch_size == 5
        assert config.policy is STRICT_LINK_POLICY

    def test_nested_sections(self) -> None:
        config = load_config(
            {"lstat": {"batch_size": 7}, "links": {"policy": "strict-v1"}}, env={}
        )
        assert config.batch_size == 7
        assert config.link_policy == "strict-v1"

    def test_flat_keys_win_over_sections(self) -> None:
        config = load_config({"batch_size": 3, "lstat": {"batch_size": 9}}, env={})
        assert config.batch_size == 3

    def test_toml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "linkfs.toml"
        _ = path.write_text(
            '[lstat]\nbatch_size = 25\n\n[links]\npolicy = "strict-v1"\n'
        )
        config = load_config(path, env={})
        assert config.batch_size == 25
        assert config.link_policy == "strict-v1"

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "linkfs.yaml"
        _ = path.write_text("batch_size: 12\nlink_policy: relative-v1\n")
        config = load_config(path, env={})
        assert config.batch_size == 12
        assert config.link_policy == "relative-v1"

    def test_empty_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "linkfs.yml"
        _ = path.write_text("")
        assert load_config(path, env={}) == LinkfsConfig()

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            _ = load_config(tmp_path / "absent.toml", env={})

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "linkfs.json"
        _ = path.write_text("{}")
        with pytest.raises(ConfigError, match="Unsupported configuration format"):
            _ = load_config(path, env={})

    @pytest.mark.parametrize(
        ("name", "text"),
        [("linkfs.toml", "batch_size = = 3\n"), ("linkfs.yaml", "batch_size: [1\n")],
    )
    def test_unparseable_file(self, tmp_path: Path, name: str, text: str) -> None:
        path = tmp_path / name
        _ = path.write_text(text)
        with pytest.raises(ConfigError, match="Could not parse"):
            _ = load_config(path, env={})

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "linkfs.yaml"
        _ = path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping at the root"):
            _ = load_config(path, env={})

    def test_non_string_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "linkfs.yaml"
        _ = path.write_text("1: 2\n")
        with pytest.raises(ConfigError, match="keys must be strings"):
            _ = load_config(path, env={})


class TestEnvironment:
    def test_env_overrides_file_values(self) -> None:
        config = load_config(
            {"batch_size": 5, "link_policy": "strict-v1"},
            env={"LINKFS_BATCH_SIZE": " 40 ", "LINKFS_LINK_POLICY": "relative-v1"},
        )
        assert config.batch_size == 40
        assert config.policy is RELATIVE_LINK_POLICY

    def test_invalid_env_value(self) -> None:
        with pytest.raises(ConfigError, match="batch_size must be an integer"):
            _ = load_config({}, env={"LINKFS_BATCH_SIZE": "many"})


class TestValidation:
    @pytest.mark.parametrize("value", [0, -1])
    def test_batch_size_must_be_positive(self, value: int) -> None:
        with pytest.raises(ConfigError, match="must be positive"):
            _ = LinkfsConfig(batch_size=value)

    @pytest.mark.parametrize("value", [True, 1.5, [1]])
    def test_batch_size_must_be_integer(self, value: object) -> None:
        with pytest.raises(ConfigError, match="must be an integer"):
            _ = load_config({"batch_size": value}, env={})

    def test_unknown_policy(self) -> None:
        with pytest.raises(ConfigError, match="Unknown link policy 'lenient'"):
            _ = load_config({"link_policy": "lenient"}, env={})

    @pytest.mark.parametrize("value", ["", "   ", 3])
    def test_policy_must_be_non_empty_string(self, value: object) -> None:
        with pytest.raises(ConfigError, match="non-empty string"):
            _ = load_config({"link_policy": value}, env={})

    def test_config_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            _ = LinkfsConfig(link_policy="nope")
