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

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from linkfs import HostFilesystem, MapFile, MapFilesystem

LINK_MODE = stat.S_IFLNK | 0o666


@pytest.fixture
def map_fs() -> MapFilesystem:
    """Return an in-memory tree with files, directories and links.

    Layout::

        file                  "file contents"
        link -> file
        dir/a.txt             "a"
        dir/nested/b.txt      "b"
        dir/up -> ..
        dir/sibling -> ../file
        dir/nested/deep -> ../../dir/a.txt
        broken -> missing
        absolute -> /etc/passwd
        dotted -> ./file
    """

    return MapFilesystem(
        {
            "file": MapFile(b"file contents", mode=0o600),
            "link": MapFile(b"file", mode=LINK_MODE),
            "dir/a.txt": MapFile(b"a"),
            "dir/nested/b.txt": MapFile(b"b"),
            "dir/up": MapFile(b"..", mode=LINK_MODE),
            "dir/sibling": MapFile(b"../file", mode=LINK_MODE),
            "dir/nested/deep": MapFile(b"../../dir/a.txt", mode=LINK_MODE),
            "broken": MapFile(b"missing", mode=LINK_MODE),
            "absolute": MapFile(b"/etc/passwd", mode=LINK_MODE),
            "dotted": MapFile(b"./file", mode=LINK_MODE),
        }
    )


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    """Create a host directory mirroring the ``map_fs`` layout."""

    root = tmp_path / "root"
    (root / "dir" / "nested").mkdir(parents=True)
    _ = (root / "file").write_bytes(b"file contents")
    _ = (root / "dir" / "a.txt").write_bytes(b"a")
    _ = (root / "dir" / "nested" / "b.txt").write_bytes(b"b")
    os.symlink("file", root / "link")
    os.symlink("..", root / "dir" / "up")
    os.symlink("../file", root / "dir" / "sibling")
    os.symlink("../../dir/a.txt", root / "dir" / "nested" / "deep")
    os.symlink("missing", root / "broken")
    os.symlink(str(tmp_path / "outside.txt"), root / "absolute")
    _ = (tmp_path / "outside.txt").write_bytes(b"outside")
    os.symlink("../outside.txt", root / "escape")
    return root


@pytest.fixture
def host_fs(host_root: Path) -> HostFilesystem:
    return HostFilesystem(root=str(host_root))
