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

"""Property-based tests: entry-store invariants under random operations."""

from __future__ import annotations

from pathlib import Path

from hypothesis import given, settings, strategies as st

from tests.helpers import FakeStorage
from vfskit import HostFilesystem, InMemoryFilesystem, VfsError, VirtualFilesystem
from vfskit._path import is_canonical, parent_path

_names = st.sampled_from(["a", "b", "c.txt", ".", "..", ""])
_paths = st.lists(_names, min_size=1, max_size=4).map("/".join)
_absolute = _paths.map(lambda p: "/" + p)
_operations = st.lists(
    st.tuples(
        st.sampled_from(["mkdir", "mkfile", "rm", "cd", "write", "append"]),
        st.one_of(_paths, _absolute),
    ),
    max_size=25,
)


def _apply(fs: VirtualFilesystem, operation: str, path: str) -> str:
    try:
        match operation:
            case "mkdir":
                fs.mkdir(path)
            case "mkfile":
                fs.mkfile(path, path.encode())
            case "rm":
                fs.rm(path)
            case "cd":
                fs.cd(path)
            case "write":
                fs.write(path, b"w")
            case _:
                fs.append(path, b"+")
    except VfsError as err:
        return type(err).__name__
    return "ok"


def _assert_well_formed(fs: VirtualFilesystem) -> None:
    paths = fs.tree("/")
    assert fs.is_dir("/")
    assert fs.exists(fs.cwd) and fs.is_dir(fs.cwd)
    for path in paths:
        assert is_canonical(path)
        assert fs.is_dir(parent_path(path))
    assert len(paths) == len(set(paths))


@given(_operations)
@settings(max_examples=150, deadline=None)
def test_parents_stay_directories(operations: list[tuple[str, str]]) -> None:
    fs = InMemoryFilesystem()
    for operation, path in operations:
        _ = _apply(fs, operation, path)
        _assert_well_formed(fs)


@given(_operations)
@settings(max_examples=100, deadline=None)
def test_backends_agree(operations: list[tuple[str, str]]) -> None:
    memory = InMemoryFilesystem()
    storage = FakeStorage(dirs=["/srv"])
    host = HostFilesystem("/srv/vfs", storage=storage)

    for operation, path in operations:
        assert _apply(memory, operation, path) == _apply(host, operation, path)
        assert memory.cwd == host.cwd
        assert memory.tree("/") == host.tree("/")

    for path in memory.tree("/"):
        host_path = host.to_host(path)
        if memory.is_file(path):
            assert memory.read(path) == host.read(path) == storage.nodes[host_path]
        else:
            assert storage.is_dir(host_path)

    host.close()
    assert not storage.exists(Path("/srv/vfs"))
