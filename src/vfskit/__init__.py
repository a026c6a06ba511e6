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

"""Virtual filesystem with host-backed and in-memory backends.

Both backends share one path model: inputs are resolved against the current
working directory into canonical inner paths, and every node is tracked in an
ordered entry store so the instance can remove exactly what it created.

Example usage::

    from vfskit import HostFilesystem, InMemoryFilesystem, VirtualFilesystem

    def seed(fs: VirtualFilesystem) -> None:
        fs.mkdir("/project/src")
        fs.mkfile("/project/main.py", b"print('hi')")

    seed(InMemoryFilesystem())
    with HostFilesystem("/tmp/vfskit-demo") as fs:
        seed(fs)
"""

from __future__ import annotations

from ._host import HostFilesystem
from ._memory import InMemoryFilesystem
from ._path import ROOT, normalize_path
from ._protocol import CreateMode, VirtualFilesystem
from ._storage import OsStorage, StoragePort
from ._types import Entry, EntryKind
from .errors import (
    AlreadyExistsError,
    InvalidPathError,
    IsADirectoryVfsError,
    NotFoundError,
    StorageError,
    VfsError,
)

__all__ = [
    "ROOT",
    "AlreadyExistsError",
    "CreateMode",
    "Entry",
    "EntryKind",
    "HostFilesystem",
    "InMemoryFilesystem",
    "InvalidPathError",
    "IsADirectoryVfsError",
    "NotFoundError",
    "OsStorage",
    "StorageError",
    "StoragePort",
    "VfsError",
    "VirtualFilesystem",
    "normalize_path",
]
