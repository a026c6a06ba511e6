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

"""In-memory virtual filesystem.

The entry store is the only source of truth: file bytes live in each entry's
:class:`~vfskit._types.MemoryContent`. Nothing touches host storage, so the
root is advisory and only used by :meth:`InMemoryFilesystem.to_host`.

Example usage::

    from vfskit import InMemoryFilesystem

    fs = InMemoryFilesystem()
    fs.mkfile("/docs/note.txt", b"Hello")
    assert fs.read("/docs/note.txt") == b"Hello"
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import override

from ._base import BaseFilesystem
from ._path import ROOT
from ._types import Entry, MemoryContent
from .errors import InvalidPathError

__all__ = ["InMemoryFilesystem"]


def _content_of(entry: Entry) -> MemoryContent:
    content = entry.content
    if isinstance(content, MemoryContent):
        return content
    return MemoryContent()


class InMemoryFilesystem(BaseFilesystem):
    """Virtual filesystem whose entries and content live in process memory."""

    _backend = "memory"

    def __init__(self, root: str | Path = "/") -> None:
        super().__init__()
        self._root = Path("/")
        self.set_root(root)

    @property
    @override
    def root(self) -> Path:
        return self._root

    def set_root(self, path: str | Path) -> None:
        """Set the advisory root used by :meth:`to_host`.

        Raises:
            InvalidPathError: ``path`` is empty or relative.
        """
        if not str(path) or not PurePosixPath(path).is_absolute():
            raise InvalidPathError(f"root must be an absolute path: {path!r}")
        self._root = Path(path)

    @override
    def cleanup(self) -> bool:
        self._entries.reset()
        self._cwd = ROOT
        return True

    @override
    def _create_dir(self, path: str) -> None:
        pass

    @override
    def _create_file(self, path: str, content: bytes) -> Entry:
        return Entry.memory_file(bytes(content))

    @override
    def _read_file(self, path: str, entry: Entry) -> bytes:
        return _content_of(entry).data

    @override
    def _replace_file(self, path: str, entry: Entry, content: bytes) -> Entry:
        return entry.with_content(MemoryContent(bytes(content)))

    @override
    def _append_file(self, path: str, entry: Entry, content: bytes) -> Entry:
        return entry.with_content(_content_of(entry).extended(bytes(content)))

    @override
    def _remove_artifact(self, path: str, entry: Entry) -> None:
        pass
