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

"""Virtual filesystem protocol shared by the host and memory backends.

Implementations:

- ``HostFilesystem``: entries mirror a subtree of a real host directory.
- ``InMemoryFilesystem``: entries and file content live in process memory.

Every path parameter accepts an absolute inner path (``/docs/a.txt``) or a
path relative to :attr:`VirtualFilesystem.cwd`. Paths returned by ``ls`` and
``tree`` are canonical inner paths in hierarchical order.

Example::

    def snapshot(fs: VirtualFilesystem) -> dict[str, bytes]:
        return {path: fs.read(path) for path in fs.tree("/") if fs.is_file(path)}
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Protocol, runtime_checkable

type CreateMode = Literal["overwrite", "create"]


@runtime_checkable
class VirtualFilesystem(Protocol):
    """Uniform hierarchical file and directory operations."""

    # --- Navigation ---

    @property
    def root(self) -> Path:
        """Host anchoring path of the filesystem."""
        ...

    @property
    def cwd(self) -> str:
        """Current working directory as a canonical inner path."""
        ...

    def cd(self, path: str) -> None:
        """Change the working directory.

        Raises:
            NotFoundError: ``path`` is not tracked.
            InvalidPathError: ``path`` is a file.
        """
        ...

    def to_host(self, path: str) -> Path:
        """Anchor ``path`` under :attr:`root` without checking existence."""
        ...

    # --- Queries ---

    def exists(self, path: str) -> bool:
        """Return ``True`` when ``path`` is tracked."""
        ...

    def is_dir(self, path: str) -> bool:
        """Return ``True`` when ``path`` is a tracked directory.

        Raises:
            NotFoundError: ``path`` is not tracked.
        """
        ...

    def is_file(self, path: str) -> bool:
        """Return ``True`` when ``path`` is a tracked file.

        Raises:
            NotFoundError: ``path`` is not tracked.
        """
        ...

    def ls(self, path: str = "") -> list[str]:
        """Return the direct children of ``path``.

        A file path yields a one-element list containing the file itself.

        Raises:
            NotFoundError: ``path`` is not tracked.
        """
        ...

    def tree(self, path: str = "") -> list[str]:
        """Return every descendant of ``path``, excluding ``path`` itself.

        A file path yields a one-element list containing the file itself.

        Raises:
            NotFoundError: ``path`` is not tracked.
        """
        ...

    # --- Mutations ---

    def mkdir(self, path: str) -> None:
        """Create ``path`` and any missing intermediate directories.

        Raises:
            InvalidPathError: ``path`` is empty or lies beneath a file.
            AlreadyExistsError: ``path`` is already tracked.
            StorageError: Host storage failed.
        """
        ...

    def mkfile(
        self,
        path: str,
        content: bytes | None = None,
        *,
        mode: CreateMode = "overwrite",
    ) -> None:
        """Create a file, auto-creating missing parent directories.

        With ``mode="overwrite"`` an existing file is truncated and refilled;
        with ``mode="create"`` it is an error.

        Raises:
            InvalidPathError: ``path`` is empty, the root, or beneath a file.
            AlreadyExistsError: ``mode="create"`` and ``path`` is tracked.
            IsADirectoryVfsError: ``path`` is a tracked directory.
            StorageError: Host storage failed.
        """
        ...

    def read(self, path: str) -> bytes:
        """Return the full content of a file.

        Raises:
            NotFoundError: ``path`` is not tracked.
            IsADirectoryVfsError: ``path`` is a directory.
            StorageError: Host storage failed.
        """
        ...

    def write(self, path: str, content: bytes) -> None:
        """Replace the content of an existing file.

        Raises:
            NotFoundError: ``path`` is not tracked.
            IsADirectoryVfsError: ``path`` is a directory.
            StorageError: Host storage failed.
        """
        ...

    def append(self, path: str, content: bytes) -> None:
        """Append to the content of an existing file.

        Raises:
            NotFoundError: ``path`` is not tracked.
            IsADirectoryVfsError: ``path`` is a directory.
            StorageError: Host storage failed.
        """
        ...

    def rm(self, path: str) -> None:
        """Remove ``path`` and, for a directory, everything beneath it.

        Raises:
            InvalidPathError: ``path`` is empty or the root.
            NotFoundError: ``path`` is not tracked.
            StorageError: Host storage failed.
        """
        ...

    def cleanup(self) -> bool:
        """Remove every tracked entry except the root.

        Per-entry failures are logged, not raised.

        Returns:
            ``True`` when every entry was removed.
        """
        ...


__all__ = ["CreateMode", "VirtualFilesystem"]
