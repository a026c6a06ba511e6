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

"""Storage port used by the host backend.

The host backend never calls :mod:`os` or :mod:`shutil` directly. Every host
effect goes through a :class:`StoragePort`, so tests can substitute an
in-process fake without touching real disk.

Ports raise plain :class:`OSError` subclasses; the backend translates them
into :class:`~vfskit.errors.StorageError`.

Symbolic links are opaque leaves: ``exists`` does not follow them, reading a
link returns the link target path, and removal deletes the link itself.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, override, runtime_checkable

__all__ = ["OsStorage", "StoragePort"]


@runtime_checkable
class StoragePort(Protocol):
    """Minimal set of host operations the host backend depends on."""

    def exists(self, path: Path) -> bool:
        """Return ``True`` when ``path`` exists, without following links."""
        ...

    def is_dir(self, path: Path, *, follow_symlinks: bool = False) -> bool:
        """Return ``True`` when ``path`` is a directory.

        Links are opaque leaves unless ``follow_symlinks`` is set.
        """
        ...

    def make_dir(self, path: Path) -> None:
        """Create exactly one directory; the parent must exist.

        Raises:
            FileExistsError: ``path`` already exists.
            FileNotFoundError: The parent is missing.
        """
        ...

    def create_file(self, path: Path, data: bytes) -> None:
        """Create or truncate ``path`` and write ``data`` to it."""
        ...

    def read_bytes(self, path: Path) -> bytes:
        """Return the full content of ``path`` without following links."""
        ...

    def replace_bytes(self, path: Path, data: bytes) -> None:
        """Replace the content of ``path`` in a single atomic step."""
        ...

    def append_bytes(self, path: Path, data: bytes) -> None:
        """Append ``data`` to an existing file."""
        ...

    def remove_file(self, path: Path) -> None:
        """Remove a file or link."""
        ...

    def remove_dir(self, path: Path) -> None:
        """Remove an empty directory."""
        ...

    def remove_tree(self, path: Path) -> None:
        """Remove a directory and everything beneath it."""
        ...

    def list_dir(self, path: Path) -> Sequence[str]:
        """Return the names inside directory ``path``."""
        ...


class OsStorage(StoragePort):
    """:class:`StoragePort` backed by the real host filesystem."""

    @override
    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    @override
    def is_dir(self, path: Path, *, follow_symlinks: bool = False) -> bool:
        if follow_symlinks:
            return path.is_dir()
        return path.is_dir() and not path.is_symlink()

    @override
    def make_dir(self, path: Path) -> None:
        path.mkdir()

    @override
    def create_file(self, path: Path, data: bytes) -> None:
        with path.open("wb") as handle:
            _ = handle.write(data)

    @override
    def read_bytes(self, path: Path) -> bytes:
        if path.is_symlink():
            return os.fsencode(os.readlink(path))
        return path.read_bytes()

    @override
    def replace_bytes(self, path: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as handle:
                _ = handle.write(data)
            if path.exists():
                shutil.copymode(path, tmp_name)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @override
    def append_bytes(self, path: Path, data: bytes) -> None:
        # "r+b" refuses to create a file that vanished out-of-band.
        with path.open("r+b") as handle:
            _ = handle.seek(0, os.SEEK_END)
            _ = handle.write(data)

    @override
    def remove_file(self, path: Path) -> None:
        path.unlink()

    @override
    def remove_dir(self, path: Path) -> None:
        path.rmdir()

    @override
    def remove_tree(self, path: Path) -> None:
        shutil.rmtree(path)

    @override
    def list_dir(self, path: Path) -> Sequence[str]:
        return sorted(os.listdir(path))
