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

"""Entry-lifecycle logic shared by every backend.

:class:`BaseFilesystem` owns the entry store and the working directory and
implements resolution, queries and the create/remove algorithms. Subclasses
only decide where file content lives by implementing the storage hooks
(``_create_dir``, ``_create_file``, ``_read_file``, ``_replace_file``,
``_append_file``, ``_remove_artifact`` and ``cleanup``).

Every hook runs before the entry store is updated, so a failing hook leaves
the store describing what physically exists. A hook that fails partway, such
as a recursive host removal, untracks what it already removed before raising.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ._path import (
    ROOT,
    is_descendant,
    normalize_path,
    parent_path,
    path_sort_key,
    to_host_path,
)
from ._protocol import CreateMode
from ._store import EntryStore
from ._types import Entry
from .errors import (
    AlreadyExistsError,
    InvalidPathError,
    IsADirectoryVfsError,
)
from .logging import StructuredLogger, get_logger

__all__ = ["BaseFilesystem"]

_CREATE_MODES: frozenset[str] = frozenset({"overwrite", "create"})


def _missing_segments(ancestor: str, target: str) -> list[str]:
    """Return every path strictly below ``ancestor`` down to ``target``."""
    depth = len(path_sort_key(ancestor))
    segments = path_sort_key(target)
    return [
        ROOT + "/".join(segments[:end]) for end in range(depth + 1, len(segments) + 1)
    ]


class BaseFilesystem(ABC):
    """Shared implementation of :class:`~vfskit.VirtualFilesystem`."""

    _backend: str = "base"

    def __init__(self) -> None:
        super().__init__()
        self._entries = EntryStore()
        self._cwd = ROOT
        self._logger: StructuredLogger = get_logger(
            __name__, context={"backend": self._backend}
        )

    # --- Navigation ---

    @property
    @abstractmethod
    def root(self) -> Path: ...

    @property
    def cwd(self) -> str:
        return self._cwd

    def _resolve(self, path: str) -> str:
        return normalize_path(path, self._cwd)

    def cd(self, path: str) -> None:
        target = self._resolve(path)
        if not self._entries.lookup(target).is_dir:
            raise InvalidPathError(f"{target} is not a directory")
        self._cwd = target

    def _leave_removed(self, target: str) -> None:
        """Move the working directory out of a subtree that is no longer tracked."""
        if self._cwd == target or is_descendant(self._cwd, target):
            self._cwd = parent_path(target)

    def to_host(self, path: str) -> Path:
        return to_host_path(self.root, self._resolve(path))

    # --- Queries ---

    def exists(self, path: str) -> bool:
        return self._resolve(path) in self._entries

    def is_dir(self, path: str) -> bool:
        return self._entries.lookup(self._resolve(path)).is_dir

    def is_file(self, path: str) -> bool:
        return self._entries.lookup(self._resolve(path)).is_file

    def ls(self, path: str = "") -> list[str]:
        target = self._resolve(path)
        if self._entries.lookup(target).is_file:
            return [target]
        return self._entries.children(target)

    def tree(self, path: str = "") -> list[str]:
        target = self._resolve(path)
        if self._entries.lookup(target).is_file:
            return [target]
        return self._entries.descendants(target)

    # --- Mutations ---

    def mkdir(self, path: str) -> None:
        if not path:
            raise InvalidPathError("invalid path: empty")
        target = self._resolve(path)
        if target in self._entries:
            raise AlreadyExistsError(f"path already exists: {target}")

        ancestor = self._entries.nearest_ancestor(target)
        if not self._entries.lookup(ancestor).is_dir:
            raise InvalidPathError(f"{ancestor} is a file, cannot create {target}")

        for directory in _missing_segments(ancestor, target):
            self._create_dir(directory)
            self._entries.insert(directory, Entry.directory())
            self._logger.debug(
                "Created directory.", event="vfs.mkdir", context={"path": directory}
            )

    def mkfile(
        self,
        path: str,
        content: bytes | None = None,
        *,
        mode: CreateMode = "overwrite",
    ) -> None:
        if mode not in _CREATE_MODES:
            raise ValueError(f"Unknown create mode: {mode!r}")
        if not path:
            raise InvalidPathError("invalid path: empty")
        target = self._resolve(path)
        if target == ROOT:
            raise InvalidPathError("the root is a directory, not a file")

        existing = self._entries.get(target)
        if existing is not None:
            if existing.is_dir:
                raise IsADirectoryVfsError(f"{target} is a directory")
            if mode == "create":
                raise AlreadyExistsError(f"file already exists: {target}")

        parent = parent_path(target)
        parent_entry = self._entries.get(parent)
        if parent_entry is None:
            self.mkdir(parent)
        elif not parent_entry.is_dir:
            raise InvalidPathError(f"{parent} is a file, cannot create {target}")

        entry = self._create_file(target, content or b"")
        self._entries.insert(target, entry)
        self._logger.debug(
            "Created file.",
            event="vfs.mkfile",
            context={
                "path": target,
                "size": len(content or b""),
                "replaced": existing is not None,
            },
        )

    def _file_entry(self, target: str) -> Entry:
        entry = self._entries.lookup(target)
        if entry.is_dir:
            raise IsADirectoryVfsError(f"{target} is a directory")
        return entry

    def read(self, path: str) -> bytes:
        target = self._resolve(path)
        return self._read_file(target, self._file_entry(target))

    def write(self, path: str, content: bytes) -> None:
        target = self._resolve(path)
        entry = self._replace_file(target, self._file_entry(target), content)
        self._entries.insert(target, entry)

    def append(self, path: str, content: bytes) -> None:
        target = self._resolve(path)
        entry = self._append_file(target, self._file_entry(target), content)
        self._entries.insert(target, entry)

    def rm(self, path: str) -> None:
        if not path:
            raise InvalidPathError("invalid path: empty")
        target = self._resolve(path)
        if target == ROOT:
            raise InvalidPathError("invalid path: the root cannot be removed")
        entry = self._entries.lookup(target)

        self._remove_artifact(target, entry)
        removed = self._entries.remove_subtree(target)
        self._leave_removed(target)
        self._logger.debug(
            "Removed entry.",
            event="vfs.rm",
            context={"path": target, "removed": len(removed)},
        )

    @abstractmethod
    def cleanup(self) -> bool: ...

    # --- Storage hooks ---

    @abstractmethod
    def _create_dir(self, path: str) -> None: ...

    @abstractmethod
    def _create_file(self, path: str, content: bytes) -> Entry: ...

    @abstractmethod
    def _read_file(self, path: str, entry: Entry) -> bytes: ...

    @abstractmethod
    def _replace_file(self, path: str, entry: Entry, content: bytes) -> Entry: ...

    @abstractmethod
    def _append_file(self, path: str, entry: Entry, content: bytes) -> Entry: ...

    @abstractmethod
    def _remove_artifact(self, path: str, entry: Entry) -> None: ...
