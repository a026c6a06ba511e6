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

"""Host filesystem backend.

Entries mirror a subtree of a real directory anchored at ``root``. The entry
store tracks existence and kind only; file bytes live on host storage and are
reached through an injected :class:`~vfskit._storage.StoragePort`.

Everything the instance creates is tracked. With ``auto_clean`` enabled,
:meth:`HostFilesystem.close` removes those artifacts, deepest first, and then
removes the host directories that were created only to make ``root`` exist.
Python has no deterministic destructor, so disposal is explicit: call
``close()`` or use the instance as a context manager. Skipping it leaves the
artifacts on host storage.

Example usage::

    from vfskit import HostFilesystem

    with HostFilesystem("/tmp/scratch/run-1") as fs:
        fs.mkfile("/docs/note.txt", b"Hello")
        assert fs.read("docs/note.txt") == b"Hello"
    # /tmp/scratch/run-1 and anything created for it are gone again
"""

from __future__ import annotations

import errno
import os
from pathlib import Path
from types import TracebackType
from typing import Self, override

from ._base import BaseFilesystem
from ._lifecycle import RootLifecycle, check_writable, remove_tracked
from ._path import ROOT, SEPARATOR, parent_path, to_host_path
from ._storage import OsStorage, StoragePort
from ._types import Entry
from .errors import InvalidPathError, NotFoundError, StorageError

__all__ = ["HostFilesystem"]


def _anchor(root: str | Path) -> Path:
    text = os.fspath(root)
    if not text:
        raise InvalidPathError("root must not be empty")
    if not os.path.isabs(text):
        raise InvalidPathError(f"root must be an absolute path: {text}")
    return Path(os.path.normpath(text))


class HostFilesystem(BaseFilesystem):
    """Virtual filesystem mirrored onto a host directory.

    Args:
        root: Absolute host directory. Missing directories are created and
            remembered so teardown can remove them again.
        auto_clean: Remove every tracked artifact on :meth:`close`.
        storage: Storage port; defaults to :class:`~vfskit._storage.OsStorage`.

    Raises:
        InvalidPathError: ``root`` is empty, relative, or an existing
            non-directory.
        StorageError: ``root`` could not be created or is not writable.
    """

    _backend = "host"

    def __init__(
        self,
        root: str | Path,
        *,
        auto_clean: bool = True,
        storage: StoragePort | None = None,
    ) -> None:
        super().__init__()
        self._storage: StoragePort = storage if storage is not None else OsStorage()
        self._root = _anchor(root)
        self._auto_clean = auto_clean
        self._logger = self._logger.bind(root=str(self._root))

        # The anchor may be a link to a directory, e.g. /tmp on macOS.
        if self._storage.exists(self._root) and not self._storage.is_dir(
            self._root, follow_symlinks=True
        ):
            raise InvalidPathError(f"root is not a directory: {self._root}")
        try:
            self._lifecycle = RootLifecycle.prepare(self._storage, self._root)
        except OSError as err:
            raise StorageError.wrap(err, f"create root {self._root}") from err
        if not check_writable(self._storage, self._root):
            self._lifecycle.rollback()
            raise StorageError(errno.EACCES, f"root is not writable: {self._root}")

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    @override
    def root(self) -> Path:
        return self._root

    @property
    def auto_clean(self) -> bool:
        return self._auto_clean

    @property
    def created_root_parents(self) -> tuple[Path, ...]:
        """Host directories created to make ``root`` exist, oldest first."""
        return tuple(self._lifecycle.created_root_parents)

    @property
    def closed(self) -> bool:
        return self._lifecycle.closed

    def set_auto_clean(self, clean: bool) -> None:
        """Choose whether :meth:`close` removes the artifacts this instance created."""
        self._auto_clean = clean

    def close(self) -> None:
        """Dispose of the instance; teardown runs at most once.

        With ``auto_clean`` enabled this runs :meth:`cleanup` and then removes
        the directories created for the root, newest first. Host failures are
        logged and never raised.
        """
        if self._lifecycle.closed:
            return
        if not self._auto_clean:
            self._lifecycle.closed = True
            return
        if self._lifecycle.teardown(self._entries):
            self._cwd = ROOT

    @override
    def cleanup(self) -> bool:
        complete = remove_tracked(self._entries, self._storage, self._root)
        if self._cwd not in self._entries:
            self._cwd = ROOT
        return complete

    # --- Tracking of pre-existing artifacts ---

    def add(self, path: str) -> None:
        """Start tracking an artifact that already exists under ``root``.

        Directories are adopted recursively and missing tracked ancestors are
        adopted as directories. Adopted artifacts are removed by cleanup.

        Raises:
            NotFoundError: The host artifact does not exist.
            InvalidPathError: An ancestor is tracked as a file.
            StorageError: Host storage failed while listing a directory.
        """
        target = self._resolve(path)
        host = to_host_path(self._root, target)
        if not self._storage.exists(host):
            raise NotFoundError(f"No such file or directory: {path}")

        if target != ROOT:
            ancestor = self._entries.nearest_ancestor(target)
            if not self._entries.lookup(ancestor).is_dir:
                raise InvalidPathError(f"{ancestor} is a file, cannot add {target}")
            missing: list[str] = []
            current = target
            while (current := parent_path(current)) != ancestor:
                missing.append(current)
            for directory in reversed(missing):
                self._entries.insert(directory, Entry.directory())

        try:
            self._adopt(target, host)
        except OSError as err:
            raise StorageError.wrap(err, f"add {target}") from err
        self._logger.debug("Adopted host artifact.", event="vfs.add", context={"path": target})

    def _adopt(self, inner: str, host: Path) -> None:
        is_dir = self._storage.is_dir(host, follow_symlinks=inner == ROOT)
        if inner != ROOT:
            self._entries.insert(inner, Entry.directory() if is_dir else Entry.host_file())
        if not is_dir:
            return
        prefix = "" if inner == ROOT else inner
        for name in self._storage.list_dir(host):
            self._adopt(f"{prefix}{SEPARATOR}{name}", host / name)

    def forget(self, path: str) -> None:
        """Stop tracking ``path`` and its descendants without touching the host.

        Raises:
            NotFoundError: ``path`` is not tracked.
            InvalidPathError: ``path`` is the root.
        """
        target = self._resolve(path)
        _ = self._entries.lookup(target)
        if target == ROOT:
            raise InvalidPathError("cannot forget the root directory")
        removed = self._entries.remove_subtree(target)
        self._leave_removed(target)
        self._logger.debug(
            "Forgot entry.",
            event="vfs.forget",
            context={"path": target, "removed": len(removed)},
        )

    # --- Storage hooks ---

    @override
    def _create_dir(self, path: str) -> None:
        host = to_host_path(self._root, path)
        try:
            self._storage.make_dir(host)
        except OSError as err:
            raise StorageError.wrap(err, f"mkdir {path}") from err

    @override
    def _create_file(self, path: str, content: bytes) -> Entry:
        host = to_host_path(self._root, path)
        try:
            self._storage.create_file(host, content)
        except OSError as err:
            raise StorageError.wrap(err, f"mkfile {path}") from err
        return Entry.host_file()

    @override
    def _read_file(self, path: str, entry: Entry) -> bytes:
        host = to_host_path(self._root, path)
        try:
            return self._storage.read_bytes(host)
        except OSError as err:
            raise StorageError.wrap(err, f"read {path}") from err

    @override
    def _replace_file(self, path: str, entry: Entry, content: bytes) -> Entry:
        host = to_host_path(self._root, path)
        try:
            self._storage.replace_bytes(host, content)
        except OSError as err:
            raise StorageError.wrap(err, f"write {path}") from err
        return entry

    @override
    def _append_file(self, path: str, entry: Entry, content: bytes) -> Entry:
        host = to_host_path(self._root, path)
        try:
            self._storage.append_bytes(host, content)
        except OSError as err:
            raise StorageError.wrap(err, f"append {path}") from err
        return entry

    @override
    def _remove_artifact(self, path: str, entry: Entry) -> None:
        host = to_host_path(self._root, path)
        try:
            if entry.is_dir and self._storage.is_dir(host):
                self._storage.remove_tree(host)
            else:
                self._storage.remove_file(host)
        except FileNotFoundError:
            # Removed out-of-band; the entry store still has to follow.
            return
        except OSError as err:
            self._untrack_vanished(path)
            raise StorageError.wrap(err, f"rm {path}") from err

    def _untrack_vanished(self, path: str) -> None:
        # A recursive removal can fail partway; drop what is already gone.
        for descendant in reversed(self._entries.descendants(path)):
            if self._entries.has_descendants(descendant):
                continue
            if not self._storage.exists(to_host_path(self._root, descendant)):
                self._entries.discard(descendant)
        if self._cwd not in self._entries:
            self._cwd = self._entries.nearest_ancestor(self._cwd)
