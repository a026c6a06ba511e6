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

"""Root preparation and ordered teardown for the host backend.

:class:`RootLifecycle` remembers which host directories were created only to
make the declared root exist. Teardown removes exactly those, newest first,
after the tracked entries have been removed deepest first.

Directory removal here never recurses: a directory that still holds foreign
(untracked) content survives and the failure is logged instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ._path import ROOT, to_host_path
from ._storage import StoragePort
from ._store import EntryStore
from .logging import StructuredLogger, get_logger

__all__ = ["ACCESS_SENTINEL", "RootLifecycle", "check_writable", "remove_tracked"]

ACCESS_SENTINEL = ".access"

_logger: StructuredLogger = get_logger(__name__, context={"component": "lifecycle"})


def check_writable(storage: StoragePort, root: Path) -> bool:
    """Write then delete a sentinel file under ``root``."""
    sentinel = root / ACCESS_SENTINEL
    try:
        storage.create_file(sentinel, b"check")
        storage.remove_file(sentinel)
    except OSError:
        return False
    return True


def _make_dirs(storage: StoragePort, target: Path) -> list[Path]:
    """Create ``target`` and any missing ancestors, returning what was created.

    If a step fails, directories created so far are removed again before the
    error propagates.
    """
    missing: list[Path] = []
    current = target
    while not storage.exists(current):
        missing.append(current)
        if current.parent == current:
            break
        current = current.parent

    created: list[Path] = []
    for directory in reversed(missing):
        try:
            storage.make_dir(directory)
        except OSError:
            _rollback(storage, created)
            raise
        created.append(directory)
    return created


def _rollback(storage: StoragePort, created: list[Path]) -> None:
    for directory in reversed(created):
        try:
            storage.remove_dir(directory)
        except OSError as err:
            _logger.warning(
                "Unable to roll back root directory.",
                event="vfs.root.rollback_failed",
                context={"host_path": str(directory), "error": str(err)},
            )


def remove_tracked(store: EntryStore, storage: StoragePort, root: Path) -> bool:
    """Remove every tracked non-root entry from host storage and the store.

    Entries are visited in reverse hierarchical order, so children always go
    before their parent directory. A failure is logged, the entry stays
    tracked, and the pass continues. A host artifact that is already gone
    counts as removed.

    Returns:
        ``True`` when every entry was removed.
    """
    complete = True
    for path in reversed(store.paths()):
        if path == ROOT:
            continue
        entry = store.lookup(path)
        host = to_host_path(root, path)
        if store.has_descendants(path):
            # A child failed earlier in this pass.
            complete = False
            continue
        try:
            if entry.is_dir:
                storage.remove_dir(host)
            else:
                storage.remove_file(host)
        except FileNotFoundError:
            pass
        except OSError as err:
            complete = False
            _logger.warning(
                "Unable to remove tracked entry.",
                event="vfs.cleanup.entry_failed",
                context={"path": path, "host_path": str(host), "error": str(err)},
            )
            continue
        store.discard(path)
    return complete


@dataclass(slots=True)
class RootLifecycle:
    """Track host directories created for the root and tear them down once."""

    storage: StoragePort
    root: Path
    created_root_parents: list[Path] = field(default_factory=list)
    closed: bool = False

    @classmethod
    def prepare(cls, storage: StoragePort, root: Path) -> RootLifecycle:
        """Ensure ``root`` exists, remembering every directory created for it."""
        created = _make_dirs(storage, root)
        if created:
            _logger.debug(
                "Created host directories for root.",
                event="vfs.root.created",
                context={"root": str(root), "created": [str(p) for p in created]},
            )
        return cls(storage=storage, root=root, created_root_parents=created)

    def rollback(self) -> None:
        """Remove directories created for the root after a failed construction."""
        _rollback(self.storage, self.created_root_parents)
        self.created_root_parents.clear()
        self.closed = True

    def teardown(self, store: EntryStore) -> bool:
        """Run cleanup and remove root-only directories, at most once.

        Never raises for host failures; they are logged.

        Returns:
            ``True`` when every tracked entry and created directory was removed.
        """
        if self.closed:
            return True
        self.closed = True

        complete = remove_tracked(store, self.storage, self.root)
        if complete:
            store.reset()
        else:
            _logger.warning(
                "Cleanup left tracked entries behind during teardown.",
                event="vfs.teardown.cleanup_incomplete",
                context={"root": str(self.root), "remaining": len(store) - 1},
            )

        for directory in reversed(self.created_root_parents):
            try:
                self.storage.remove_dir(directory)
            except FileNotFoundError:
                continue
            except OSError as err:
                complete = False
                _logger.warning(
                    "Unable to remove directory created for root.",
                    event="vfs.teardown.parent_failed",
                    context={"host_path": str(directory), "error": str(err)},
                )
        self.created_root_parents.clear()
        return complete
