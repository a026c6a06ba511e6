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

"""Ordered entry store shared by both backends."""

from __future__ import annotations

from bisect import bisect_left, bisect_right, insort
from collections.abc import Iterator

from ._path import ROOT, is_canonical, is_child, is_descendant, parent_path, path_sort_key
from ._types import Entry
from .dbc import ContractResult, invariant
from .errors import InvalidPathError, NotFoundError


def _root_is_directory(store: EntryStore) -> ContractResult:
    root = store.get(ROOT)
    if root is None or not root.is_dir:
        return (False, "root entry must be a tracked directory")
    return True


def _parents_are_directories(store: EntryStore) -> ContractResult:
    for path in store._entries:
        if path == ROOT:
            continue
        parent = store.get(parent_path(path))
        if parent is None or not parent.is_dir:
            return (False, f"orphaned entry {path}")
    return True


def _paths_are_canonical(store: EntryStore) -> ContractResult:
    bad = [path for path in store._entries if not is_canonical(path)]
    if bad:
        return (False, f"non-canonical keys {bad!r}")
    return True


def _order_matches_entries(store: EntryStore) -> ContractResult:
    order = store._order
    if len(order) != len(store._entries) or any(p not in store._entries for p in order):
        return (False, "ordered index out of sync with entries")
    keys = [path_sort_key(p) for p in order]
    if keys != sorted(keys):
        return (False, "ordered index is not hierarchical")
    return True


@invariant(
    _root_is_directory,
    _parents_are_directories,
    _paths_are_canonical,
    _order_matches_entries,
)
class EntryStore:
    """Mapping of canonical inner paths to :class:`Entry` records.

    The root directory is seeded on construction and can never be removed.
    Iteration and every query return paths in hierarchical order, so a parent
    always precedes its descendants and the order is stable for equal state.

    Paths are kept in a sorted index, so a subtree is one contiguous run and
    subtree queries cost a binary search plus the size of the subtree.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Entry] = {ROOT: Entry.directory()}
        self._order: list[str] = [ROOT]

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths())

    def paths(self) -> list[str]:
        return list(self._order)

    def get(self, path: str) -> Entry | None:
        return self._entries.get(path)

    def lookup(self, path: str) -> Entry:
        """Return the entry at ``path`` or raise :class:`NotFoundError`."""
        try:
            return self._entries[path]
        except KeyError:
            raise NotFoundError(f"{path} does not exist") from None

    def insert(self, path: str, entry: Entry) -> None:
        """Track ``entry`` at ``path``, replacing any entry of the same kind.

        Raises:
            InvalidPathError: ``path`` is the root, or its parent is not a
                tracked directory, or the insert would change an existing
                entry's kind.
        """
        if path == ROOT:
            raise InvalidPathError("the root entry cannot be replaced")
        parent = self._entries.get(parent_path(path))
        if parent is None or not parent.is_dir:
            raise InvalidPathError(f"parent of {path} is not a tracked directory")
        existing = self._entries.get(path)
        if existing is not None and existing.kind is not entry.kind:
            raise InvalidPathError(f"{path} is already tracked as a {existing.kind}")
        if existing is None:
            insort(self._order, path, key=path_sort_key)
        self._entries[path] = entry

    def _subtree_end(self, path: str, start: int) -> int:
        end = start
        while end < len(self._order) and is_descendant(self._order[end], path):
            end += 1
        return end

    def children(self, path: str) -> list[str]:
        return [p for p in self.descendants(path) if is_child(p, path)]

    def descendants(self, path: str) -> list[str]:
        start = bisect_right(self._order, path_sort_key(path), key=path_sort_key)
        return self._order[start : self._subtree_end(path, start)]

    def has_descendants(self, path: str) -> bool:
        start = bisect_right(self._order, path_sort_key(path), key=path_sort_key)
        return start < len(self._order) and is_descendant(self._order[start], path)

    def nearest_ancestor(self, path: str) -> str:
        """Return the closest tracked ancestor of ``path`` (the root at worst)."""
        current = parent_path(path)
        while current not in self._entries:
            current = parent_path(current)
        return current

    def discard(self, path: str) -> None:
        """Stop tracking a single leaf ``path``.

        Raises:
            InvalidPathError: ``path`` is the root or still has descendants.
        """
        if path == ROOT:
            raise InvalidPathError("the root cannot be removed")
        if self.has_descendants(path):
            raise InvalidPathError(f"{path} still has tracked descendants")
        if self._entries.pop(path, None) is not None:
            index = bisect_left(self._order, path_sort_key(path), key=path_sort_key)
            del self._order[index]

    def remove_subtree(self, path: str) -> list[str]:
        """Stop tracking ``path`` and everything beneath it.

        Returns:
            The removed paths in hierarchical order.
        """
        if path == ROOT:
            raise InvalidPathError("the root cannot be removed")
        _ = self.lookup(path)
        start = bisect_left(self._order, path_sort_key(path), key=path_sort_key)
        end = self._subtree_end(path, start + 1)
        removed = self._order[start:end]
        del self._order[start:end]
        for removed_path in removed:
            del self._entries[removed_path]
        return removed

    def reset(self) -> None:
        """Drop every entry except the root."""
        self._entries = {ROOT: self._entries[ROOT]}
        self._order = [ROOT]


__all__ = ["EntryStore"]
