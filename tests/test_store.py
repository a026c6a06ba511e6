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

"""Tests for the ordered entry store and its invariants."""

from __future__ import annotations

import pytest

from vfskit import InvalidPathError, NotFoundError
from vfskit._store import EntryStore
from vfskit._types import Entry, EntryKind, HostContent, MemoryContent
from vfskit.dbc import dbc_enabled


@pytest.fixture
def store() -> EntryStore:
    store = EntryStore()
    store.insert("/a", Entry.directory())
    store.insert("/a/b", Entry.directory())
    store.insert("/a/b/c.txt", Entry.memory_file(b"c"))
    store.insert("/a/d.txt", Entry.memory_file())
    store.insert("/ab", Entry.directory())
    return store


def test_seeded_with_root_directory() -> None:
    store = EntryStore()
    assert store.paths() == ["/"]
    assert store.lookup("/").is_dir
    assert len(store) == 1


def test_paths_are_hierarchical(store: EntryStore) -> None:
    assert store.paths() == ["/", "/a", "/a/b", "/a/b/c.txt", "/a/d.txt", "/ab"]
    assert list(store) == store.paths()


def test_lookup_missing_raises(store: EntryStore) -> None:
    with pytest.raises(NotFoundError, match="/missing"):
        store.lookup("/missing")
    assert store.get("/missing") is None
    assert "/missing" not in store


def test_children_and_descendants(store: EntryStore) -> None:
    assert store.children("/") == ["/a", "/ab"]
    assert store.children("/a") == ["/a/b", "/a/d.txt"]
    assert store.descendants("/a") == ["/a/b", "/a/b/c.txt", "/a/d.txt"]
    assert store.descendants("/ab") == []


def test_insert_requires_directory_parent(store: EntryStore) -> None:
    with pytest.raises(InvalidPathError, match="parent"):
        store.insert("/missing/x", Entry.directory())
    with pytest.raises(InvalidPathError, match="parent"):
        store.insert("/a/d.txt/x", Entry.memory_file())


def test_insert_rejects_root_and_kind_change(store: EntryStore) -> None:
    with pytest.raises(InvalidPathError):
        store.insert("/", Entry.directory())
    with pytest.raises(InvalidPathError, match="already tracked"):
        store.insert("/a", Entry.memory_file())


def test_insert_replaces_same_kind(store: EntryStore) -> None:
    store.insert("/a/d.txt", Entry.memory_file(b"new"))
    assert store.lookup("/a/d.txt").content == MemoryContent(b"new")


def test_nearest_ancestor(store: EntryStore) -> None:
    assert store.nearest_ancestor("/a/b/x/y/z") == "/a/b"
    assert store.nearest_ancestor("/zzz") == "/"
    assert store.nearest_ancestor("/a/b") == "/a"


def test_remove_subtree_is_prefix_aware(store: EntryStore) -> None:
    removed = store.remove_subtree("/a")
    assert removed == ["/a", "/a/b", "/a/b/c.txt", "/a/d.txt"]
    assert store.paths() == ["/", "/ab"]


def test_remove_subtree_guards(store: EntryStore) -> None:
    with pytest.raises(InvalidPathError):
        store.remove_subtree("/")
    with pytest.raises(NotFoundError):
        store.remove_subtree("/missing")


def test_discard_only_leaves(store: EntryStore) -> None:
    with pytest.raises(InvalidPathError, match="descendants"):
        store.discard("/a")
    with pytest.raises(InvalidPathError):
        store.discard("/")
    store.discard("/a/b/c.txt")
    store.discard("/a/b")
    assert store.children("/a") == ["/a/d.txt"]


def test_reset_keeps_only_root(store: EntryStore) -> None:
    store.reset()
    assert store.paths() == ["/"]


def test_entry_constructors() -> None:
    assert Entry.directory().kind is EntryKind.DIRECTORY
    assert Entry.directory().content is None
    assert Entry.host_file().content == HostContent()
    assert Entry.memory_file(b"x").content == MemoryContent(b"x")
    assert MemoryContent(b"a").extended(b"b") == MemoryContent(b"ab")
    assert Entry.host_file().is_file and not Entry.host_file().is_dir


def test_invariant_catches_orphans() -> None:
    store = EntryStore()
    store._entries["/orphan/child"] = Entry.directory()
    with dbc_enabled(), pytest.raises(AssertionError, match="orphaned entry"):
        store.paths()


def test_invariant_catches_non_canonical_keys() -> None:
    store = EntryStore()
    store._entries["//x"] = Entry.directory()
    with dbc_enabled(), pytest.raises(AssertionError, match="non-canonical"):
        store.paths()


def test_invariant_catches_missing_root() -> None:
    store = EntryStore()
    del store._entries["/"]
    with dbc_enabled(), pytest.raises(AssertionError, match="root entry"):
        store.paths()


def test_invariants_ignored_when_disabled() -> None:
    store = EntryStore()
    store._entries["/orphan/child"] = Entry.directory()
    with dbc_enabled(active=False):
        assert "/orphan/child" in store


def test_has_descendants(store: EntryStore) -> None:
    assert store.has_descendants("/")
    assert store.has_descendants("/a")
    assert store.has_descendants("/a/b")
    assert not store.has_descendants("/a/d.txt")
    assert not store.has_descendants("/ab")
    assert not store.has_descendants("/missing")


def test_order_is_kept_across_out_of_order_inserts() -> None:
    store = EntryStore()
    for path in ("/b", "/a", "/a b", "/a-c", "/a/z", "/a/b", "/ab", "/a/b/c"):
        store.insert(path, Entry.directory())
    assert store.paths() == [
        "/",
        "/a",
        "/a/b",
        "/a/b/c",
        "/a/z",
        "/a b",
        "/a-c",
        "/ab",
        "/b",
    ]
    assert store.descendants("/a") == ["/a/b", "/a/b/c", "/a/z"]
    assert store.children("/a") == ["/a/b", "/a/z"]


def test_descendants_of_untracked_prefix(store: EntryStore) -> None:
    assert store.descendants("/a/b/c.txt") == []
    assert store.descendants("/zzz") == []


def test_discard_and_remove_keep_order_in_sync(store: EntryStore) -> None:
    store.discard("/a/d.txt")
    store.discard("/missing")
    assert store.paths() == ["/", "/a", "/a/b", "/a/b/c.txt", "/ab"]
    store.insert("/a/d.txt", Entry.memory_file())
    assert store.remove_subtree("/a/b") == ["/a/b", "/a/b/c.txt"]
    assert store.paths() == ["/", "/a", "/a/d.txt", "/ab"]
    assert len(store) == len(store.paths())


def test_invariant_catches_unsynced_order() -> None:
    store = EntryStore()
    store.insert("/a", Entry.directory())
    store._order.append("/a")
    with dbc_enabled(), pytest.raises(AssertionError, match="out of sync"):
        store.paths()
