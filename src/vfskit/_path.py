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

"""Path normalization for the virtual namespace.

Inner paths are POSIX-style strings that always start with ``/``. A canonical
inner path has no ``.`` or ``..`` segments, no empty segments, and no trailing
separator unless it is the root itself.

Functions:
    normalize_path: Resolve any input against a working directory.
    is_canonical: Check that a string is already a canonical inner path.
    parent_path: Parent of a canonical path (the root is its own parent).
    is_descendant: Component-aware strict prefix test.
    is_child: True when a path is exactly one segment below another.
    path_sort_key: Hierarchical ordering key (parents sort before children).
    to_host_path: Anchor an inner path under a host directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final

from .dbc import ensure, pure

ROOT: Final[str] = "/"
SEPARATOR: Final[str] = "/"


def is_canonical(path: str) -> bool:
    """Return ``True`` when ``path`` is a canonical inner path.

    Examples:
        >>> is_canonical("/a/b")
        True
        >>> is_canonical("/a/./b")
        False
        >>> is_canonical("a/b")
        False
    """
    if path == ROOT:
        return True
    if not path.startswith(SEPARATOR) or path.endswith(SEPARATOR):
        return False
    return all(segment not in {"", ".", ".."} for segment in path[1:].split(SEPARATOR))


def _result_is_canonical(*_args: object, result: str, **_kwargs: object) -> bool:
    return is_canonical(result)


@ensure(_result_is_canonical)
@pure
def normalize_path(path: str, cwd: str = ROOT) -> str:
    """Resolve ``path`` against ``cwd`` into a canonical inner path.

    The function is total: ``.`` segments are dropped, ``..`` pops the last
    segment and clamps at the root, repeated and trailing separators are
    collapsed. An empty string resolves to ``cwd`` itself, not to the root.
    Absolute inputs ignore ``cwd``.

    Args:
        path: Absolute or ``cwd``-relative path.
        cwd: Canonical working directory used for relative input.

    Examples:
        >>> normalize_path("/foo/bar/")
        '/foo/bar'
        >>> normalize_path("../../x", "/a")
        '/x'
        >>> normalize_path("", "/docs")
        '/docs'
    """
    joined = path if path.startswith(SEPARATOR) else f"{cwd}{SEPARATOR}{path}"
    result: list[str] = []
    for segment in joined.split(SEPARATOR):
        if segment in {"", "."}:
            continue
        if segment == "..":
            if result:
                _ = result.pop()
        else:
            result.append(segment)
    return SEPARATOR + SEPARATOR.join(result)


def parent_path(path: str) -> str:
    """Return the parent of canonical ``path``; the root is its own parent."""
    if path == ROOT:
        return ROOT
    head, _, _ = path.rpartition(SEPARATOR)
    return head or ROOT


def is_descendant(path: str, ancestor: str) -> bool:
    """Return ``True`` when ``path`` lies strictly below ``ancestor``.

    The test is component-aware: ``/ab`` is not below ``/a``.
    """
    if path == ancestor:
        return False
    if ancestor == ROOT:
        return True
    return path.startswith(ancestor + SEPARATOR)


def is_child(path: str, parent: str) -> bool:
    """Return ``True`` when ``path`` is exactly one segment below ``parent``."""
    return path != ROOT and is_descendant(path, parent) and parent_path(path) == parent


def path_sort_key(path: str) -> tuple[str, ...]:
    """Order paths segment by segment so every parent precedes its subtree."""
    if path == ROOT:
        return ()
    return tuple(path[1:].split(SEPARATOR))


def to_host_path(root: Path, path: str) -> Path:
    """Anchor canonical inner ``path`` beneath the host ``root``."""
    if path == ROOT:
        return root
    return root.joinpath(*path_sort_key(path))


__all__ = [
    "ROOT",
    "SEPARATOR",
    "is_canonical",
    "is_child",
    "is_descendant",
    "normalize_path",
    "parent_path",
    "path_sort_key",
    "to_host_path",
]
