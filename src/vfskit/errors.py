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

"""Exception hierarchy for :mod:`vfskit`."""

from __future__ import annotations


class VfsError(Exception):
    """Base class for all vfskit exceptions.

    Every concrete error also inherits the closest built-in exception, so
    callers can catch either the vfskit type or the standard one::

        try:
            fs.read("/missing.txt")
        except FileNotFoundError:
            ...
    """


class InvalidPathError(VfsError, ValueError):
    """Raised for empty input or a structurally disallowed target.

    Examples are removing the root, creating an entry beneath a file, or
    anchoring a host filesystem at a relative path.
    """


class NotFoundError(VfsError, FileNotFoundError):
    """Raised when a path is not tracked by the virtual filesystem."""


class AlreadyExistsError(VfsError, FileExistsError):
    """Raised when a strict creation targets a path that is already tracked."""


class IsADirectoryVfsError(VfsError, IsADirectoryError):
    """Raised when a content operation targets a directory."""


class StorageError(VfsError, OSError):
    """Raised when the underlying host storage fails.

    The original :class:`OSError` is chained as ``__cause__`` and its
    ``errno`` is preserved when available.
    """

    @classmethod
    def wrap(cls, err: OSError, action: str) -> StorageError:
        """Build a storage error describing ``action`` from a host failure."""
        detail = err.strerror or str(err)
        target = f": {err.filename}" if err.filename is not None else ""
        if err.errno is None:
            return cls(f"{action} failed: {detail}{target}")
        return cls(err.errno, f"{action} failed: {detail}{target}")


__all__ = [
    "AlreadyExistsError",
    "InvalidPathError",
    "IsADirectoryVfsError",
    "NotFoundError",
    "StorageError",
    "VfsError",
]
