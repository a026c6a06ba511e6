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

"""Entry records tracked by the virtual filesystem."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Final


class EntryKind(StrEnum):
    """Kind of node stored in the entry store."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(slots=True, frozen=True)
class HostContent:
    """File bytes live on host storage at the entry's anchored host path."""


@dataclass(slots=True, frozen=True)
class MemoryContent:
    """File bytes live inside the entry itself."""

    data: bytes = b""

    def extended(self, more: bytes) -> MemoryContent:
        return MemoryContent(self.data + more)


type ContentLocation = HostContent | MemoryContent

HOST_CONTENT: Final[HostContent] = HostContent()


@dataclass(slots=True, frozen=True)
class Entry:
    """One tracked node.

    Directories carry no content. Files carry a :data:`ContentLocation` chosen
    by the backend that created them, so a memory-backed file never pretends
    to have a host path.
    """

    kind: EntryKind
    content: ContentLocation | None = field(default=None)

    @classmethod
    def directory(cls) -> Entry:
        return cls(EntryKind.DIRECTORY)

    @classmethod
    def host_file(cls) -> Entry:
        return cls(EntryKind.FILE, HOST_CONTENT)

    @classmethod
    def memory_file(cls, data: bytes = b"") -> Entry:
        return cls(EntryKind.FILE, MemoryContent(data))

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    def with_content(self, content: ContentLocation) -> Entry:
        return replace(self, content=content)


__all__ = [
    "HOST_CONTENT",
    "ContentLocation",
    "Entry",
    "EntryKind",
    "HostContent",
    "MemoryContent",
]
