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

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from tests.helpers import FakeStorage
from vfskit import HostFilesystem
from vfskit.dbc import enable_dbc


def pytest_configure(config: pytest.Config) -> None:
    # Contracts guard the entry store and normalizer throughout the suite.
    enable_dbc()


type HostFactory = Callable[..., HostFilesystem]


@pytest.fixture
def host_factory() -> Iterator[HostFactory]:
    """Build host filesystems and close every one of them after the test."""

    created: list[HostFilesystem] = []

    def factory(root: str | Path, **kwargs: object) -> HostFilesystem:
        fs = HostFilesystem(root, **kwargs)  # type: ignore[arg-type]
        created.append(fs)
        return fs

    yield factory
    for fs in created:
        fs.close()


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage(dirs=["/srv"])
