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

"""Tests for the design-by-contract helpers."""

from __future__ import annotations

import builtins
import logging
from collections.abc import Iterator

import pytest

import vfskit.dbc as dbc_module
from vfskit._path import normalize_path
from vfskit.dbc import (
    dbc_active,
    dbc_enabled,
    disable_dbc,
    enable_dbc,
    ensure,
    invariant,
    pure,
)


@pytest.fixture(autouse=True)
def reset_dbc_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Restore the suite-wide forced state after each test."""
    monkeypatch.delenv("VFSKIT_DBC", raising=False)
    previous = dbc_module._forced_state
    yield
    dbc_module._forced_state = previous


def test_environment_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    dbc_module._forced_state = None
    assert dbc_active() is False
    monkeypatch.setenv("VFSKIT_DBC", "1")
    assert dbc_active() is True
    monkeypatch.setenv("VFSKIT_DBC", "off")
    assert dbc_active() is False


def test_forced_state_overrides_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VFSKIT_DBC", "1")
    disable_dbc()
    assert dbc_active() is False
    enable_dbc()
    assert dbc_active() is True
    with dbc_enabled(active=False):
        assert dbc_active() is False
    assert dbc_active() is True


def test_ensure_checks_result() -> None:
    @ensure(lambda value, result: result > value)
    def increment(value: int) -> int:
        return value + 1

    @ensure(lambda value, result: (result > value, f"got {result}"))
    def broken(value: int) -> int:
        return value - 1

    with dbc_enabled():
        assert increment(1) == 2
        with pytest.raises(AssertionError, match="got 0"):
            broken(1)
    with dbc_enabled(active=False):
        assert broken(1) == 0


def test_ensure_requires_predicates() -> None:
    with pytest.raises(ValueError):
        ensure()


def test_invariant_checks_after_methods() -> None:
    @invariant(lambda counter: counter.value >= 0)
    class Counter:
        def __init__(self) -> None:
            self.value = 0

        def decrement(self) -> None:
            self.value -= 1

    counter = Counter()
    with dbc_enabled(), pytest.raises(AssertionError, match="invariant"):
        counter.decrement()


def test_invariant_predicates_may_call_public_methods() -> None:
    @invariant(lambda box: box.size() >= 0)
    class Box:
        def __init__(self) -> None:
            self.items: list[int] = []

        def size(self) -> int:
            return len(self.items)

        def add(self, item: int) -> None:
            self.items.append(item)

    with dbc_enabled():
        box = Box()
        box.add(1)
        assert box.size() == 1


def test_pure_rejects_argument_mutation() -> None:
    @pure
    def mutate(items: list[int]) -> int:
        items.append(1)
        return len(items)

    with dbc_enabled(), pytest.raises(AssertionError, match="mutation"):
        mutate([])


def test_pure_rejects_io() -> None:
    @pure
    def opener() -> None:
        with builtins.open("/dev/null"):
            pass

    @pure
    def chatty() -> None:
        logging.getLogger("tests.pure").warning("hi")

    with dbc_enabled():
        with pytest.raises(AssertionError, match="builtins.open"):
            opener()
        with pytest.raises(AssertionError, match="logging"):
            chatty()


def test_normalize_path_passes_its_contracts() -> None:
    with dbc_enabled():
        assert normalize_path("a/../b/./c/", "/x") == "/x/b/c"
