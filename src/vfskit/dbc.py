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

"""Design-by-contract helpers guarding the entry store and path normalizer.

Contracts are off by default and cost a single flag lookup per call. Set
``VFSKIT_DBC=1`` (or use :func:`dbc_enabled` in tests) to evaluate them.
A failed contract raises :class:`AssertionError`.

Predicates may return ``bool``, ``None`` (treated as failure), or a
``(bool, detail)`` tuple whose detail is appended to the failure message.
"""

from __future__ import annotations

import builtins
import copy
import logging
import os
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import ExitStack, contextmanager
from functools import wraps
from pathlib import Path
from typing import ParamSpec, TypeVar, cast

P = ParamSpec("P")
R = TypeVar("R")
T = TypeVar("T", bound=object)

type ContractResult = bool | tuple[bool, object] | None
ContractCallable = Callable[..., object]

_ENV_FLAG = "VFSKIT_DBC"
_forced_state: bool | None = None


def _coerce_flag(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in {"", "0", "false", "off", "no"}


def dbc_active() -> bool:
    """Return ``True`` when contracts should be evaluated."""

    if _forced_state is not None:
        return _forced_state
    return _coerce_flag(os.getenv(_ENV_FLAG))


def enable_dbc() -> None:
    """Force contract evaluation on, ignoring the environment."""

    global _forced_state
    _forced_state = True


def disable_dbc() -> None:
    """Force contract evaluation off, ignoring the environment."""

    global _forced_state
    _forced_state = False


@contextmanager
def dbc_enabled(*, active: bool = True) -> Iterator[None]:
    """Temporarily force the contract flag inside a ``with`` block."""

    global _forced_state
    previous = _forced_state
    _forced_state = active
    try:
        yield
    finally:
        _forced_state = previous


def _qualname(target: object) -> str:
    return getattr(target, "__qualname__", repr(target))


def _outcome(result: object) -> tuple[bool, str | None]:
    if isinstance(result, tuple):
        items = cast(Sequence[object], result)
        if not items:
            raise TypeError("Contract callables must not return empty tuples")
        detail = None if len(items) == 1 else str(items[1])
        return bool(items[0]), detail
    if result is None:
        return False, None
    return bool(result), None


def _check(
    *,
    kind: str,
    func: Callable[..., object],
    predicate: ContractCallable,
    args: tuple[object, ...],
    kwargs: Mapping[str, object],
) -> None:
    try:
        result = predicate(*args, **kwargs)
    except AssertionError:
        raise
    except Exception as exc:  # pragma: no cover - diagnostics
        msg = f"{kind} contract for {_qualname(func)} raised {type(exc).__name__}: {exc}"
        raise AssertionError(msg) from exc
    passed, detail = _outcome(result)
    if passed:
        return
    name = getattr(predicate, "__name__", repr(predicate))
    msg = f"{kind} contract for {_qualname(func)} failed via {name}. Args={args!r}"
    if detail:
        msg = f"{msg} Details: {detail}"
    raise AssertionError(msg)


def ensure(*predicates: ContractCallable) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Validate postconditions once the wrapped callable returns.

    Each predicate receives the call arguments plus ``result=<return value>``.
    """

    if not predicates:
        raise ValueError("@ensure expects at least one predicate")

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            result = func(*args, **kwargs)
            if dbc_active():
                for predicate in predicates:
                    _check(
                        kind="ensure",
                        func=func,
                        predicate=predicate,
                        args=tuple(args),
                        kwargs={**kwargs, "result": result},
                    )
            return result

        return wrapped

    return decorator


_checking: set[int] = set()


def _check_invariants(
    predicates: tuple[ContractCallable, ...],
    *,
    instance: object,
    func: Callable[..., object],
) -> None:
    # Predicates may call public methods of the instance they inspect.
    key = id(instance)
    if key in _checking:
        return
    _checking.add(key)
    try:
        for predicate in predicates:
            _check(
                kind="invariant",
                func=func,
                predicate=predicate,
                args=(instance,),
                kwargs={},
            )
    finally:
        _checking.discard(key)


def _wrap_method(
    method: Callable[..., object],
    predicates: tuple[ContractCallable, ...],
) -> Callable[..., object]:
    @wraps(method)
    def wrapper(self: object, *args: object, **kwargs: object) -> object:
        if not dbc_active():
            return method(self, *args, **kwargs)
        _check_invariants(predicates, instance=self, func=method)
        try:
            return method(self, *args, **kwargs)
        finally:
            _check_invariants(predicates, instance=self, func=method)

    return wrapper


def invariant(*predicates: ContractCallable) -> Callable[[type[T]], type[T]]:
    """Check class invariants after ``__init__`` and around public methods."""

    if not predicates:
        raise ValueError("@invariant expects at least one predicate")

    def decorator(cls: type[T]) -> type[T]:
        original_init = cls.__init__

        @wraps(original_init)
        def init_wrapper(self: object, *args: object, **kwargs: object) -> None:
            original_init(self, *args, **kwargs)
            if dbc_active():
                _check_invariants(predicates, instance=self, func=original_init)

        type.__setattr__(cls, "__init__", init_wrapper)

        for name, attribute in list(cls.__dict__.items()):
            if name.startswith("_") or not callable(attribute):
                continue
            if isinstance(attribute, (staticmethod, classmethod)):
                continue
            setattr(cls, name, _wrap_method(attribute, predicates))
        return cls

    return decorator


_UNCOPYABLE = object()


def _snapshot(value: object) -> object:
    try:
        return copy.deepcopy(value)
    except Exception:
        return _UNCOPYABLE


def _forbid(func: Callable[..., object], target: str) -> Callable[..., object]:
    def raiser(*args: object, **kwargs: object) -> object:  # pragma: no cover
        msg = f"pure contract for {_qualname(func)} forbids calling {target}"
        raise AssertionError(msg)

    return raiser


@contextmanager
def _patched(obj: object, attribute: str, replacement: object) -> Iterator[None]:
    original = getattr(obj, attribute)
    setattr(obj, attribute, replacement)
    try:
        yield
    finally:
        setattr(obj, attribute, original)


def pure(func: Callable[P, R]) -> Callable[P, R]:
    """Validate that ``func`` neither mutates its arguments nor performs I/O."""

    @wraps(func)
    def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
        if not dbc_active():
            return func(*args, **kwargs)

        before = [_snapshot(arg) for arg in args]
        with ExitStack() as stack:
            stack.enter_context(
                _patched(builtins, "open", _forbid(func, "builtins.open"))
            )
            stack.enter_context(
                _patched(Path, "write_bytes", _forbid(func, "Path.write_bytes"))
            )
            stack.enter_context(
                _patched(logging.Logger, "_log", _forbid(func, "logging"))
            )
            result = func(*args, **kwargs)

        for index, (original, snapshot) in enumerate(zip(args, before, strict=True)):
            if snapshot is not _UNCOPYABLE and original != snapshot:
                msg = (
                    f"pure contract for {_qualname(func)} detected mutation of "
                    f"positional argument {index}"
                )
                raise AssertionError(msg)
        return result

    return wrapped


__all__ = [
    "ContractResult",
    "dbc_active",
    "dbc_enabled",
    "disable_dbc",
    "enable_dbc",
    "ensure",
    "invariant",
    "pure",
]
