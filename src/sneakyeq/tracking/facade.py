"""Read-only facades over plain containers.

A facade stands in for its source during a derived-value computation:
- facade["key"] records a read and returns a facade for the child
- "key" in facade records a containment check
- iter(facade) / len(facade) record a full own-key enumeration
- every mutation raises ReadOnlyViolation
"""

import operator
from collections.abc import Hashable, Iterator, Mapping, Sequence
from typing import Any

from ..errors import ReadOnlyViolation, RevokedSessionError
from . import AccessMode
from .base import Tracker

_ABSENT = object()


def _reject(operation: str) -> Any:
    def method(self: "Facade", *args: Any, **kwargs: Any) -> Any:
        raise ReadOnlyViolation(operation=operation, kind=self._kind)

    method.__name__ = operation
    return method


class Facade:
    """Common state of the tracked container types."""

    __slots__ = ("_tracker", "_target", "_source")

    _kind = "value"

    _tracker: Tracker | None
    _target: Any
    _source: Any

    def __init__(self, tracker: Tracker, target: Any, source: Any) -> None:
        # `target` is the source itself or a facade of an enclosing session.
        object.__setattr__(self, "_tracker", tracker)
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_source", source)

    @property
    def revoked(self) -> bool:
        return self._tracker is None

    def _revoke(self) -> None:
        object.__setattr__(self, "_tracker", None)
        object.__setattr__(self, "_target", None)

    def _active(self) -> Tracker:
        tracker = self._tracker
        if tracker is None:
            raise RevokedSessionError(kind=self._kind)
        return tracker

    def _read(self, key: Hashable) -> Any:
        tracker = self._active()
        tracker.record(self._source, AccessMode.READ, key)
        return tracker.track(self._target[key])

    def _has_own(self, key: Hashable) -> bool:
        self._active().record(self._source, AccessMode.HAS_OWN, key)
        target = self._target
        if isinstance(target, Facade):
            return target._has_own(key)
        if isinstance(target, Mapping):
            return key in target
        return type(key) is int and 0 <= key < len(target)

    def _own_keys(self) -> list[Hashable]:
        self._active().record(self._source, AccessMode.OWN_KEYS)
        target = self._target
        if isinstance(target, Facade):
            return target._own_keys()
        if isinstance(target, Mapping):
            return list(target)
        return list(range(len(target)))

    __setattr__ = _reject("set attributes of")
    __delattr__ = _reject("delete attributes of")
    __setitem__ = _reject("assign items of")
    __delitem__ = _reject("delete items of")
    clear = _reject("clear")
    pop = _reject("pop from")

    def __repr__(self) -> str:
        # Not an observation.
        state = " revoked" if self.revoked else ""
        return f"<{type(self).__name__}{state} of {self._source!r}>"


class TrackedMapping(Facade, Mapping):
    """Facade over a dict or MappingProxyType."""

    __slots__ = ()

    _kind = "mapping"

    def __getitem__(self, key: Hashable) -> Any:
        return self._read(key)

    def get(self, key: Hashable, default: Any = None) -> Any:
        tracker = self._active()
        tracker.record(self._source, AccessMode.READ, key)
        value = self._target.get(key, _ABSENT)
        if value is _ABSENT:
            return default
        return tracker.track(value)

    def __contains__(self, key: object) -> bool:
        self._active().record(self._source, AccessMode.CONTAINS, key)  # type: ignore[arg-type]
        return key in self._target

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._own_keys())

    def __len__(self) -> int:
        self._active().record(self._source, AccessMode.OWN_KEYS)
        return len(self._target)

    update = _reject("update")
    __ior__ = _reject("update")
    popitem = _reject("pop from")
    setdefault = _reject("set defaults on")


class TrackedSequence(Facade, Sequence):
    """Facade over a list or tuple."""

    __slots__ = ()

    _kind = "sequence"

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            items = [self._read(i) for i in range(*index.indices(len(self)))]
            return tuple(items) if isinstance(self._source, tuple) else items
        # The ledger only holds plain ints: bool and numpy integers are converted.
        index = operator.index(index)
        if index < 0:
            # A negative index depends on the length as well.
            index += len(self)
            if index < 0:
                raise IndexError("sequence index out of range")
        return self._read(index)

    def __len__(self) -> int:
        self._active().record(self._source, AccessMode.OWN_KEYS)
        return len(self._target)

    def __iter__(self) -> Iterator[Any]:
        for index in range(len(self)):
            yield self._read(index)

    def __reversed__(self) -> Iterator[Any]:
        for index in reversed(range(len(self))):
            yield self._read(index)

    def __eq__(self, other: object) -> bool:
        other_source = other._source if isinstance(other, Facade) else other
        if type(other_source) is not type(self._source):
            return NotImplemented
        return list(self) == list(other)  # type: ignore[call-overload]

    __hash__ = None  # type: ignore[assignment]

    append = _reject("append to")
    extend = _reject("extend")
    insert = _reject("insert into")
    remove = _reject("remove from")
    sort = _reject("sort")
    reverse = _reject("reverse")
    __iadd__ = _reject("extend")
    __imul__ = _reject("repeat")
