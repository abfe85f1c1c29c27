"""Memoization on top of sneaky comparison.

A memoized function is re-run only when one of its arguments changed in a
way the previous run could have observed.
"""

import functools
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from .config import MemoizeConfig
from .logger import get_logger
from .session import Session
from .util import is_trackable, source_of

_log = get_logger("sneakyeq.memoize")

R = TypeVar("R")


class MemoizeObserver(Protocol):
    """Optional hooks called on every lookup. Never affects caching."""

    def on_hit(self) -> None: ...

    def on_miss(self, session: Session, args: tuple[Any, ...], previous_args: tuple[Any, ...] | None) -> None: ...


@dataclass
class MemoizeStats:
    """Observer counting hits and misses."""

    hits: int = 0
    misses: int = 0

    def on_hit(self) -> None:
        self.hits += 1

    def on_miss(self, session: Session, args: tuple[Any, ...], previous_args: tuple[Any, ...] | None) -> None:
        self.misses += 1


@dataclass(frozen=True)
class _CacheEntry:
    sources: tuple[Any, ...]
    session: Session
    result: Any

    def matches(self, sources: tuple[Any, ...]) -> bool:
        if len(self.sources) != len(sources):
            return False
        return not any(self.session.is_changed(old, new) for old, new in zip(self.sources, sources))


class _KeyedSlots:
    """Last entry per first argument, oldest argument evicted first."""

    def __init__(self, max_keys: int) -> None:
        self._max_keys = max_keys
        self._slots: OrderedDict[int, _CacheEntry] = OrderedDict()

    def get(self, key: Any) -> _CacheEntry | None:
        entry = self._slots.get(id(key))
        # The entry holds its first source, so a matching id is the same object.
        if entry is None or entry.sources[0] is not key:
            return None
        self._slots.move_to_end(id(key))
        return entry

    def put(self, key: Any, entry: _CacheEntry) -> None:
        self._slots[id(key)] = entry
        self._slots.move_to_end(id(key))
        while len(self._slots) > self._max_keys:
            self._slots.popitem(last=False)

    def clear(self) -> None:
        self._slots.clear()


def memoize(
    fn: Callable[..., R],
    observer: MemoizeObserver | None = None,
    *,
    config: MemoizeConfig | None = None,
) -> Callable[..., R]:
    """Cache ``fn`` by what it reads from its positional arguments.

    Args:
        fn: Pure function of its arguments, called with tracked facades
        observer: Hit/miss hooks (see MemoizeStats)
        config: Cache layout (default: single last-call slot)

    Returns:
        Wrapper with the signature of ``fn`` and a ``cache_clear()`` method
    """
    config = config or MemoizeConfig()
    keyed = _KeyedSlots(config.max_keys) if config.keyed else None
    last: _CacheEntry | None = None
    name = getattr(fn, "__qualname__", repr(fn))

    @functools.wraps(fn)
    def wrapper(*args: Any) -> R:
        nonlocal last
        sources = tuple(source_of(arg) for arg in args)
        first = sources[0] if sources and is_trackable(sources[0]) else None

        candidates: list[_CacheEntry] = []
        if keyed is not None and first is not None:
            slot = keyed.get(first)
            if slot is not None:
                candidates.append(slot)
        if last is not None and all(last is not slot for slot in candidates):
            candidates.append(last)

        for entry in candidates:
            if entry.matches(sources):
                _log.debug(f"Cache hit: {name}", extra={"event": "memoize_hit", "function": name})
                if observer is not None:
                    observer.on_hit()
                return entry.result

        with Session() as session:
            proxies = session.track_all(args)
            result = session.unwrap(fn(*proxies))

        previous_args = last.sources if last is not None else None
        _log.debug(
            f"Cache miss: {name}",
            extra={
                "event": "memoize_miss",
                "function": name,
                "records": len(session.ledger),
            },
        )
        if observer is not None:
            observer.on_miss(session, args, previous_args)

        entry = _CacheEntry(sources=sources, session=session, result=result)
        last = entry
        if keyed is not None and first is not None:
            keyed.put(first, entry)
        return result

    def cache_clear() -> None:
        nonlocal last
        last = None
        if keyed is not None:
            keyed.clear()

    wrapper.cache_clear = cache_clear  # type: ignore[attr-defined]
    return wrapper
