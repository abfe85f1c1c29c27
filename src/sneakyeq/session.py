"""Tracking session - creates facades and answers "did it change?".

Typical use:
    session = Session()
    proxy = session.track(state)
    derived = session.unwrap({"title": proxy["todos"][0]["title"]})
    session.end()
    ...
    if session.is_changed(state, new_state):
        derived = recompute(new_state)
"""

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from . import compare
from .errors import RevokedSessionError
from .logger import get_logger
from .paths import collect_paths
from .report import AccessReport
from .resolver import Reconciler
from .tracking import AccessMode
from .tracking.facade import Facade, TrackedMapping, TrackedSequence
from .tracking.ledger import TouchLedger
from .util import is_trackable, source_of

_log = get_logger("sneakyeq.session")


class Session:
    """One tracking session: its facades and their touch ledger.

    Implements the Tracker protocol. Facades stay usable until ``end()``;
    the ledger outlives them so ``is_changed`` keeps working afterwards.
    """

    def __init__(self) -> None:
        self._ledger = TouchLedger()
        self._reconciler = Reconciler(self._ledger, self._is_tracked_source)
        self._facades: dict[int, Facade] = {}
        self._active = True

    @property
    def ledger(self) -> TouchLedger:
        return self._ledger

    @property
    def active(self) -> bool:
        return self._active

    def track(self, value: Any) -> Any:
        """Return a facade for ``value``, or ``value`` itself if it is not trackable.

        Facades are cached per source: tracking the same object twice yields
        the same facade.
        """
        if not is_trackable(value):
            return value
        source = source_of(value)
        if not self._active:
            raise RevokedSessionError(kind=type(source).__name__)
        if isinstance(value, Facade) and value._tracker is self:
            return value

        facade = self._facades.get(id(source))
        if facade is not None:
            return facade

        # `value` may be a facade of an enclosing session: reads then go
        # through it and are recorded there as well.
        if isinstance(source, (dict, MappingProxyType)):
            facade = TrackedMapping(self, value, source)
        else:
            facade = TrackedSequence(self, value, source)
        self._facades[id(source)] = facade
        return facade

    def track_all(self, values: Iterable[Any]) -> tuple[Any, ...]:
        return tuple(self.track(value) for value in values)

    def record(self, source: Any, mode: AccessMode, key: Hashable | None = None) -> None:
        self._ledger.record(source, mode, key)

    def _is_tracked_source(self, value: Any) -> bool:
        facade = self._facades.get(id(value))
        return facade is not None and facade._source is value

    def unwrap(self, result: Any) -> Any:
        """Strip facades from a derived value; call once, after all reads."""
        return self._reconciler.unwrap(result)

    def end(self) -> None:
        """Revoke every facade of this session. Idempotent."""
        if not self._active:
            return
        self._active = False
        facades = list(self._facades.values())
        for facade in facades:
            facade._revoke()
        _log.debug(
            f"Session ended: revoked {len(facades)} facade(s)",
            extra={
                "event": "session_end",
                "facades": len(facades),
                "records": len(self._ledger),
            },
        )

    def is_changed(self, old_value: Any, new_value: Any) -> bool:
        return compare.is_changed(self._ledger, old_value, new_value)

    def is_equal(self, old_value: Any, new_value: Any) -> bool:
        return compare.is_equal(self._ledger, old_value, new_value)

    def affected_paths(self, value: Any) -> list[str]:
        return collect_paths(self._ledger, value)

    def report(self, value: Any) -> AccessReport:
        """Snapshot of the dependencies recorded for ``value``."""
        return AccessReport(
            paths=tuple(self.affected_paths(value)),
            records=len(self._ledger),
            terminal=self._ledger.terminal_count,
            active=self._active,
        )

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.end()

    def __repr__(self) -> str:
        state = "active" if self._active else "ended"
        return f"Session({state}, facades={len(self._facades)}, records={len(self._ledger)})"


@dataclass(frozen=True)
class WatchResult:
    proxy: Any
    session: Session


@dataclass(frozen=True)
class WatchAllResult:
    proxies: tuple[Any, ...]
    session: Session


def watch(value: Any) -> WatchResult:
    """Track a single value in a new session."""
    session = Session()
    return WatchResult(proxy=session.track(value), session=session)


def watch_all(values: Iterable[Any]) -> WatchAllResult:
    """Track several values in one shared session."""
    session = Session()
    return WatchAllResult(proxies=session.track_all(values), session=session)


def affected_paths(session: Session, value: Any) -> list[str]:
    return session.affected_paths(value)
