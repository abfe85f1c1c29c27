"""Result reconciliation - strip facades from a derived value.

A derived value may hold facades anywhere: returned directly, stored in new
containers, nested several levels deep. Reconciling replaces each of them by
its source and updates the ledger so later comparisons know what the result
depends on.
"""

from collections.abc import Callable, Hashable
from typing import Any

from .logger import get_logger
from .tracking import AccessMode
from .tracking.facade import Facade
from .tracking.ledger import TouchLedger
from .util import FROZEN_TYPES, MAPPING_TYPES, SEQUENCE_TYPES, rebuild

_log = get_logger("sneakyeq.resolver")


class Reconciler:
    """Unwraps derived values against one ledger.

    ``is_tracked`` tells whether a raw object is the source of one of the
    session's facades; such objects (handed over by a nested session) are
    consumed whole just like facades.
    """

    def __init__(self, ledger: TouchLedger, is_tracked: Callable[[Any], bool]) -> None:
        self._ledger = ledger
        self._is_tracked = is_tracked

    def unwrap(self, result: Any) -> Any:
        """Return ``result`` with every facade replaced by its source.

        A facade used as a value is consumed whole: its source becomes terminal
        in the ledger. Generated ``dict``/``list`` containers are updated in
        place, generated tuples and mapping proxies are copied when one of
        their items changes.
        """
        return self._unwrap(result, {})

    def _consumes(self, value: Any) -> bool:
        return isinstance(value, Facade) or self._is_tracked(value)

    def _unwrap(self, value: Any, seen: dict[int, Any]) -> Any:
        if isinstance(value, Facade):
            source = value._source
            self._ledger.mark_self(source)
            return source
        if self._is_tracked(value):
            self._ledger.mark_self(value)
            return value

        if type(value) not in MAPPING_TYPES and type(value) not in SEQUENCE_TYPES:
            return value

        # While in progress this is the value itself, which cuts cycles; once
        # finished it is the result, so shared containers are unwrapped once.
        if id(value) in seen:
            return seen[id(value)]
        original = value
        seen[id(original)] = original

        changes: dict[Hashable, Any] = {}
        dependent: list[Hashable] = []
        entries = value.items() if type(value) in MAPPING_TYPES else enumerate(value)
        for key, item in list(entries):
            consumed = self._consumes(item)
            unwrapped = self._unwrap(item, seen)
            if unwrapped is not item:
                changes[key] = unwrapped
            if consumed or unwrapped is not item:
                dependent.append(key)

        if changes:
            if type(value) in FROZEN_TYPES:
                value = rebuild(value, changes)
            else:
                for key, item in changes.items():
                    value[key] = item

        for key in dependent:
            self._ledger.record(value, AccessMode.READ, key)

        if dependent:
            _log.debug(
                f"Reconciled {len(dependent)} field(s) of generated {type(value).__name__}",
                extra={"event": "reconcile", "fields": len(dependent)},
            )
        seen[id(original)] = value
        return value
