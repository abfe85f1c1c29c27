"""Sneaky comparison driven by a touch ledger.

Only what was recorded is compared. Fields that were never observed may
differ freely between the old and the new value.
"""

from typing import Any

from .tracking.ledger import ALL_OWN_KEYS, SELF, TouchLedger
from .util import (
    contains,
    has_own,
    has_same_own_keys,
    is_primitive,
    is_trackable,
    kind_of,
    read_field,
    source_of,
)


def is_changed(ledger: TouchLedger, old_value: Any, new_value: Any) -> bool:
    """Return True when ``new_value`` differs from ``old_value`` in a recorded way.

    Args:
        ledger: Accesses recorded while deriving a value from ``old_value``
        old_value: Source (or facade) the derived value was computed from
        new_value: Candidate to compare against

    Returns:
        False if a value derived from ``new_value`` would match the old one
    """
    return _is_changed(ledger, old_value, new_value, set())


def is_equal(ledger: TouchLedger, old_value: Any, new_value: Any) -> bool:
    return not is_changed(ledger, old_value, new_value)


def _is_changed(ledger: TouchLedger, old_value: Any, new_value: Any, in_progress: set[tuple[int, int]]) -> bool:
    old = source_of(old_value)
    new = source_of(new_value)

    if old is new:
        return False

    # Only plain containers are compared structurally, and only on the old side.
    new_kind = kind_of(new)
    if not is_trackable(old) or new_kind is None:
        return _leaf_changed(old, new)

    entry = ledger.get(old)

    # Never observed: assumed irrelevant to the derived value.
    if entry is None:
        return False

    # Used whole, and identity differs.
    if entry is SELF:
        return True

    if kind_of(old) != new_kind:
        return True

    # Cyclic graphs: a pair already being compared counts as unchanged here.
    pair = (id(old), id(new))
    if pair in in_progress:
        return False
    in_progress.add(pair)

    if entry.own_keys is ALL_OWN_KEYS:
        if not has_same_own_keys(old, new):
            return True
    else:
        for key in entry.own_keys:
            if has_own(old, key) != has_own(new, key):
                return True

    for key in entry.has_keys:
        if contains(old, key) != contains(new, key):
            return True

    for key in entry.keys:
        if _is_changed(ledger, read_field(old, key), read_field(new, key), in_progress):
            return True

    return False


def _leaf_changed(old: Any, new: Any) -> bool:
    # Primitives compare by type and value, everything else by identity.
    if is_primitive(old) and is_primitive(new):
        return type(old) is not type(new) or old != new
    return True
