"""Affected paths - human-readable view of a touch ledger.

Diagnostic only; nothing here influences comparisons.
"""

from collections.abc import Hashable
from typing import Any

from .tracking.ledger import ALL_OWN_KEYS, SELF, TouchLedger
from .util import is_trackable, read_field, source_of

ROOT = "$"


def collect_paths(ledger: TouchLedger, value: Any) -> list[str]:
    """List the paths under ``value`` that a derived value depends on.

    Example:
        >>> collect_paths(session.ledger, state)
        ['$.todos:all_own_keys', '$.todos[0].done', '$.filter']

    Markers: ``:all_own_keys`` for a full key enumeration, ``:has_own(k)``
    and ``:has(k)`` for presence checks. A path without marker is either a
    leaf that was read or a container used whole.
    """
    out: list[str] = []
    _collect(ledger, value, ROOT, out, set())
    return out


def format_key(path: str, key: Hashable) -> str:
    if isinstance(key, str) and key.isidentifier():
        return f"{path}.{key}"
    if type(key) is int:
        return f"{path}[{key}]"
    return f"{path}[{key!r}]"


def _collect(ledger: TouchLedger, value: Any, path: str, out: list[str], on_path: set[int]) -> None:
    if not is_trackable(value):
        if path != ROOT:
            out.append(path)
        return

    source = source_of(value)
    entry = ledger.get(source)
    if entry is None:
        return
    if entry is SELF:
        out.append(path)
        return
    if id(source) in on_path:
        return

    if entry.own_keys is ALL_OWN_KEYS:
        out.append(f"{path}:all_own_keys")
    else:
        for key in entry.own_keys:
            out.append(f"{path}:has_own({_label(key)})")

    for key in entry.has_keys:
        out.append(f"{path}:has({_label(key)})")

    on_path.add(id(source))
    for key in entry.keys:
        _collect(ledger, read_field(source, key), format_key(path, key), out, on_path)
    on_path.discard(id(source))


def _label(key: Hashable) -> str:
    return key if isinstance(key, str) else repr(key)
