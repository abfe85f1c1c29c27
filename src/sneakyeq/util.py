"""Identity utilities shared by the tracker, reconciler and comparator.

Only plain containers are tracked: exact ``dict``, ``list``, ``tuple`` and
``types.MappingProxyType``. Anything else (class instances, subclasses of the
builtin containers, functions) is an opaque leaf.
"""

from collections import ChainMap
from collections.abc import Hashable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal

from .tracking.facade import Facade, TrackedSequence

MAPPING_TYPES: tuple[type, ...] = (dict, MappingProxyType)
SEQUENCE_TYPES: tuple[type, ...] = (list, tuple)
FROZEN_TYPES: tuple[type, ...] = (tuple, MappingProxyType)
PRIMITIVE_TYPES: tuple[type, ...] = (type(None), bool, int, float, complex, str, bytes)

Kind = Literal["mapping", "sequence"]


class _Missing(Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


# Value of an absent field, so that "absent" and "None" stay distinguishable.
MISSING = _Missing.MISSING


def source_of(value: Any) -> Any:
    """Return the object a facade wraps, or the value itself."""
    if isinstance(value, Facade):
        return value._source
    return value


def is_trackable(value: Any) -> bool:
    """True for values a session wraps in a facade."""
    return isinstance(value, Facade) or type(value) in MAPPING_TYPES or type(value) in SEQUENCE_TYPES


def is_primitive(value: Any) -> bool:
    return type(value) in PRIMITIVE_TYPES


def kind_of(value: Any) -> Kind | None:
    """Container family used by the comparator, ``None`` for leaves."""
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, (list, tuple, TrackedSequence)):
        return "sequence"
    return None


def own_keys(value: Any) -> list[Hashable]:
    """Keys a container holds itself, without defaults or parent maps."""
    if isinstance(value, Facade):
        return value._own_keys()
    if isinstance(value, dict):
        return list(dict.keys(value))
    if isinstance(value, ChainMap):
        return list(value.maps[0]) if value.maps else []
    if isinstance(value, Mapping):
        return list(value)
    if isinstance(value, (list, tuple)):
        return list(range(len(value)))
    return list(getattr(value, "__dict__", ()))


def has_own(value: Any, key: Hashable) -> bool:
    """Own-presence check.

    On a facade this is recorded as a presence observation of ``key``. Unlike
    ``key in value`` it ignores keys supplied by parent maps of a ChainMap.
    """
    if isinstance(value, Facade):
        return value._has_own(key)
    if isinstance(value, dict):
        return dict.__contains__(value, key)
    if isinstance(value, ChainMap):
        return bool(value.maps) and key in value.maps[0]
    if isinstance(value, Mapping):
        return key in value
    if isinstance(value, (list, tuple)):
        return _in_range(value, key)
    return isinstance(key, str) and key in getattr(value, "__dict__", ())


def contains(value: Any, key: Hashable) -> bool:
    """Containment check including inherited keys (ChainMap parents, overrides of ``in``)."""
    if isinstance(value, Mapping):
        return key in value
    if isinstance(value, (list, tuple)):
        return _in_range(value, key)
    return isinstance(key, str) and hasattr(value, key)


def read_field(value: Any, key: Hashable) -> Any:
    """Read ``key`` without side effects, returning ``MISSING`` when absent."""
    if isinstance(value, Mapping):
        # ``in`` first: a defaultdict must not grow a key during comparison.
        return value[key] if key in value else MISSING
    if isinstance(value, (list, tuple)):
        return value[key] if _in_range(value, key) else MISSING
    return MISSING


def has_same_own_keys(a: Any, b: Any) -> bool:
    """Own-key set equality; order is not significant."""
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b)
    a_keys = own_keys(a)
    b_keys = own_keys(b)
    return len(a_keys) == len(b_keys) and set(a_keys) == set(b_keys)


def rebuild(value: Any, changes: dict[Hashable, Any]) -> Any:
    """Copy-on-write: a new frozen container equal to ``value`` with ``changes`` applied."""
    if not changes:
        return value
    if isinstance(value, tuple):
        items = list(value)
        for index, item in changes.items():
            items[index] = item
        return tuple(items)
    if isinstance(value, MappingProxyType):
        return MappingProxyType({**value, **changes})
    raise TypeError(f"cannot rebuild {type(value).__name__}")


def _in_range(value: Any, key: Any) -> bool:
    return type(key) is int and 0 <= key < len(value)
