"""Touch ledger - which parts of which source objects were observed.

Each source has at most one entry: a TouchRecord with per-key detail, or
Terminal.SELF once the whole object was used by reference.
"""

from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, TypeAlias

from . import AccessMode


class Terminal(Enum):
    """Entry for sources used whole; any difference at all is a change."""

    SELF = "self"


class OwnKeys(Enum):
    """``TouchRecord.own_keys`` after a full own-key enumeration."""

    ALL = "all"


SELF = Terminal.SELF
ALL_OWN_KEYS = OwnKeys.ALL


@dataclass
class TouchRecord:
    """Accesses recorded for one source.

    Key sets are dicts used as insertion-ordered sets.
    """

    keys: dict[Hashable, None] = field(default_factory=dict)
    has_keys: dict[Hashable, None] = field(default_factory=dict)
    own_keys: dict[Hashable, None] | Literal[OwnKeys.ALL] = field(default_factory=dict)

    def add(self, mode: AccessMode, key: Hashable | None) -> None:
        if mode is AccessMode.READ:
            self.keys[key] = None
        elif mode is AccessMode.CONTAINS:
            self.has_keys[key] = None
        elif mode is AccessMode.HAS_OWN:
            if self.own_keys is not ALL_OWN_KEYS:
                self.own_keys[key] = None
        elif mode is AccessMode.OWN_KEYS:
            self.own_keys = ALL_OWN_KEYS


LedgerEntry: TypeAlias = TouchRecord | Literal[Terminal.SELF]


class TouchLedger:
    """Identity-keyed table of TouchRecords.

    Builtin containers cannot be weakly referenced, so the ledger holds the
    sources it records; they are released together with the ledger.
    """

    def __init__(self) -> None:
        self._entries: dict[int, tuple[Any, LedgerEntry]] = {}

    def get(self, source: Any) -> LedgerEntry | None:
        slot = self._entries.get(id(source))
        if slot is None or slot[0] is not source:
            return None
        return slot[1]

    def touch(self, source: Any) -> TouchRecord | None:
        """Return the record for ``source``, creating it on first access.

        Returns None for terminal sources: their finer detail is not kept.
        """
        entry = self.get(source)
        if entry is SELF:
            return None
        if entry is None:
            entry = TouchRecord()
            self._entries[id(source)] = (source, entry)
        return entry

    def record(self, source: Any, mode: AccessMode, key: Hashable | None = None) -> None:
        record = self.touch(source)
        if record is not None:
            record.add(mode, key)

    def mark_self(self, source: Any) -> None:
        self._entries[id(source)] = (source, SELF)

    @property
    def terminal_count(self) -> int:
        return sum(1 for _, entry in self._entries.values() if entry is SELF)

    def __contains__(self, source: Any) -> bool:
        return self.get(source) is not None

    def __len__(self) -> int:
        return len(self._entries)
