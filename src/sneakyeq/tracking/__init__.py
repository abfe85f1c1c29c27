"""Access tracking.

Facades intercept reads of plain containers and report each access to a
tracker, which keeps a touch ledger per source object.
"""

from enum import Enum, auto


class AccessMode(Enum):
    """How a facade observed its source."""

    READ = auto()  # Value of a key was read (and tracked in turn)
    CONTAINS = auto()  # `key in obj`
    HAS_OWN = auto()  # Own presence of a single key
    OWN_KEYS = auto()  # Full own-key enumeration (iteration, len)
