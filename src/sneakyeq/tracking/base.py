"""Protocols for access tracking.

Facades depend on the Tracker protocol rather than on a concrete session.
"""

from collections.abc import Hashable
from typing import Any, Protocol, runtime_checkable

from . import AccessMode


@runtime_checkable
class Tracker(Protocol):
    """Receives accesses from the facades it created."""

    def track(self, value: Any) -> Any:
        """Return a facade for trackable values, anything else unchanged."""
        ...

    def record(self, source: Any, mode: AccessMode, key: Hashable | None = None) -> None:
        """Note that ``source`` was observed through ``mode``.

        Args:
            source: Object the facade wraps
            mode: Kind of access
            key: Key involved, ``None`` for OWN_KEYS
        """
        ...
