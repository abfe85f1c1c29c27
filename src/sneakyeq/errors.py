"""Tracking errors."""

from __future__ import annotations


class SneakyEqualsError(Exception):
    """Base class for errors raised by tracked values."""

    pass


class ReadOnlyViolation(SneakyEqualsError, TypeError):
    """Raised on any attempt to mutate a tracked value."""

    def __init__(self, *, operation: str, kind: str) -> None:
        self.operation = operation
        self.kind = kind
        super().__init__(f"cannot {operation} a tracked {kind}: tracked values are read-only")


class RevokedSessionError(SneakyEqualsError, RuntimeError):
    """Raised when a tracked value is used after its session has ended.

    Tracked values must not escape the derived-value computation that produced them.
    """

    def __init__(self, *, kind: str) -> None:
        self.kind = kind
        super().__init__(f"tracked {kind} used after its session has ended")
