"""Sneaky equality: compare objects only on the fields a computation read.

    from sneakyeq import watch

    result = watch(state)
    title = result.session.unwrap(result.proxy["todos"][0]["title"])
    result.session.end()

    result.session.is_changed(state, new_state)  # False unless todos[0].title changed
"""

from .config import MemoizeConfig
from .errors import ReadOnlyViolation, RevokedSessionError, SneakyEqualsError
from .logger import LoggingConfig, configure_logging, get_logger
from .memoize import MemoizeObserver, MemoizeStats, memoize
from .report import AccessReport
from .session import Session, WatchAllResult, WatchResult, affected_paths, watch, watch_all
from .tracking import AccessMode
from .tracking.facade import TrackedMapping, TrackedSequence
from .util import MISSING, has_own, source_of

__all__ = [
    "MISSING",
    "AccessMode",
    "AccessReport",
    "LoggingConfig",
    "MemoizeConfig",
    "MemoizeObserver",
    "MemoizeStats",
    "ReadOnlyViolation",
    "RevokedSessionError",
    "Session",
    "SneakyEqualsError",
    "TrackedMapping",
    "TrackedSequence",
    "WatchAllResult",
    "WatchResult",
    "affected_paths",
    "configure_logging",
    "get_logger",
    "has_own",
    "memoize",
    "source_of",
    "watch",
    "watch_all",
]
