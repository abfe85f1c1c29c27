from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MAX_KEYS = 256


@dataclass(frozen=True)
class MemoizeConfig:
    """Cache layout of a memoized function.

    The last call is always cached. With ``keyed`` every distinct first
    argument (a dict, list, tuple or mapping proxy) additionally keeps its
    own last result, up to ``max_keys`` arguments.
    """

    keyed: bool = False
    max_keys: int = DEFAULT_MAX_KEYS

    def __post_init__(self) -> None:
        if self.max_keys < 1:
            raise ValueError(f"max_keys must be at least 1, got {self.max_keys}")
