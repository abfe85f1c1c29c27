"""Access report - JSON-friendly snapshot of what a session observed.

All models are frozen dataclasses.
"""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AccessReport:
    """Dependencies of one derived value on one input."""

    paths: tuple[str, ...]  # "$.x.y", "$.items:all_own_keys"
    records: int  # Ledger entries of the session
    terminal: int  # Entries used whole
    active: bool  # Session not yet ended

    def to_dict(self) -> dict[str, Any]:
        """Export as JSON-serializable dict."""
        return {
            "paths": list(self.paths),
            "records": self.records,
            "terminal": self.terminal,
            "active": self.active,
        }

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
