"""
Audit trail of login and seed decisions.

Appends one JSON line per event to the configured file. Logging is off when
no path is configured.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class EventLog:
    """Append-only JSONL log of authentication decisions.

    One JSON object per line with ``timestamp`` and ``event_type``. Secrets
    are never passed in. Write failures are ignored.
    """

    def __init__(self, path: Optional[str | Path]) -> None:
        self.path = Path(path) if path else None

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def log_event(self, event_type: str, **details: Any) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            event = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "event_type": event_type,
                **details,
            }
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(event, ensure_ascii=True) + "\n")
        except OSError:
            pass

    def read_events(self) -> list[dict[str, Any]]:
        if self.path is None or not self.path.exists():
            return []
        lines = self.path.read_text(encoding="utf-8").splitlines()
        return [json.loads(line) for line in lines if line.strip()]
