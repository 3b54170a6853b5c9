from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Time source for deletion stamps, fallback summaries and buffer expiry.

    Must return timezone-aware datetimes; message timestamps are compared
    against it directly.
    """

    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
