"""
Vector cache entry.

Dependencies: None
System role: Storage record for VectorCache
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntry:
    """
    A cached embedding or result list.

    expires_at is an absolute timestamp on the owning cache's clock. Entries
    with a sliding_window move expires_at forward on read hits only.
    """

    key: str
    value: Any
    expires_at: float
    sliding_window: float | None = None
    size: int = 1

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def touch(self, now: float) -> None:
        """Extend the expiry after a read hit."""
        if self.sliding_window is not None:
            self.expires_at = max(self.expires_at, now + self.sliding_window)
