"""In-memory carry store for testing and single-process development."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Optional

from relay.domain.repository.carry import CarryStore
from relay.domain.value import CarryKey, CarrySessionId


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCarryStore(CarryStore):
    """In-memory implementation of CarryStore.

    Attributes:
        _entries: Dict mapping (session_id, key) -> (value, expires_at)
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        """Initialize empty store.

        Args:
            clock: Current time source (timezone-aware)
        """
        self.clock = clock
        self._entries: dict[tuple[str, str], tuple[str, datetime]] = {}

    async def put(
        self, session_id: CarrySessionId, key: CarryKey, value: str, ttl: timedelta
    ) -> None:
        """Store entry and drop expired ones."""
        now = self.clock()
        self._entries = {k: v for k, v in self._entries.items() if v[1] > now}
        self._entries[(session_id, key.value)] = (value, now + ttl)

    async def take_once(
        self, session_id: CarrySessionId, key: CarryKey
    ) -> Optional[str]:
        """Pop entry; expired entries are dropped and reported as missing."""
        entry = self._entries.pop((session_id, key.value), None)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at <= self.clock():
            return None
        return value

    async def discard(self, session_id: CarrySessionId, key: CarryKey) -> None:
        """Delete entry if present."""
        self._entries.pop((session_id, key.value), None)
