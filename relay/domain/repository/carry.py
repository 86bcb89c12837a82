"""Carry store interface for pending authorizations."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional

from relay.domain.value import CarryKey, CarrySessionId


class CarryStore(ABC):
    """Short-lived, single-use storage between /auth/login and /auth/callback.

    Entries are scoped to a carry session id held by the browser in an
    HttpOnly cookie. Expired entries behave exactly like missing ones.
    """

    @abstractmethod
    async def put(
        self, session_id: CarrySessionId, key: CarryKey, value: str, ttl: timedelta
    ) -> None:
        """Store value under (session_id, key), replacing any previous entry.

        Args:
            session_id: Carry session id from the browser cookie
            key: Entry key
            value: Secret value to carry
            ttl: Lifetime of the entry
        """
        pass

    @abstractmethod
    async def take_once(
        self, session_id: CarrySessionId, key: CarryKey
    ) -> Optional[str]:
        """Remove and return the entry.

        A second call for the same key returns None even if the TTL has not
        elapsed.

        Args:
            session_id: Carry session id from the browser cookie
            key: Entry key

        Returns:
            The stored value, or None if missing, expired or already taken
        """
        pass

    @abstractmethod
    async def discard(self, session_id: CarrySessionId, key: CarryKey) -> None:
        """Remove the entry if present.

        Args:
            session_id: Carry session id from the browser cookie
            key: Entry key
        """
        pass
