"""Carry store implementation using PostgreSQL."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from relay.domain.repository.carry import CarryStore
from relay.domain.value import CarryKey, CarrySessionId
from relay.persistence.tables import pending_authorizations_table


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostgresCarryStore(CarryStore):
    """PostgreSQL implementation of CarryStore.

    Every operation runs in its own short transaction, so no row lock is held
    while the callback waits on the provider. take_once is a single
    DELETE ... RETURNING: of two concurrent callers only one gets the row.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize store.

        Args:
            session_factory: Factory for short-lived sessions
            clock: Current time source (timezone-aware)
        """
        self.session_factory = session_factory
        self.clock = clock

    async def put(
        self, session_id: CarrySessionId, key: CarryKey, value: str, ttl: timedelta
    ) -> None:
        """Store or replace an entry and purge expired ones."""
        now = self.clock()
        table = pending_authorizations_table

        stmt = insert(table).values(
            session_id=session_id,
            key=key.value,
            value=value,
            expires_at=now + ttl,
            created_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.session_id, table.c.key],
            set_={
                "value": stmt.excluded.value,
                "expires_at": stmt.excluded.expires_at,
                "created_at": stmt.excluded.created_at,
            },
        )

        async with self.session_factory() as session, session.begin():
            await session.execute(delete(table).where(table.c.expires_at <= now))
            await session.execute(stmt)

    async def take_once(
        self, session_id: CarrySessionId, key: CarryKey
    ) -> Optional[str]:
        """Delete the entry and return its value if it has not expired."""
        table = pending_authorizations_table
        stmt = (
            delete(table)
            .where(table.c.session_id == session_id, table.c.key == key.value)
            .returning(table.c.value, table.c.expires_at)
        )

        async with self.session_factory() as session, session.begin():
            row = (await session.execute(stmt)).first()

        if row is None or row.expires_at <= self.clock():
            return None

        return row.value

    async def discard(self, session_id: CarrySessionId, key: CarryKey) -> None:
        """Delete the entry if present."""
        table = pending_authorizations_table
        async with self.session_factory() as session, session.begin():
            await session.execute(
                delete(table).where(
                    table.c.session_id == session_id, table.c.key == key.value
                )
            )
