"""UserIdentity repository implementation using PostgreSQL."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from relay.domain.model.user_identity import UserIdentity
from relay.domain.repository.user_identity import UserIdentityRepository
from relay.domain.value import ProviderId, TokenGrant, UserIdentityId
from relay.persistence.mappers import row_to_user_identity, user_identity_to_dict
from relay.persistence.tables import user_identities_table


class PostgresUserIdentityRepository(UserIdentityRepository):
    """PostgreSQL implementation of UserIdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def upsert(
        self, provider_id: ProviderId, grant: TokenGrant, now: datetime
    ) -> UserIdentity:
        """Insert or update the identity with a single INSERT ... ON CONFLICT.

        Concurrent upserts for the same provider_id serialize on the unique
        index; each one writes all token fields together. Runs inside a
        SAVEPOINT so a failure does not poison the request transaction.

        Args:
            provider_id: Provider user id
            grant: Token pair
            now: Login timestamp

        Returns:
            The stored identity
        """
        candidate = UserIdentity(
            id=UserIdentityId(uuid4()),
            provider_id=provider_id,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            token_expires_at=grant.expires_at,
            created_at=now,
            updated_at=now,
            last_login_at=now,
        )

        stmt = insert(user_identities_table).values(**user_identity_to_dict(candidate))
        stmt = stmt.on_conflict_do_update(
            index_elements=[user_identities_table.c.provider_id],
            set_={
                "access_token": stmt.excluded.access_token,
                "refresh_token": stmt.excluded.refresh_token,
                "token_expires_at": stmt.excluded.token_expires_at,
                "last_login_at": stmt.excluded.last_login_at,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(*user_identities_table.c)

        async with self.session.begin_nested():
            result = await self.session.execute(stmt)
            row = result.mappings().one()

        return row_to_user_identity(dict(row))

    async def find_by_provider_id(
        self, provider_id: ProviderId
    ) -> Optional[UserIdentity]:
        """Get user identity by provider user ID.

        Args:
            provider_id: Provider-specific user ID

        Returns:
            UserIdentity if found, None otherwise
        """
        stmt = select(user_identities_table).where(
            user_identities_table.c.provider_id == provider_id.root
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_user_identity(dict(row))
