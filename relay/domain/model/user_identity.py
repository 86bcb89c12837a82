"""User identity entity.

The local account record for one provider identity.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, SecretStr

from relay.domain.model.common import DomainModel
from relay.domain.value import ProviderId, UserIdentityId


class UserIdentity(DomainModel):
    """Provider identity with its current credential pair.

    Exactly one record exists per provider_id. Tokens are replaced on every
    successful login.
    """

    id: UserIdentityId
    provider_id: ProviderId  # Permanent id from the provider, unique
    access_token: SecretStr
    refresh_token: SecretStr
    token_expires_at: datetime
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_login_at: Optional[datetime] = None
