"""Domain value objects for Relay.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import Field, SecretStr, field_validator

from relay.domain.value.common import RootValueObject, ValueObject
from relay.util.pkce import derive_challenge


class CarryKey(str, Enum):
    """Fixed keys of the pending-authorization entries in the carry store."""

    STATE = "oauth_state"
    CODE_VERIFIER = "code_verifier"


class ProviderId(RootValueObject[str]):
    """Stable identifier of a user at the identity provider (e.g. usrXXXX)."""

    @field_validator("root")
    @classmethod
    def validate_provider_id(cls, v: str) -> str:
        """Validate provider id is not blank and within length limits."""
        v = v.strip()
        if len(v) < 1 or len(v) > 255:
            raise ValueError("Provider id must be 1-255 characters")
        return v


class PendingAuthorization(ValueObject):
    """State token and PKCE verifier of one login attempt.

    Lives only in the carry store between /auth/login and /auth/callback.
    """

    state: str = Field(repr=False)
    code_verifier: str = Field(repr=False)

    @property
    def code_challenge(self) -> str:
        """S256 challenge sent in the authorization request."""
        return derive_challenge(self.code_verifier)


class TokenGrant(ValueObject):
    """Token pair returned by the provider's token endpoint.

    Tokens are SecretStr so they never show up in logs or reprs.
    """

    access_token: SecretStr
    refresh_token: SecretStr
    expires_in: int = Field(ge=0)
    received_at: datetime

    @property
    def expires_at(self) -> datetime:
        """Absolute expiry, anchored at the moment the grant was received."""
        return self.received_at + timedelta(seconds=self.expires_in)
