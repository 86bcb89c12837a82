"""Mappers between database rows and domain models."""

from typing import Any, Dict
from uuid import UUID

from pydantic import SecretStr

from relay.domain.model import UserIdentity
from relay.domain.value import ProviderId, UserIdentityId


def row_to_user_identity(row: Dict[str, Any]) -> UserIdentity:
    """Convert database row to UserIdentity domain model.

    Args:
        row: Database row as dict

    Returns:
        UserIdentity domain model
    """
    return UserIdentity(
        id=UserIdentityId(UUID(row["id"]) if isinstance(row["id"], str) else row["id"]),
        provider_id=ProviderId(row["provider_id"]),
        access_token=SecretStr(row["access_token"]),
        refresh_token=SecretStr(row["refresh_token"]),
        token_expires_at=row["token_expires_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_login_at=row.get("last_login_at"),
    )


def user_identity_to_dict(identity: UserIdentity) -> Dict[str, Any]:
    """Convert UserIdentity domain model to database dict.

    Args:
        identity: UserIdentity domain model

    Returns:
        Dict with plain column values (tokens unwrapped)
    """
    return {
        "id": identity.id,
        "provider_id": identity.provider_id.root,
        "access_token": identity.access_token.get_secret_value(),
        "refresh_token": identity.refresh_token.get_secret_value(),
        "token_expires_at": identity.token_expires_at,
        "created_at": identity.created_at,
        "updated_at": identity.updated_at,
        "last_login_at": identity.last_login_at,
    }
