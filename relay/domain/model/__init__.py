"""Domain model entities for Relay."""

from relay.domain.model.user_identity import UserIdentity

__all__ = ["UserIdentity"]
