"""SQLAlchemy table definitions for Relay.

These table definitions are used with SQLAlchemy Core.
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Column,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USER IDENTITIES TABLE (one row per provider identity)
# ============================================================================
user_identities_table = Table(
    "user_identities",
    metadata,
    Column("id", UUID, primary_key=True, server_default=text("gen_random_uuid()")),
    Column("provider_id", String(255), nullable=False),  # Airtable user id
    Column("access_token", Text, nullable=False),
    Column("refresh_token", Text, nullable=False),
    Column("token_expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column("last_login_at", TIMESTAMP(timezone=True), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("provider_id", name="uq_user_identities_provider_id"),
)

# ============================================================================
# PENDING AUTHORIZATIONS TABLE (carry store: state + PKCE verifier)
# ============================================================================
pending_authorizations_table = Table(
    "pending_authorizations",
    metadata,
    Column("session_id", String(128), primary_key=True),
    Column("key", String(32), primary_key=True),  # 'oauth_state', 'code_verifier'
    Column("value", Text, nullable=False),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index(
    "idx_pending_authorizations_expires_at",
    pending_authorizations_table.c.expires_at,
)
