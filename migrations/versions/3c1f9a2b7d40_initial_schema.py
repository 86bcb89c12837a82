"""initial_schema

Create the schema for Relay:
- User Identities (one row per Airtable user, holding the latest token pair)
- Pending Authorizations (state and PKCE verifier between login and callback)

Revision ID: 3c1f9a2b7d40
Revises:
Create Date: 2026-10-17 10:12:44.318205

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1f9a2b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # ========================================================================
    # USER IDENTITIES table
    # ========================================================================
    op.create_table(
        "user_identities",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("provider_id", sa.String(255), nullable=False),  # Airtable user id
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=False),
        sa.Column("token_expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("last_login_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider_id", name="uq_user_identities_provider_id"),
    )

    # ========================================================================
    # PENDING AUTHORIZATIONS table
    # ========================================================================
    op.create_table(
        "pending_authorizations",
        sa.Column("session_id", sa.String(128), nullable=False),
        sa.Column("key", sa.String(32), nullable=False),  # 'oauth_state', 'code_verifier'
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("session_id", "key"),
    )
    op.create_index(
        "idx_pending_authorizations_expires_at",
        "pending_authorizations",
        ["expires_at"],
    )

    # Trigger function to update updated_at timestamp
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """)

    op.execute("""
        CREATE TRIGGER update_user_identities_updated_at
        BEFORE UPDATE ON user_identities
        FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()
    """)


def downgrade() -> None:
    """Downgrade schema."""
    op.execute(
        "DROP TRIGGER IF EXISTS update_user_identities_updated_at ON user_identities"
    )
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    op.drop_index(
        "idx_pending_authorizations_expires_at", table_name="pending_authorizations"
    )
    op.drop_table("pending_authorizations")
    op.drop_table("user_identities")
