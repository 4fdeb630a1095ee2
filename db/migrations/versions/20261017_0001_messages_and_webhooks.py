"""Messages and webhooks tables.

- messages: stored outbound/simulated messages, unique provider id (wamid)
- webhooks: inbound webhook events with processing state and claim column
- partial index for the unprocessed queue scan

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("from_number", sa.String(20), nullable=False),
        sa.Column("to_number", sa.String(20), nullable=False),
        sa.Column("message_text", sa.Text(), nullable=False),
        sa.Column("message_type", sa.String(50), nullable=False, server_default="text"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("whatsapp_message_id", sa.String(255), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("whatsapp_message_id", name="uq_messages_whatsapp_message_id"),
        sa.CheckConstraint(
            "status IN ('pending', 'sent', 'delivered', 'read', 'failed')",
            name="ck_messages_status",
        ),
    )
    op.create_index("idx_messages_from_number", "messages", ["from_number"])
    op.create_index("idx_messages_to_number", "messages", ["to_number"])
    op.create_index("idx_messages_created_at", "messages", ["created_at"])

    op.create_table(
        "webhooks",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("processed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_webhooks_event_type", "webhooks", ["event_type"])
    op.create_index(
        "idx_webhooks_unprocessed",
        "webhooks",
        ["created_at"],
        postgresql_where=sa.text("processed = false"),
    )


def downgrade():
    op.drop_index("idx_webhooks_unprocessed", table_name="webhooks")
    op.drop_index("idx_webhooks_event_type", table_name="webhooks")
    op.drop_table("webhooks")
    op.drop_index("idx_messages_created_at", table_name="messages")
    op.drop_index("idx_messages_to_number", table_name="messages")
    op.drop_index("idx_messages_from_number", table_name="messages")
    op.drop_table("messages")
