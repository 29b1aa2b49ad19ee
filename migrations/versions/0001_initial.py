"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

BigIntId = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    # mailboxes
    op.create_table(
        "mailboxes",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("address", sa.String(), nullable=False, unique=True),
        sa.Column("local_part", sa.String(), nullable=False),
        sa.Column("domain", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_pinned", sa.Boolean(), nullable=False, server_default="0"),
    )
    op.create_index("ix_mailboxes_address", "mailboxes", ["address"])

    # messages
    op.create_table(
        "messages",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column(
            "mailbox_id", BigIntId, sa.ForeignKey("mailboxes.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("sender", sa.Text(), nullable=False),
        sa.Column("subject", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("html_content", sa.Text(), nullable=True),
        sa.Column("raw_source", sa.Text(), nullable=True),
        sa.Column("raw_hash", sa.String(), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="0"),
    )
    op.create_index("ix_messages_mailbox_id", "messages", ["mailbox_id"])
    op.create_index("ix_messages_received_at", "messages", ["received_at"])

    # sent_emails
    op.create_table(
        "sent_emails",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("resend_id", sa.String(), nullable=True),
        sa.Column("from_name", sa.Text(), nullable=True),
        sa.Column("from_addr", sa.Text(), nullable=False),
        sa.Column("to_addrs", sa.Text(), nullable=False),
        sa.Column("subject", sa.Text(), nullable=False),
        sa.Column("html_content", sa.Text(), nullable=True),
        sa.Column("text_content", sa.Text(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("scheduled_at", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_sent_emails_resend_id", "sent_emails", ["resend_id"])
    op.create_index("ix_sent_emails_from_addr", "sent_emails", ["from_addr"])


def downgrade() -> None:
    op.drop_index("ix_sent_emails_from_addr", table_name="sent_emails")
    op.drop_index("ix_sent_emails_resend_id", table_name="sent_emails")
    op.drop_table("sent_emails")
    op.drop_index("ix_messages_received_at", table_name="messages")
    op.drop_index("ix_messages_mailbox_id", table_name="messages")
    op.drop_table("messages")
    op.drop_index("ix_mailboxes_address", table_name="mailboxes")
    op.drop_table("mailboxes")
