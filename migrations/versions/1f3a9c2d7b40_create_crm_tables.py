"""create_crm_tables

Revision ID: 1f3a9c2d7b40
Revises:
Create Date: 2026-10-17 09:12:44.103512

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '1f3a9c2d7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Create clients, inquiries, events, leads and oauth_tokens."""
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("fraternity", sa.String(length=255), nullable=False),
        sa.Column("school", sa.String(length=255), nullable=False),
        sa.Column("main_contact_name", sa.String(length=255), nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=False),
        sa.Column("instagram_handle", sa.String(length=255), nullable=False),
        sa.Column("number_of_events", sa.Integer(), nullable=False),
        sa.Column("average_event_size", sa.Float(), nullable=False),
        sa.Column("client_score", sa.Float(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_clients_user_id", "clients", ["user_id"])

    op.create_table(
        "inquiries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("school", sa.String(length=255), nullable=False),
        sa.Column("fraternity", sa.String(length=255), nullable=False),
        sa.Column("main_contact", sa.String(length=255), nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=False),
        sa.Column("address_of_event", sa.String(length=500), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("budget", sa.Float(), nullable=False),
        sa.Column("inquiry_date", sa.Date(), nullable=False),
        sa.Column("inquiry_time", sa.String(length=5), nullable=False),
        sa.Column("stage_build", sa.String(length=50), nullable=False),
        sa.Column("power", sa.String(length=50), nullable=False),
        sa.Column("gates", sa.Boolean(), nullable=False),
        sa.Column("security", sa.Boolean(), nullable=False),
        sa.Column("co2_tanks", sa.Integer(), nullable=False),
        sa.Column("cdjs", sa.Integer(), nullable=False),
        sa.Column("audio", sa.String(length=50), nullable=False),
        sa.Column("tasks", JSON_TYPE, nullable=False),
        sa.Column("progress", sa.Float(), nullable=False),
        sa.Column(
            "stage",
            sa.Enum("OPEN", "PROMOTING", "PROMOTED", name="inquirystage"),
            nullable=False,
        ),
        sa.Column("client_stats_applied", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_inquiries_user_id", "inquiries", ["user_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("source_inquiry_id", sa.Integer(), nullable=True, unique=True),
        sa.Column("fraternity", sa.String(length=255), nullable=False),
        sa.Column("school", sa.String(length=255), nullable=False),
        sa.Column("event_name", sa.String(length=255), nullable=False),
        sa.Column("event_date", sa.DateTime(), nullable=False),
        sa.Column("address_of_event", sa.String(length=500), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("budget", sa.Float(), nullable=False),
        sa.Column("stage_build", sa.String(length=50), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "CONFIRMED", "COMPLETED", "CANCELLED", name="eventstatus"),
            nullable=False,
        ),
        sa.Column("tasks", JSON_TYPE, nullable=False),
        sa.Column("progress", sa.Float(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_events_user_id", "events", ["user_id"])

    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("school", sa.String(length=255), nullable=True),
        sa.Column("fraternity", sa.String(length=255), nullable=True),
        sa.Column("instagram_handle", sa.String(length=255), nullable=True),
        sa.Column(
            "status",
            sa.Enum("GENERAL", "INTERESTED", "NOT_INTERESTED", name="leadstatus"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("election_date", sa.String(length=32), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_leads_user_id", "leads", ["user_id"])

    op.create_table(
        "oauth_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "provider",
            sa.Enum("GOOGLE", "DOCUSIGN", name="oauthprovider"),
            nullable=False,
        ),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("scope", sa.Text(), nullable=True),
        sa.Column("token_type", sa.String(length=32), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "provider", name="uq_oauth_tokens_user_provider"),
    )


def downgrade() -> None:
    """Drop the CRM tables and their enum types."""
    op.drop_table("oauth_tokens")
    op.drop_index("ix_leads_user_id", table_name="leads")
    op.drop_table("leads")
    op.drop_index("ix_events_user_id", table_name="events")
    op.drop_table("events")
    op.drop_index("ix_inquiries_user_id", table_name="inquiries")
    op.drop_table("inquiries")
    op.drop_index("ix_clients_user_id", table_name="clients")
    op.drop_table("clients")
    for enum_name in ("oauthprovider", "leadstatus", "eventstatus", "inquirystage"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
