"""Initial schema: property registry, violations, applications, change and activity logs.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-12
"""

from __future__ import annotations

import uuid

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _uuid() -> sa.Uuid[uuid.UUID]:
    return sa.Uuid()


def _utc() -> sa.DateTime:
    return sa.DateTime(timezone=True)


def upgrade() -> None:
    op.create_table(
        "property",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("jurisdiction", sa.String(16), nullable=False),
        sa.Column("building_id", sa.String(16), nullable=True),
        sa.Column("parcel_id", sa.String(16), nullable=True),
        sa.Column("applicable_authorities", sa.String(), nullable=False),
        sa.Column("alerts_enabled", sa.Boolean(), nullable=False),
        sa.Column("alert_contact", sa.String(), nullable=True),
        sa.Column("owner_id", _uuid(), nullable=True),
        sa.Column("last_synced_at", _utc(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_property"),
    )

    op.create_table(
        "violation",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("property_id", _uuid(), nullable=False),
        sa.Column("authority", sa.String(32), nullable=False),
        sa.Column("source", sa.String(32), nullable=False),
        sa.Column("violation_number", sa.String(), nullable=False),
        sa.Column("issued_date", sa.Date(), nullable=True),
        sa.Column("hearing_date", sa.Date(), nullable=True),
        sa.Column("cure_by_date", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("severity", sa.String(), nullable=True),
        sa.Column("violation_class", sa.String(), nullable=True),
        sa.Column("is_stop_work_order", sa.Boolean(), nullable=False),
        sa.Column("is_vacate_order", sa.Boolean(), nullable=False),
        sa.Column("penalty_amount", sa.Float(), nullable=True),
        sa.Column("respondent_name", sa.String(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("suppressed", sa.Boolean(), nullable=False),
        sa.Column("suppression_reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("synced_at", _utc(), nullable=True),
        sa.ForeignKeyConstraint(
            ["property_id"], ["property.id"], name="fk_violation_property_id_property"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_violation"),
        sa.UniqueConstraint(
            "property_id",
            "authority",
            "violation_number",
            name="uq_violation_property_id_authority_violation_number",
        ),
    )
    op.create_index("ix_violation_property_status", "violation", ["property_id", "status"])

    op.create_table(
        "application",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("property_id", _uuid(), nullable=False),
        sa.Column("authority", sa.String(32), nullable=False),
        sa.Column("source", sa.String(32), nullable=False),
        sa.Column("application_number", sa.String(), nullable=False),
        sa.Column("application_type", sa.String(), nullable=True),
        sa.Column("work_type", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("filing_date", sa.Date(), nullable=True),
        sa.Column("approval_date", sa.Date(), nullable=True),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        sa.Column("estimated_cost", sa.Float(), nullable=True),
        sa.Column("synced_at", _utc(), nullable=True),
        sa.ForeignKeyConstraint(
            ["property_id"], ["property.id"], name="fk_application_property_id_property"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_application"),
        sa.UniqueConstraint(
            "property_id",
            "application_number",
            name="uq_application_property_id_application_number",
        ),
    )

    op.create_table(
        "change_log",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("property_id", _uuid(), nullable=False),
        sa.Column("user_id", _uuid(), nullable=True),
        sa.Column("entity_type", sa.String(32), nullable=False),
        sa.Column("entity_id", _uuid(), nullable=True),
        sa.Column("change_type", sa.String(32), nullable=False),
        sa.Column("previous_value", sa.String(), nullable=True),
        sa.Column("new_value", sa.String(), nullable=True),
        sa.Column("entity_label", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", _utc(), nullable=False),
        sa.ForeignKeyConstraint(
            ["property_id"], ["property.id"], name="fk_change_log_property_id_property"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_change_log"),
    )
    op.create_index(
        "ix_change_log_property_created", "change_log", ["property_id", "created_at"]
    )

    op.create_table(
        "property_activity_log",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("property_id", _uuid(), nullable=False),
        sa.Column("activity_type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", _utc(), nullable=False),
        sa.ForeignKeyConstraint(
            ["property_id"],
            ["property.id"],
            name="fk_property_activity_log_property_id_property",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_property_activity_log"),
    )
    op.create_index(
        "ix_property_activity_log_property_created",
        "property_activity_log",
        ["property_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_property_activity_log_property_created", table_name="property_activity_log")
    op.drop_table("property_activity_log")
    op.drop_index("ix_change_log_property_created", table_name="change_log")
    op.drop_table("change_log")
    op.drop_table("application")
    op.drop_index("ix_violation_property_status", table_name="violation")
    op.drop_table("violation")
    op.drop_table("property")
