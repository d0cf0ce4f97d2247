"""create_viewing_schema

Revision ID: 3f9c1a7d2b64
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2b64'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("role", sa.String(50), nullable=False, server_default="agent"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "properties",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("owner_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("property_code", sa.String(50), nullable=False),
        sa.Column("business_type", sa.String(50), nullable=False),
        sa.Column("configuration", sa.String(100)),
        sa.Column("address", sa.String(255)),
        sa.Column("status", sa.String(50), server_default="available", nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_properties_owner_id", "properties", ["owner_id"])
    op.create_index("ix_properties_property_code", "properties", ["property_code"], unique=True)

    op.create_table(
        "applicants",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50)),
        sa.Column("agreed_to_gdpr", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_applicants_email", "applicants", ["email"])
    op.create_index("ix_applicants_phone", "applicants", ["phone"])

    op.create_table(
        "applicant_identity_changes",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("applicant_id", sa.UUID(), sa.ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("property_id", sa.UUID(), sa.ForeignKey("properties.id", ondelete="SET NULL")),
        sa.Column("changed_by", sa.String(50), nullable=False),
        sa.Column("old_full_name", sa.String(255)),
        sa.Column("old_email", sa.String(255)),
        sa.Column("old_phone", sa.String(50)),
        sa.Column("new_full_name", sa.String(255)),
        sa.Column("new_email", sa.String(255)),
        sa.Column("new_phone", sa.String(50)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        "ix_applicant_identity_changes_applicant_id", "applicant_identity_changes", ["applicant_id"]
    )

    op.create_table(
        "inquiries",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("applicant_id", sa.UUID(), sa.ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("property_id", sa.UUID(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("inquiry_type", sa.String(20), nullable=False),
        sa.Column("viewing_time", sa.DateTime()),
        sa.Column("financing_method", sa.String(100)),
        sa.Column("own_funds_pct", sa.Numeric(5, 2)),
        sa.Column("mortgage_pct", sa.Numeric(5, 2)),
        sa.Column("has_advisor", sa.String(255)),
        sa.Column("mortgage_progress", sa.String(255)),
        sa.Column("tied_to_sale", sa.Boolean()),
        sa.Column("buyer_notes", sa.Text()),
        sa.Column("move_in_date", sa.Date()),
        sa.Column("lease_length", sa.String(100)),
        sa.Column("occupants", sa.Integer()),
        sa.Column("has_pets", sa.Boolean()),
        sa.Column("smoker", sa.Boolean()),
        sa.Column("notes", sa.Text()),
        sa.Column("utm_source", sa.String(255)),
        sa.Column("utm_medium", sa.String(255)),
        sa.Column("utm_campaign", sa.String(255)),
        sa.Column("form_submitted_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("applicant_id", "property_id", name="uq_inquiries_applicant_property"),
    )
    op.create_index("ix_inquiries_applicant_id", "inquiries", ["applicant_id"])
    op.create_index("ix_inquiries_property_id", "inquiries", ["property_id"])

    op.create_table(
        "viewing_slots",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("property_id", sa.UUID(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("end_at", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("occupant_id", sa.UUID(), sa.ForeignKey("applicants.id", ondelete="SET NULL")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("end_at > start_at", name="ck_viewing_slots_interval"),
        sa.CheckConstraint(
            "status IN ('available', 'booked', 'cancelled')",
            name="ck_viewing_slots_status",
        ),
        sa.CheckConstraint(
            "(status = 'booked' AND occupant_id IS NOT NULL) OR (status <> 'booked' AND occupant_id IS NULL)",
            name="ck_viewing_slots_occupant",
        ),
    )
    op.create_index("ix_viewing_slots_property_id", "viewing_slots", ["property_id"])
    op.create_index("ix_viewing_slots_status", "viewing_slots", ["status"])
    op.create_index("ix_viewing_slots_occupant_id", "viewing_slots", ["occupant_id"])
    op.create_index("ix_viewing_slots_property_start", "viewing_slots", ["property_id", "start_at"])
    # At most one booked slot per (property, applicant)
    op.create_index(
        "uq_viewing_slots_active_booking",
        "viewing_slots",
        ["property_id", "occupant_id"],
        unique=True,
        postgresql_where=sa.text("status = 'booked'"),
    )

    op.create_table(
        "viewing_tokens",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("property_id", sa.UUID(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("applicant_id", sa.UUID(), sa.ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("issued_by_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("used_at", sa.DateTime()),
        sa.Column("revoked_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_viewing_tokens_token", "viewing_tokens", ["token"], unique=True)
    op.create_index("ix_viewing_tokens_property_id", "viewing_tokens", ["property_id"])
    op.create_index("ix_viewing_tokens_applicant_id", "viewing_tokens", ["applicant_id"])


def downgrade() -> None:
    op.drop_table("viewing_tokens")
    op.drop_table("viewing_slots")
    op.drop_table("inquiries")
    op.drop_table("applicant_identity_changes")
    op.drop_table("applicants")
    op.drop_table("properties")
    op.drop_table("users")
