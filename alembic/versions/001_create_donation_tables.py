"""Create profiles, donations, accountability and products tables

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("auth_subject", sa.String(255), nullable=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("full_name", sa.String(120), nullable=True),
        sa.Column("role", sa.String(10), nullable=False, server_default="user"),
        *_timestamps(),
        sa.UniqueConstraint("auth_subject", name="uq_profiles_auth_subject"),
        sa.UniqueConstraint("email", name="uq_profiles_email"),
        sa.CheckConstraint("role IN ('admin', 'seller', 'user')", name="ck_profiles_role"),
    )

    # --- donations ---
    op.create_table(
        "donations",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("donor_name", sa.String(100), nullable=False),
        sa.Column("donor_email", sa.String(320), nullable=False),
        sa.Column("donor_phone", sa.String(20), nullable=True),
        sa.Column("donation_type", sa.String(10), nullable=False),
        sa.Column("gross_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("net_amount", sa.Numeric(16, 4), nullable=True),
        sa.Column("payment_method", sa.String(20), nullable=True),
        sa.Column("transfer_proof_url", sa.Text(), nullable=True),
        sa.Column("item_list", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("pickup_address", sa.Text(), nullable=True),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("status", sa.String(10), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_donations_status"
        ),
        sa.CheckConstraint("donation_type IN ('money', 'goods')", name="ck_donations_type"),
        sa.CheckConstraint(
            "(donation_type = 'money' AND net_amount IS NOT NULL) "
            "OR (donation_type = 'goods' AND net_amount IS NULL)",
            name="ck_donations_net_amount_money_only",
        ),
    )
    op.create_index("ix_donations_donor_email", "donations", ["donor_email"])
    op.create_index("ix_donations_status", "donations", ["status"])

    # --- accountability ---
    op.create_table(
        "accountability",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("activity_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("photo_urls", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column(
            "created_by",
            sa.UUID(),
            sa.ForeignKey("profiles.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_accountability_activity_date", "accountability", ["activity_date"])

    # --- accountability_donations (one row per referenced donation) ---
    op.create_table(
        "accountability_donations",
        sa.Column(
            "accountability_id",
            sa.UUID(),
            sa.ForeignKey("accountability.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "donation_id",
            sa.UUID(),
            sa.ForeignKey("donations.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index(
        "ix_accountability_donations_donation_id",
        "accountability_donations",
        ["donation_id"],
    )

    # --- products ---
    op.create_table(
        "products",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column(
            "user_id",
            sa.UUID(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(10), nullable=False),
        sa.Column("condition", sa.String(10), nullable=False),
        sa.Column("price", sa.Numeric(14, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(10), nullable=False, server_default="active"),
        sa.Column("photo_urls", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_products_price"),
        sa.CheckConstraint("stock >= 0", name="ck_products_stock"),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="ck_products_status"),
    )
    op.create_index("ix_products_user_id", "products", ["user_id"])
    op.create_index("ix_products_status_category", "products", ["status", "category"])


def downgrade() -> None:
    op.drop_table("products")
    op.drop_table("accountability_donations")
    op.drop_table("accountability")
    op.drop_table("donations")
    op.drop_table("profiles")
