"""Add offers table

Revision ID: 7e4a91c0d2b5
Revises: 3b1f2c9d7a10
Create Date: 2026-10-20 09:41:27.530118

"""
from alembic import op
import sqlalchemy as sa


revision = "7e4a91c0d2b5"
down_revision = "3b1f2c9d7a10"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "offers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String()),
        sa.Column("discount_percentage", sa.Float(), nullable=False),
        sa.Column("apartment_ids", sa.JSON()),
        sa.Column("valid_from", sa.Date(), nullable=False),
        sa.Column("valid_until", sa.Date(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "discount_percentage > 0 AND discount_percentage <= 100",
            name="ck_offers_discount_range",
        ),
        sa.CheckConstraint("valid_until >= valid_from", name="ck_offers_valid_range"),
    )
    op.create_index("ix_offers_id", "offers", ["id"])
    op.create_index("ix_offers_validity", "offers", ["is_active", "valid_from", "valid_until"])


def downgrade():
    op.drop_index("ix_offers_validity", table_name="offers")
    op.drop_index("ix_offers_id", table_name="offers")
    op.drop_table("offers")
