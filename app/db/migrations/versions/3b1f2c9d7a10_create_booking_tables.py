"""Create apartment, booking, payment, document and notification tables

Revision ID: 3b1f2c9d7a10
Revises:
Create Date: 2026-10-19 10:12:03.118204

"""
from alembic import op
import sqlalchemy as sa


revision = "3b1f2c9d7a10"
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum("user", "admin", name="userrole")
booking_status = sa.Enum("pending", "confirmed", "ongoing", "cancelled", "expired", name="bookingstatus")
payment_status = sa.Enum("paid", "failed", "refunded", "cancelled", name="paymentstatus")
document_type = sa.Enum("aadhaar", "pan", "passport", "driving_license", "voter_id", name="documenttype")
document_status = sa.Enum("pending", "approved", "rejected", name="documentstatus")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="user"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "apartments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String()),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("price_per_night", sa.Float(), nullable=False),
        sa.Column("cleaning_fee", sa.Float(), nullable=False, server_default="0"),
        sa.Column("max_guests", sa.Integer(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("requires_verification", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_apartments_id", "apartments", ["id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("apartment_id", sa.Integer(), sa.ForeignKey("apartments.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("guests", sa.Integer(), nullable=False),
        sa.Column("guest_details", sa.JSON()),
        sa.Column("status", booking_status, nullable=False, server_default="pending"),
        sa.Column("expires_at", sa.DateTime()),
        sa.Column("nights", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("gateway_order_id", sa.String()),
        sa.Column("admin_notes", sa.String()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("end_date > start_date", name="ck_bookings_range"),
        sa.CheckConstraint("guests > 0", name="ck_bookings_guests"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_gateway_order_id", "bookings", ["gateway_order_id"])
    op.create_index("ix_bookings_apartment_range", "bookings", ["apartment_id", "start_date", "end_date"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("method", sa.String(), nullable=False, server_default="unknown"),
        sa.Column("gateway_payment_id", sa.String(), nullable=False),
        sa.Column("gateway_order_id", sa.String()),
        sa.Column("refund_id", sa.String()),
        sa.Column("status", payment_status, nullable=False, server_default="paid"),
        sa.Column("paid_at", sa.DateTime(), nullable=False),
        sa.Column("refunded_at", sa.DateTime()),
        sa.UniqueConstraint("gateway_payment_id", name="uq_payments_gateway_payment_id"),
    )
    op.create_index("ix_payments_id", "payments", ["id"])
    op.create_index("ix_payments_booking_id", "payments", ["booking_id"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id")),
        sa.Column("document_type", document_type, nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("image_url", sa.String()),
        sa.Column("public_id", sa.String()),
        sa.Column("status", document_status, nullable=False, server_default="pending"),
        sa.Column("reviewer_id", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("review_message", sa.String()),
        sa.Column("reviewed_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_documents_id", "documents", ["id"])
    op.create_index("ix_documents_user_id", "documents", ["user_id"])

    op.create_table(
        "admin_notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", sa.String(), nullable=False, server_default="system"),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.String()),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id")),
        sa.Column("meta", sa.JSON()),
        sa.Column("level", sa.String(), nullable=False, server_default="info"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_admin_notifications_id", "admin_notifications", ["id"])


def downgrade():
    op.drop_table("admin_notifications")
    op.drop_table("documents")
    op.drop_table("payments")
    op.drop_table("bookings")
    op.drop_table("apartments")
    op.drop_table("users")

    bind = op.get_bind()
    for enum in (document_status, document_type, payment_status, booking_status, user_role):
        enum.drop(bind, checkfirst=True)
