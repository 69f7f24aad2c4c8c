# alembic/versions/001_initial_schema.py
"""Initial schema - accounts, timetable, customers, enrollments, bookings, payments, ledger

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Also installs ``receipt_number_seq`` and ``generate_receipt_number()`` on
PostgreSQL. Receipt numbers look like ``RCP-20261019-000042``.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _json_type() -> sa.types.TypeEngine:
    return postgresql.JSONB(astext_type=sa.Text()).with_variant(sa.JSON(), "sqlite")


def upgrade() -> None:
    print("Creating initial classbook schema...")

    op.create_table(
        "users",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="customer"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "instructors",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("user_id", sa.String(26), sa.ForeignKey("users.id"), nullable=True, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_instructors_id", "instructors", ["id"])

    op.create_table(
        "exercise_types",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
    )

    op.create_table(
        "classes",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("exercise_type_id", sa.String(26), sa.ForeignKey("exercise_types.id"), nullable=True),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("zip_code", sa.String(10), nullable=True),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("instructor_id", sa.String(26), sa.ForeignKey("instructors.id"), nullable=True),
        sa.Column("fee_criteria", sa.String(255), nullable=False),
        sa.Column("fee_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("term", sa.String(10), nullable=False),
        sa.Column("class_capacity", sa.Integer(), nullable=True),
        sa.Column("is_subsidised", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.CheckConstraint("day_of_week BETWEEN 1 AND 7", name="check_class_day_of_week"),
        sa.CheckConstraint("fee_amount >= 0", name="check_class_fee_non_negative"),
        sa.CheckConstraint(
            "class_capacity IS NULL OR class_capacity >= 0", name="check_class_capacity"
        ),
    )
    op.create_index("ix_classes_id", "classes", ["id"])
    op.create_index("ix_classes_instructor_id", "classes", ["instructor_id"])
    op.create_index("ix_classes_term", "classes", ["term"])

    op.create_table(
        "customers",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("user_id", sa.String(26), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("surname", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("contact_no", sa.String(50), nullable=True),
        sa.Column("work_mobile", sa.String(50), nullable=True),
        sa.Column("street_number", sa.String(20), nullable=True),
        sa.Column("street_name", sa.String(255), nullable=True),
        sa.Column("suburb", sa.String(100), nullable=True),
        sa.Column("post_code", sa.String(10), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("country_of_birth", sa.String(100), nullable=True),
        sa.Column("occupation", sa.String(100), nullable=True),
        sa.Column("next_of_kin_name", sa.String(255), nullable=True),
        sa.Column("next_of_kin_relationship", sa.String(100), nullable=True),
        sa.Column("next_of_kin_mobile", sa.String(50), nullable=True),
        sa.Column("next_of_kin_phone", sa.String(50), nullable=True),
        sa.Column("medical_history", sa.Text(), nullable=True),
        sa.Column("paq_form", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("ix_customers_id", "customers", ["id"])
    op.create_index("ix_customers_email", "customers", ["email"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("customer_id", sa.String(26), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("enrollment_type", sa.String(20), nullable=False, server_default="standard"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("payment_intent", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_enrollments_id", "enrollments", ["id"])
    op.create_index("ix_enrollments_customer_id", "enrollments", ["customer_id"])
    op.create_index("ix_enrollments_payment_intent", "enrollments", ["payment_intent"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("customer_id", sa.String(26), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("class_id", sa.String(26), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("enrollment_id", sa.String(26), sa.ForeignKey("enrollments.id"), nullable=True),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("term", sa.String(10), nullable=False),
        sa.Column("is_free_trial", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_customer_id", "bookings", ["customer_id"])
    op.create_index("ix_bookings_class_id", "bookings", ["class_id"])
    op.create_index("ix_bookings_enrollment_id", "bookings", ["enrollment_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("enrollment_id", sa.String(26), sa.ForeignKey("enrollments.id"), nullable=True),
        sa.Column("booking_id", sa.String(26), sa.ForeignKey("bookings.id"), nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="completed"),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("receipt_number", sa.String(50), nullable=False, unique=True),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("amount >= 0", name="check_payment_amount_non_negative"),
    )
    op.create_index("ix_payments_id", "payments", ["id"])
    op.create_index("ix_payments_enrollment_id", "payments", ["enrollment_id"])
    op.create_index("ix_payments_booking_id", "payments", ["booking_id"])

    op.create_table(
        "class_attendance",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("class_id", sa.String(26), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("booking_id", sa.String(26), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("class_id", "booking_id", name="uq_class_attendance_class_booking"),
    )
    op.create_index("ix_class_attendance_class_id", "class_attendance", ["class_id"])
    op.create_index("ix_class_attendance_booking_id", "class_attendance", ["booking_id"])

    op.create_table(
        "webhook_events",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("event_id", sa.String(255), nullable=True),
        sa.Column("payload", _json_type(), nullable=False),
        sa.Column("headers", _json_type(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="received"),
        sa.Column("processing_error", sa.Text(), nullable=True),
        sa.Column("processing_duration_ms", sa.Integer(), nullable=True),
        sa.Column("related_entity_type", sa.String(50), nullable=True),
        sa.Column("related_entity_id", sa.String(26), nullable=True),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_retry_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("source", "event_id", name="uq_webhook_events_source_event_id"),
    )
    op.create_index("ix_webhook_events_source", "webhook_events", ["source"])
    op.create_index("ix_webhook_events_event_type", "webhook_events", ["event_type"])
    op.create_index("ix_webhook_events_status", "webhook_events", ["status"])
    op.create_index("ix_webhook_events_received_at", "webhook_events", ["received_at"])
    op.create_index(
        "ix_webhook_events_related_entity",
        "webhook_events",
        ["related_entity_type", "related_entity_id"],
    )

    if op.get_bind().dialect.name == "postgresql":
        op.execute("CREATE SEQUENCE IF NOT EXISTS receipt_number_seq START 1")
        op.execute(
            """
            CREATE OR REPLACE FUNCTION generate_receipt_number()
            RETURNS text
            LANGUAGE sql
            AS $$
                SELECT 'RCP-'
                    || to_char(now() AT TIME ZONE 'UTC', 'YYYYMMDD')
                    || '-'
                    || lpad(nextval('receipt_number_seq')::text, 6, '0');
            $$;
            """
        )

    print("Initial classbook schema created")


def downgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP FUNCTION IF EXISTS generate_receipt_number()")
        op.execute("DROP SEQUENCE IF EXISTS receipt_number_seq")

    for table in (
        "webhook_events",
        "class_attendance",
        "payments",
        "bookings",
        "enrollments",
        "customers",
        "classes",
        "exercise_types",
        "instructors",
        "users",
    ):
        op.drop_table(table)
