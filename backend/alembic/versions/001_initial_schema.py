"""Initial schema: guests, reservations, tables with occupancy constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "guests",
        sa.Column("guest_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_guests_guest_id", "guests", ["guest_id"])

    op.create_table(
        "reservations",
        sa.Column("reservation_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("mobile_number", sa.String(30), nullable=False),
        sa.Column("reservation_date", sa.Date(), nullable=False),
        sa.Column("reservation_time", sa.Time(), nullable=False),
        sa.Column("people", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'booked'")),
        sa.Column("guest_id", sa.Integer(), sa.ForeignKey("guests.guest_id"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("people > 0", name="check_reservation_people_positive"),
        sa.CheckConstraint(
            "status IN ('booked', 'seated', 'finished')", name="check_reservation_status"
        ),
    )
    op.create_index("ix_reservations_reservation_id", "reservations", ["reservation_id"])
    # The host stand lists a day's book ordered by time
    op.create_index(
        "ix_reservations_date_time", "reservations", ["reservation_date", "reservation_time"]
    )

    op.create_table(
        "tables",
        sa.Column("table_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("table_name", sa.String(100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("table_status", sa.String(20), nullable=False, server_default=sa.text("'free'")),
        sa.Column(
            "reservation_id",
            sa.Integer(),
            sa.ForeignKey("reservations.reservation_id"),
            nullable=True,
        ),
        *_timestamps(),
        sa.CheckConstraint("capacity > 0", name="check_table_capacity_positive"),
        sa.CheckConstraint("table_status IN ('free', 'occupied')", name="check_table_status"),
        # Occupied iff a reservation is linked
        sa.CheckConstraint(
            "(table_status = 'occupied' AND reservation_id IS NOT NULL)"
            " OR (table_status = 'free' AND reservation_id IS NULL)",
            name="check_table_occupancy_linked",
        ),
        sa.UniqueConstraint("reservation_id", name="uq_table_reservation"),
    )
    op.create_index("ix_tables_table_id", "tables", ["table_id"])


def downgrade() -> None:
    op.drop_table("tables")
    op.drop_table("reservations")
    op.drop_table("guests")
