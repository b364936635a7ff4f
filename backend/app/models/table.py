"""
Dining table model with its occupancy slot.

The seated reservation is referenced from the table row, not the other way
round. The CHECK constraint keeps `table_status` and `reservation_id` in
lockstep; the unique constraint stops one reservation occupying two tables.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin

FREE = "free"
OCCUPIED = "occupied"


class Table(Base, TimestampMixin):
    __tablename__ = "tables"

    table_id = Column(Integer, primary_key=True, index=True)
    table_name = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False)
    table_status = Column(String(20), nullable=False, default=FREE)
    reservation_id = Column(Integer, ForeignKey("reservations.reservation_id"), nullable=True)

    reservation = relationship("Reservation", lazy="raise")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="check_table_capacity_positive"),
        CheckConstraint("table_status IN ('free', 'occupied')", name="check_table_status"),
        CheckConstraint(
            "(table_status = 'occupied' AND reservation_id IS NOT NULL)"
            " OR (table_status = 'free' AND reservation_id IS NULL)",
            name="check_table_occupancy_linked",
        ),
        UniqueConstraint("reservation_id", name="uq_table_reservation"),
    )

    @property
    def is_occupied(self) -> bool:
        return self.table_status == OCCUPIED

    def __repr__(self) -> str:
        return f"<Table(id={self.table_id}, name={self.table_name}, status={self.table_status})>"
