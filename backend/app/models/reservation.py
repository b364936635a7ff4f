"""
Reservation model.

Key design decisions:
- `status` only ever moves booked -> seated -> finished; the occupancy service
  owns that column, field edits never touch it
- Index on `reservation_date` because the host stand lists by day
- `guest_id` is optional; walk-ins and phone bookings have no profile
"""

from sqlalchemy import Column, Integer, String, Date, Time, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin

BOOKED = "booked"
SEATED = "seated"
FINISHED = "finished"
RESERVATION_STATUSES = (BOOKED, SEATED, FINISHED)


class Reservation(Base, TimestampMixin):
    __tablename__ = "reservations"

    reservation_id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    mobile_number = Column(String(30), nullable=False)
    reservation_date = Column(Date, nullable=False)
    reservation_time = Column(Time, nullable=False)
    people = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=BOOKED)
    guest_id = Column(Integer, ForeignKey("guests.guest_id"), nullable=True)

    guest = relationship("Guest", back_populates="reservations", lazy="raise")

    __table_args__ = (
        CheckConstraint("people > 0", name="check_reservation_people_positive"),
        CheckConstraint(
            "status IN ('booked', 'seated', 'finished')",
            name="check_reservation_status",
        ),
        Index("ix_reservations_date_time", "reservation_date", "reservation_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.reservation_id}, date={self.reservation_date}, "
            f"time={self.reservation_time}, status={self.status})>"
        )
