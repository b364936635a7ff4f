"""
Guest profile. Plain CRUD, no occupancy semantics.
"""

from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin


class Guest(Base, TimestampMixin):
    __tablename__ = "guests"

    guest_id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    reservations = relationship("Reservation", back_populates="guest", lazy="raise")

    def __repr__(self) -> str:
        return f"<Guest(id={self.guest_id}, name={self.first_name} {self.last_name})>"
