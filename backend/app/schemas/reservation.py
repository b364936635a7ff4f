"""
Pydantic schemas for reservation responses.

Requests are validated by app.services.reservation_validator instead of a
request model: its rules run in a fixed order and report one field at a time.
"""

from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel, field_serializer


class ReservationResponse(BaseModel):
    reservation_id: int
    first_name: str
    last_name: str
    mobile_number: str
    reservation_date: date
    reservation_time: time
    people: int
    status: str
    guest_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_serializer("reservation_time")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M:%S" if value.second else "%H:%M")
