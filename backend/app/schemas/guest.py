"""
Pydantic schemas for guest profiles.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class GuestCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    notes: Optional[str] = Field(None, max_length=2000)


class GuestUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    notes: Optional[str] = Field(None, max_length=2000)


class GuestResponse(BaseModel):
    guest_id: int
    first_name: str
    last_name: str
    email: Optional[str]
    notes: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}
