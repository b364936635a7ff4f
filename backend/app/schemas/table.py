"""
Pydantic schemas for table requests and responses.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class TableCreate(BaseModel):
    table_name: str = Field(..., min_length=1, max_length=100)
    capacity: int = Field(..., gt=0, strict=True)


class TableUpdate(BaseModel):
    table_name: Optional[str] = Field(None, min_length=1, max_length=100)
    capacity: Optional[int] = Field(None, gt=0, strict=True)


class SeatRequest(BaseModel):
    reservation_id: int = Field(..., strict=True)


class TableResponse(BaseModel):
    table_id: int
    table_name: str
    capacity: int
    table_status: str
    reservation_id: Optional[int]
    created_at: datetime

    model_config = {"from_attributes": True}
