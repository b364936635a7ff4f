"""
Reservation endpoints. Bodies are raw JSON objects so the admission rules can
report the first failing field in their own order.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from app.api.deps import get_gateway, get_validator
from app.db.gateway import StorageGateway
from app.schemas.reservation import ReservationResponse
from app.services.reservation_service import (
    create_reservation,
    get_reservation,
    list_reservations,
    update_reservation,
)
from app.services.reservation_validator import ReservationValidator

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.post("/", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation_endpoint(
    payload: dict[str, Any] = Body(...),
    gateway: StorageGateway = Depends(get_gateway),
    validator: ReservationValidator = Depends(get_validator),
):
    """
    Book a reservation.

    Rejected with 400 when a field is missing or malformed, the slot is in the
    past, the restaurant is closed that day, or the time is outside the
    operating window.
    """
    return await create_reservation(gateway, validator, payload)


@router.get("/", response_model=list[ReservationResponse])
async def list_reservations_endpoint(
    date: Optional[str] = Query(None, description="YYYY-MM-DD; ordered by time"),
    mobile_number: Optional[str] = Query(None, description="Digits to search for"),
    name: Optional[str] = Query(None, description="Substring of first or last name"),
    gateway: StorageGateway = Depends(get_gateway),
):
    return await list_reservations(gateway, date=date, mobile_number=mobile_number, name=name)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation_endpoint(
    reservation_id: int,
    gateway: StorageGateway = Depends(get_gateway),
):
    return await get_reservation(gateway, reservation_id)


@router.put("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation_endpoint(
    reservation_id: int,
    payload: dict[str, Any] = Body(...),
    gateway: StorageGateway = Depends(get_gateway),
    validator: ReservationValidator = Depends(get_validator),
):
    """Edit a booked reservation. The admission rules run again on the new values."""
    return await update_reservation(gateway, validator, reservation_id, payload)
