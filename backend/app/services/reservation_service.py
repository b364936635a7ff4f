"""
Reservation service: admission, lookup and field edits.

Every write runs the validator first, so nothing reaches storage that
breaks the booking rules. Status is never written here; seating and
finishing belong to the occupancy coordinator.
"""

from typing import Any, Mapping, Optional

from app.core.errors import ConflictError, NotFoundError, ReservationValidationError
from app.core.logging import get_logger
from app.core.metrics import record_rejection, reservations_created
from app.db.gateway import StorageGateway
from app.models.reservation import BOOKED, Reservation
from app.services.reservation_validator import ReservationDraft, ReservationValidator, parse_date

logger = get_logger(__name__)


def _admit(validator: ReservationValidator, payload: Mapping[str, Any]) -> ReservationDraft:
    try:
        return validator.validate(payload)
    except ReservationValidationError as e:
        record_rejection(e.field)
        logger.info("reservation_rejected", field=e.field, reason=e.message)
        raise


async def _require_guest(gateway: StorageGateway, guest_id: Optional[int]) -> None:
    if guest_id is not None and await gateway.get_guest(guest_id) is None:
        raise ReservationValidationError("guest_id", f"guest_id {guest_id} does not exist")


async def create_reservation(
    gateway: StorageGateway,
    validator: ReservationValidator,
    payload: Mapping[str, Any],
) -> Reservation:
    """Validate and store a new reservation in the booked state."""
    draft = _admit(validator, payload)
    await _require_guest(gateway, draft.guest_id)

    reservation = await gateway.run_atomic(lambda gw: gw.create_reservation(draft.as_fields()))

    reservations_created.inc()
    logger.info(
        "reservation_created",
        reservation_id=reservation.reservation_id,
        reservation_date=str(reservation.reservation_date),
        people=reservation.people,
    )
    return reservation


async def get_reservation(gateway: StorageGateway, reservation_id: int) -> Reservation:
    reservation = await gateway.get_reservation(reservation_id)
    if reservation is None:
        raise NotFoundError(f"Reservation {reservation_id} not found")
    return reservation


async def list_reservations(
    gateway: StorageGateway,
    date: Optional[str] = None,
    mobile_number: Optional[str] = None,
    name: Optional[str] = None,
) -> list[Reservation]:
    """
    List reservations by one filter, checked in this order:
    date (ordered by time), mobile_number (ordered by id), name (either
    first or last name contains it). No filter lists everything.
    """
    if date:
        try:
            reservation_date = parse_date(date)
        except ValueError:
            raise ReservationValidationError(
                "date", "date must be formatted YYYY-MM-DD"
            ) from None
        return await gateway.list_reservations_by_date(reservation_date)

    if mobile_number:
        return await gateway.list_reservations_by_phone(mobile_number)

    if name:
        return await gateway.list_reservations_by_name(name)

    return await gateway.list_reservations()


async def update_reservation(
    gateway: StorageGateway,
    validator: ReservationValidator,
    reservation_id: int,
    payload: Mapping[str, Any],
) -> Reservation:
    """Replace the editable fields of a booked reservation."""
    existing = await get_reservation(gateway, reservation_id)
    draft = _admit(validator, payload)

    if existing.status != BOOKED:
        raise ConflictError(
            f"Reservation {reservation_id} is {existing.status} and can no longer be edited"
        )

    fields = draft.as_fields()
    if "guest_id" not in payload:
        fields.pop("guest_id")
    await _require_guest(gateway, fields.get("guest_id"))

    async def work(gw: StorageGateway) -> Reservation:
        updated = await gw.update_reservation_fields(reservation_id, fields)
        if updated is None:
            raise ConflictError(f"Reservation {reservation_id} can no longer be edited")
        return updated

    reservation = await gateway.run_atomic(work)
    logger.info("reservation_updated", reservation_id=reservation_id)
    return reservation
