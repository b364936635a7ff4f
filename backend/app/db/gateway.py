"""
Storage gateway for reservations, tables and guests.

All writes that must land together go through `run_atomic`, which commits the
session on success and rolls it back on any failure. Occupancy writes are
guarded updates in the same style as optimistic locking:

    UPDATE tables SET table_status = 'occupied', reservation_id = :r
    WHERE table_id = :t AND table_status = 'free'

A guard that matches zero rows means another transaction got there first;
the caller turns that into a conflict and the unit of work rolls back.
"""

import re
from datetime import date
from typing import Any, Awaitable, Callable, Optional, TypeVar

from sqlalchemy import String, delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import StorageError
from app.core.logging import get_logger
from app.models.guest import Guest
from app.models.reservation import BOOKED, Reservation
from app.models.table import FREE, OCCUPIED, Table

logger = get_logger(__name__)

T = TypeVar("T")

# Characters people type between digits of a phone number
PHONE_SEPARATORS = ("(", ")", "-", ".", " ")


def _normalized_phone_column():
    expr = Reservation.mobile_number
    for separator in PHONE_SEPARATORS:
        expr = func.replace(expr, separator, "", type_=String)
    return expr


class StorageGateway:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def run_atomic(self, work: Callable[["StorageGateway"], Awaitable[T]]) -> T:
        """Run `work(self)` as one transaction: commit on success, roll back on any error."""
        try:
            result = await work(self)
            await self.session.commit()
            return result
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("unit_of_work_failed", error=str(e), error_type=type(e).__name__)
            raise StorageError("Storage failure; the operation was rolled back") from e
        except Exception:
            await self.session.rollback()
            raise

    async def _reload(self, model, pk: int):
        return await self.session.get(model, pk, populate_existing=True)

    # Reservations

    async def create_reservation(self, fields: dict[str, Any]) -> Reservation:
        reservation = Reservation(**fields, status=BOOKED)
        self.session.add(reservation)
        await self.session.flush()
        await self.session.refresh(reservation)
        return reservation

    async def get_reservation(self, reservation_id: int) -> Optional[Reservation]:
        return await self.session.get(Reservation, reservation_id)

    async def update_reservation_fields(
        self, reservation_id: int, fields: dict[str, Any]
    ) -> Optional[Reservation]:
        """Edit a booked reservation. Returns None when no booked row matched."""
        result = await self.session.execute(
            update(Reservation)
            .where(
                Reservation.reservation_id == reservation_id,
                Reservation.status == BOOKED,
            )
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return await self._reload(Reservation, reservation_id)

    async def update_reservation_status(
        self,
        reservation_id: int,
        status: str,
        expected: str,
    ) -> Optional[Reservation]:
        """Move status from `expected` to `status`. None when the row was not in `expected`."""
        result = await self.session.execute(
            update(Reservation)
            .where(
                Reservation.reservation_id == reservation_id,
                Reservation.status == expected,
            )
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return await self._reload(Reservation, reservation_id)

    async def list_reservations(self) -> list[Reservation]:
        result = await self.session.execute(
            select(Reservation).order_by(Reservation.reservation_id.asc())
        )
        return list(result.scalars().all())

    async def list_reservations_by_date(self, reservation_date: date) -> list[Reservation]:
        result = await self.session.execute(
            select(Reservation)
            .where(Reservation.reservation_date == reservation_date)
            .order_by(Reservation.reservation_time.asc(), Reservation.reservation_id.asc())
        )
        return list(result.scalars().all())

    async def list_reservations_by_phone(self, fragment: str) -> list[Reservation]:
        digits = re.sub(r"\D", "", fragment)
        result = await self.session.execute(
            select(Reservation)
            .where(_normalized_phone_column().contains(digits))
            .order_by(Reservation.reservation_id.asc())
        )
        return list(result.scalars().all())

    async def list_reservations_by_name(self, fragment: str) -> list[Reservation]:
        result = await self.session.execute(
            select(Reservation).where(
                or_(
                    Reservation.first_name.contains(fragment, autoescape=True),
                    Reservation.last_name.contains(fragment, autoescape=True),
                )
            )
        )
        return list(result.scalars().all())

    # Tables

    async def create_table(self, fields: dict[str, Any]) -> Table:
        table = Table(**fields, table_status=FREE, reservation_id=None)
        self.session.add(table)
        await self.session.flush()
        await self.session.refresh(table)
        return table

    async def get_table(self, table_id: int) -> Optional[Table]:
        return await self.session.get(Table, table_id)

    async def update_table_fields(self, table_id: int, fields: dict[str, Any]) -> Optional[Table]:
        result = await self.session.execute(
            update(Table)
            .where(Table.table_id == table_id)
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return await self._reload(Table, table_id)

    async def list_tables(self) -> list[Table]:
        result = await self.session.execute(
            select(Table).order_by(Table.table_name.asc(), Table.table_id.asc())
        )
        return list(result.scalars().all())

    async def remove_table(self, table_id: int) -> bool:
        """Delete a free table. False when the row is missing or occupied."""
        result = await self.session.execute(
            delete(Table).where(Table.table_id == table_id, Table.table_status == FREE)
        )
        return result.rowcount == 1

    async def occupy_table(self, table_id: int, reservation_id: int) -> bool:
        result = await self.session.execute(
            update(Table)
            .where(Table.table_id == table_id, Table.table_status == FREE)
            .values(table_status=OCCUPIED, reservation_id=reservation_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def release_table(self, table_id: int, reservation_id: int) -> bool:
        result = await self.session.execute(
            update(Table)
            .where(
                Table.table_id == table_id,
                Table.table_status == OCCUPIED,
                Table.reservation_id == reservation_id,
            )
            .values(table_status=FREE, reservation_id=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def refresh_table(self, table_id: int) -> Optional[Table]:
        return await self._reload(Table, table_id)

    async def count_tables_by_status(self) -> dict[str, int]:
        """Number of tables per status; statuses with no tables report 0."""
        result = await self.session.execute(
            select(Table.table_status, func.count()).group_by(Table.table_status)
        )
        counts = {FREE: 0, OCCUPIED: 0}
        counts.update({status: count for status, count in result.all()})
        return counts

    # Guests

    async def create_guest(self, fields: dict[str, Any]) -> Guest:
        guest = Guest(**fields)
        self.session.add(guest)
        await self.session.flush()
        await self.session.refresh(guest)
        return guest

    async def get_guest(self, guest_id: int) -> Optional[Guest]:
        return await self.session.get(Guest, guest_id)

    async def update_guest(self, guest_id: int, fields: dict[str, Any]) -> Optional[Guest]:
        result = await self.session.execute(
            update(Guest)
            .where(Guest.guest_id == guest_id)
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return await self._reload(Guest, guest_id)

    async def list_guests(self) -> list[Guest]:
        result = await self.session.execute(
            select(Guest).order_by(Guest.last_name.asc(), Guest.first_name.asc())
        )
        return list(result.scalars().all())
