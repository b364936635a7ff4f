"""
Occupancy coordinator: the only code allowed to change who sits at a table.

STATE MACHINE
=============

Reservation x Table, driven by two transitions:

    seat(table, reservation)   booked + free      -> seated + occupied(reservation)
    finish(table)              seated + occupied  -> finished + free

Each transition is one unit of work (StorageGateway.run_atomic). Both row
writes are guarded updates, reservation first:

    UPDATE reservations ... WHERE status = 'booked'
    UPDATE tables       ... WHERE table_status = 'free'

so the preconditions checked on the rows we read are re-checked by the
database at write time. When two seat requests race for the same table the
loser's guard matches zero rows, it raises ConflictError, and its unit of
work rolls back. The same holds when one party is sent to two tables at
once: the second request waits on the reservation row and then finds it no
longer booked. No application-level locks are involved; the storage's row
write serialization decides the winner.

Retrying a seat that already succeeded hits the "already seated" check,
which is what makes client retries safe.
"""

from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError

from app.core.errors import ConflictError, NotFoundError, ReservationError
from app.core.logging import get_logger
from app.core.metrics import occupancy_latency, record_transition
from app.db.gateway import StorageGateway
from app.models.reservation import BOOKED, FINISHED, SEATED
from app.models.table import Table

logger = get_logger(__name__)

T = TypeVar("T")


class OccupancyCoordinator:
    def __init__(self, gateway: StorageGateway):
        self.gateway = gateway

    async def seat(self, table_id: int, reservation_id: int) -> Table:
        """Seat a booked reservation at a free table large enough for the party."""
        table = await self._run(
            "seat",
            lambda gw: self._seat(gw, table_id, reservation_id),
            table_id=table_id,
            reservation_id=reservation_id,
        )
        logger.info("table_seated", table_id=table_id, reservation_id=reservation_id)
        return table

    async def finish(self, table_id: int) -> Table:
        """Free an occupied table and mark its reservation finished."""
        table = await self._run("finish", lambda gw: self._finish(gw, table_id), table_id=table_id)
        logger.info("table_finished", table_id=table_id)
        return table

    async def remove_table(self, table_id: int) -> None:
        """Delete a table that is not currently occupied."""
        await self._run("remove", lambda gw: self._remove(gw, table_id), table_id=table_id)
        logger.info("table_removed", table_id=table_id)

    async def _run(
        self,
        transition: str,
        work: Callable[[StorageGateway], Awaitable[T]],
        **context,
    ) -> T:
        with occupancy_latency.labels(transition=transition).time():
            try:
                result = await self.gateway.run_atomic(work)
            except ReservationError as e:
                record_transition(transition, e.kind)
                logger.warning(
                    f"{transition}_rejected",
                    kind=e.kind,
                    reason=e.message,
                    **context,
                )
                raise
        record_transition(transition, "success")
        return result

    @staticmethod
    async def _load_table(gw: StorageGateway, table_id: int) -> Table:
        table = await gw.get_table(table_id)
        if table is None:
            raise NotFoundError(f"Table {table_id} not found")
        return table

    async def _seat(self, gw: StorageGateway, table_id: int, reservation_id: int) -> Table:
        table = await self._load_table(gw, table_id)

        reservation = await gw.get_reservation(reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation {reservation_id} not found")

        if reservation.status != BOOKED:
            raise ConflictError(f"Reservation {reservation_id} is already {reservation.status}")

        if table.is_occupied:
            raise ConflictError(f"Table {table.table_name} is occupied")

        if table.capacity < reservation.people:
            raise ConflictError(
                f"Table {table.table_name} has capacity {table.capacity}, "
                f"reservation {reservation_id} is for {reservation.people} people"
            )

        # Reservation row first: a second seat of the same party waits here
        # and then matches zero rows instead of tripping uq_table_reservation.
        seated = await gw.update_reservation_status(reservation_id, SEATED, expected=BOOKED)
        if seated is None:
            raise ConflictError(f"Reservation {reservation_id} is no longer booked")

        try:
            occupied = await gw.occupy_table(table_id, reservation_id)
        except IntegrityError:
            raise ConflictError(f"Reservation {reservation_id} is already at another table") from None
        if not occupied:
            raise ConflictError(f"Table {table.table_name} is occupied")

        return await gw.refresh_table(table_id)

    async def _finish(self, gw: StorageGateway, table_id: int) -> Table:
        table = await self._load_table(gw, table_id)

        if not table.is_occupied or table.reservation_id is None:
            raise ConflictError(f"Table {table.table_name} is not occupied")

        reservation_id = table.reservation_id
        if not await gw.release_table(table_id, reservation_id):
            raise ConflictError(f"Table {table.table_name} is not occupied")

        finished = await gw.update_reservation_status(reservation_id, FINISHED, expected=SEATED)
        if finished is None:
            raise ConflictError(f"Reservation {reservation_id} is not seated")

        return await gw.refresh_table(table_id)

    async def _remove(self, gw: StorageGateway, table_id: int) -> None:
        table = await self._load_table(gw, table_id)

        if table.is_occupied:
            raise ConflictError(f"Table {table.table_name} is occupied and cannot be removed")

        if not await gw.remove_table(table_id):
            if await gw.refresh_table(table_id) is None:
                raise NotFoundError(f"Table {table_id} not found")
            raise ConflictError(f"Table {table.table_name} is occupied and cannot be removed")
