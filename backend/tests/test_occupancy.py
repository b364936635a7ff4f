"""
Tests for the occupancy coordinator, including concurrency scenarios.

Each concurrent caller gets its own session, as two HTTP requests would.
Rows are re-read through a fresh session; a rollback expires every object
in the session that ran the failed unit of work, so tests hold on to ids.
"""

import asyncio

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.errors import ConflictError, NotFoundError, StorageError
from app.db.gateway import StorageGateway
from app.models.reservation import Reservation
from app.models.table import Table
from app.services.occupancy_service import OccupancyCoordinator


async def load(session_factory, model, pk):
    async with session_factory() as session:
        return await session.get(model, pk)


async def failing_write(*args, **kwargs):
    raise OperationalError("UPDATE", {}, RuntimeError("disk I/O error"))


@pytest.mark.asyncio
async def test_seat_links_both_rows(gateway, make_reservation, make_table, session_factory):
    reservation_id = (await make_reservation(people=2)).reservation_id
    table_id = (await make_table(capacity=2)).table_id

    seated = await OccupancyCoordinator(gateway).seat(table_id, reservation_id)

    assert seated.table_status == "occupied"
    assert seated.reservation_id == reservation_id
    stored = await load(session_factory, Reservation, reservation_id)
    assert stored.status == "seated"


@pytest.mark.asyncio
async def test_seat_then_finish_restores_table(gateway, make_reservation, make_table, session_factory):
    reservation_id = (await make_reservation()).reservation_id
    table = await make_table(table_name="Window", capacity=2)
    table_id = table.table_id
    coordinator = OccupancyCoordinator(gateway)

    await coordinator.seat(table_id, reservation_id)
    finished = await coordinator.finish(table_id)

    assert finished.table_status == "free"
    assert finished.reservation_id is None
    assert (finished.table_name, finished.capacity) == ("Window", 2)
    stored = await load(session_factory, Reservation, reservation_id)
    assert stored.status == "finished"


@pytest.mark.asyncio
async def test_capacity_conflict_mutates_nothing(gateway, make_reservation, make_table, session_factory):
    reservation_id = (await make_reservation(people=5)).reservation_id
    table_id = (await make_table(capacity=4)).table_id

    with pytest.raises(ConflictError, match="capacity"):
        await OccupancyCoordinator(gateway).seat(table_id, reservation_id)

    stored_table = await load(session_factory, Table, table_id)
    stored_reservation = await load(session_factory, Reservation, reservation_id)
    assert stored_table.table_status == "free"
    assert stored_table.reservation_id is None
    assert stored_reservation.status == "booked"


@pytest.mark.asyncio
async def test_seat_unknown_rows(gateway, make_reservation, make_table):
    reservation_id = (await make_reservation()).reservation_id
    table_id = (await make_table()).table_id
    coordinator = OccupancyCoordinator(gateway)

    with pytest.raises(NotFoundError):
        await coordinator.seat(9999, reservation_id)
    with pytest.raises(NotFoundError):
        await coordinator.seat(table_id, 9999)


@pytest.mark.asyncio
async def test_finish_unknown_table(gateway):
    with pytest.raises(NotFoundError):
        await OccupancyCoordinator(gateway).finish(9999)


@pytest.mark.asyncio
async def test_finish_free_table(gateway, make_table):
    table_id = (await make_table()).table_id
    with pytest.raises(ConflictError, match="not occupied"):
        await OccupancyCoordinator(gateway).finish(table_id)


@pytest.mark.asyncio
async def test_storage_failure_rolls_back_seat(
    gateway, make_reservation, make_table, session_factory, monkeypatch
):
    """If the table write fails after the reservation was marked seated, neither row changes."""
    reservation_id = (await make_reservation()).reservation_id
    table_id = (await make_table()).table_id
    monkeypatch.setattr(gateway, "occupy_table", failing_write)

    with pytest.raises(StorageError):
        await OccupancyCoordinator(gateway).seat(table_id, reservation_id)

    stored_table = await load(session_factory, Table, table_id)
    stored_reservation = await load(session_factory, Reservation, reservation_id)
    assert stored_table.table_status == "free"
    assert stored_table.reservation_id is None
    assert stored_reservation.status == "booked"


@pytest.mark.asyncio
async def test_storage_failure_rolls_back_finish(
    gateway, make_reservation, make_table, session_factory, monkeypatch
):
    reservation_id = (await make_reservation()).reservation_id
    table_id = (await make_table()).table_id
    coordinator = OccupancyCoordinator(gateway)
    await coordinator.seat(table_id, reservation_id)
    monkeypatch.setattr(gateway, "update_reservation_status", failing_write)

    with pytest.raises(StorageError):
        await coordinator.finish(table_id)

    stored_table = await load(session_factory, Table, table_id)
    stored_reservation = await load(session_factory, Reservation, reservation_id)
    assert stored_table.table_status == "occupied"
    assert stored_table.reservation_id == reservation_id
    assert stored_reservation.status == "seated"


@pytest.mark.asyncio
async def test_concurrent_seats_on_one_table(make_reservation, make_table, session_factory):
    """Two parties race for the last table: exactly one is seated."""
    first_id = (await make_reservation(first_name="First")).reservation_id
    second_id = (await make_reservation(first_name="Second")).reservation_id
    table_id = (await make_table(capacity=4)).table_id

    async with session_factory() as s1, session_factory() as s2:
        results = await asyncio.gather(
            OccupancyCoordinator(StorageGateway(s1)).seat(table_id, first_id),
            OccupancyCoordinator(StorageGateway(s2)).seat(table_id, second_id),
            return_exceptions=True,
        )

    assert len([r for r in results if isinstance(r, Table)]) == 1
    assert len([r for r in results if isinstance(r, ConflictError)]) == 1

    stored_table = await load(session_factory, Table, table_id)
    assert stored_table.table_status == "occupied"
    assert stored_table.reservation_id in (first_id, second_id)

    winner_id = stored_table.reservation_id
    loser_id = second_id if winner_id == first_id else first_id
    assert (await load(session_factory, Reservation, winner_id)).status == "seated"
    assert (await load(session_factory, Reservation, loser_id)).status == "booked"


@pytest.mark.asyncio
async def test_concurrent_seats_of_one_reservation(make_reservation, make_table, session_factory):
    """One party sent to two tables at once ends up at exactly one of them."""
    reservation_id = (await make_reservation()).reservation_id
    table_a = (await make_table(table_name="A")).table_id
    table_b = (await make_table(table_name="B")).table_id

    async with session_factory() as s1, session_factory() as s2:
        results = await asyncio.gather(
            OccupancyCoordinator(StorageGateway(s1)).seat(table_a, reservation_id),
            OccupancyCoordinator(StorageGateway(s2)).seat(table_b, reservation_id),
            return_exceptions=True,
        )

    assert not [r for r in results if isinstance(r, StorageError)]
    assert len([r for r in results if isinstance(r, Table)]) == 1
    assert len([r for r in results if isinstance(r, ConflictError)]) == 1

    statuses = [
        (await load(session_factory, Table, table_a)).table_status,
        (await load(session_factory, Table, table_b)).table_status,
    ]
    assert sorted(statuses) == ["free", "occupied"]
    assert (await load(session_factory, Reservation, reservation_id)).status == "seated"


@pytest.mark.asyncio
async def test_remove_table(gateway, make_reservation, make_table):
    reservation_id = (await make_reservation()).reservation_id
    busy_id = (await make_table(table_name="busy")).table_id
    idle_id = (await make_table(table_name="idle")).table_id
    coordinator = OccupancyCoordinator(gateway)
    await coordinator.seat(busy_id, reservation_id)

    with pytest.raises(ConflictError, match="occupied"):
        await coordinator.remove_table(busy_id)

    await coordinator.remove_table(idle_id)
    assert await gateway.get_table(idle_id) is None
    assert (await gateway.get_table(busy_id)).table_status == "occupied"


@pytest.mark.asyncio
async def test_duplicate_table_link_is_a_conflict(
    gateway, make_reservation, make_table, session_factory, monkeypatch
):
    """A unique violation on tables.reservation_id surfaces as a conflict, not a storage error."""
    reservation_id = (await make_reservation()).reservation_id
    table_id = (await make_table()).table_id

    async def duplicate_link(*args, **kwargs):
        raise IntegrityError(
            "UPDATE tables", {}, RuntimeError("UNIQUE constraint failed: tables.reservation_id")
        )

    monkeypatch.setattr(gateway, "occupy_table", duplicate_link)

    with pytest.raises(ConflictError, match="another table"):
        await OccupancyCoordinator(gateway).seat(table_id, reservation_id)

    stored_reservation = await load(session_factory, Reservation, reservation_id)
    assert stored_reservation.status == "booked"


@pytest.mark.asyncio
async def test_remove_table_deleted_concurrently(gateway, make_table, monkeypatch):
    """A table deleted between the read and the guarded delete is reported missing."""
    table_id = (await make_table()).table_id

    async def deleted_elsewhere(pk):
        await gateway.session.execute(
            delete(Table).where(Table.table_id == pk).execution_options(synchronize_session=False)
        )
        return False

    monkeypatch.setattr(gateway, "remove_table", deleted_elsewhere)

    with pytest.raises(NotFoundError):
        await OccupancyCoordinator(gateway).remove_table(table_id)


@pytest.mark.asyncio
async def test_status_update_requires_expected_status(gateway, make_reservation):
    reservation_id = (await make_reservation()).reservation_id

    assert await gateway.update_reservation_status(reservation_id, "finished", expected="seated") is None
    assert (await gateway.get_reservation(reservation_id)).status == "booked"

    seated = await gateway.update_reservation_status(reservation_id, "seated", expected="booked")
    assert seated.status == "seated"
