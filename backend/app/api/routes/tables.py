"""
Table endpoints: CRUD plus the seat/finish transitions.
"""

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_coordinator, get_gateway
from app.core.logging import get_logger
from app.db.gateway import StorageGateway
from app.schemas.table import SeatRequest, TableCreate, TableResponse, TableUpdate
from app.services.cache_service import get_cached_tables, invalidate_table_cache, set_cached_tables
from app.services.occupancy_service import OccupancyCoordinator
from app.services.table_service import create_table, get_table, list_tables, update_table

logger = get_logger(__name__)
router = APIRouter(prefix="/tables", tags=["Tables"])


@router.post("/", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
async def create_table_endpoint(
    table_data: TableCreate,
    gateway: StorageGateway = Depends(get_gateway),
):
    table = await create_table(gateway, table_data)
    await invalidate_table_cache()
    return table


@router.get("/", response_model=list[TableResponse])
async def list_tables_endpoint(gateway: StorageGateway = Depends(get_gateway)):
    """List tables by name. Served from Redis when the listing is cached."""
    cached = await get_cached_tables()
    if cached is not None:
        logger.debug("tables_list_cache_hit")
        return cached

    tables = [TableResponse.model_validate(t).model_dump(mode="json") for t in await list_tables(gateway)]
    await set_cached_tables(tables)
    return tables


@router.get("/{table_id}", response_model=TableResponse)
async def get_table_endpoint(table_id: int, gateway: StorageGateway = Depends(get_gateway)):
    return await get_table(gateway, table_id)


@router.put("/{table_id}", response_model=TableResponse)
async def update_table_endpoint(
    table_id: int,
    table_data: TableUpdate,
    gateway: StorageGateway = Depends(get_gateway),
):
    table = await update_table(gateway, table_id, table_data)
    await invalidate_table_cache()
    return table


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_table_endpoint(
    table_id: int,
    coordinator: OccupancyCoordinator = Depends(get_coordinator),
):
    """Remove a table. Occupied tables cannot be removed."""
    await coordinator.remove_table(table_id)
    await invalidate_table_cache()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{table_id}/seat", response_model=TableResponse)
async def seat_table_endpoint(
    table_id: int,
    seat_data: SeatRequest,
    coordinator: OccupancyCoordinator = Depends(get_coordinator),
):
    """
    Seat a booked reservation at this table.

    The reservation becomes `seated` and the table `occupied` in one
    transaction. 409 if the table is occupied, too small, or the reservation
    is not booked.
    """
    table = await coordinator.seat(table_id, seat_data.reservation_id)
    await invalidate_table_cache()
    return table


@router.delete("/{table_id}/seat", response_model=TableResponse)
async def finish_table_endpoint(
    table_id: int,
    coordinator: OccupancyCoordinator = Depends(get_coordinator),
):
    """Finish the seated reservation and free the table."""
    table = await coordinator.finish(table_id)
    await invalidate_table_cache()
    return table
