"""
Table service handling plain CRUD. Occupancy lives in occupancy_service.
"""

from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.db.gateway import StorageGateway
from app.models.table import Table
from app.schemas.table import TableCreate, TableUpdate

logger = get_logger(__name__)


async def create_table(gateway: StorageGateway, table_data: TableCreate) -> Table:
    """Create a new, free table."""
    table = await gateway.run_atomic(lambda gw: gw.create_table(table_data.model_dump()))
    logger.info("table_created", table_id=table.table_id, name=table.table_name, capacity=table.capacity)
    return table


async def get_table(gateway: StorageGateway, table_id: int) -> Table:
    table = await gateway.get_table(table_id)
    if not table:
        raise NotFoundError(f"Table {table_id} not found")
    return table


async def list_tables(gateway: StorageGateway) -> list[Table]:
    return await gateway.list_tables()


async def update_table(gateway: StorageGateway, table_id: int, table_data: TableUpdate) -> Table:
    """Rename or resize a table. Occupancy fields are not editable here."""
    fields = table_data.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        return await get_table(gateway, table_id)

    async def work(gw: StorageGateway) -> Table:
        table = await gw.update_table_fields(table_id, fields)
        if table is None:
            raise NotFoundError(f"Table {table_id} not found")
        return table

    table = await gateway.run_atomic(work)
    logger.info("table_updated", table_id=table_id, fields=sorted(fields))
    return table
