"""
Guest profile CRUD.
"""

from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.db.gateway import StorageGateway
from app.models.guest import Guest
from app.schemas.guest import GuestCreate, GuestUpdate

logger = get_logger(__name__)


async def create_guest(gateway: StorageGateway, guest_data: GuestCreate) -> Guest:
    guest = await gateway.run_atomic(lambda gw: gw.create_guest(guest_data.model_dump()))
    logger.info("guest_created", guest_id=guest.guest_id)
    return guest


async def get_guest(gateway: StorageGateway, guest_id: int) -> Guest:
    guest = await gateway.get_guest(guest_id)
    if not guest:
        raise NotFoundError(f"Guest {guest_id} not found")
    return guest


async def list_guests(gateway: StorageGateway) -> list[Guest]:
    return await gateway.list_guests()


async def update_guest(gateway: StorageGateway, guest_id: int, guest_data: GuestUpdate) -> Guest:
    fields = guest_data.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        return await get_guest(gateway, guest_id)

    async def work(gw: StorageGateway) -> Guest:
        guest = await gw.update_guest(guest_id, fields)
        if guest is None:
            raise NotFoundError(f"Guest {guest_id} not found")
        return guest

    guest = await gateway.run_atomic(work)
    logger.info("guest_updated", guest_id=guest_id)
    return guest
