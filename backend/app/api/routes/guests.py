"""
Guest profile endpoints.
"""

from fastapi import APIRouter, Depends, status

from app.api.deps import get_gateway
from app.db.gateway import StorageGateway
from app.schemas.guest import GuestCreate, GuestResponse, GuestUpdate
from app.services.guest_service import create_guest, get_guest, list_guests, update_guest

router = APIRouter(prefix="/guests", tags=["Guests"])


@router.post("/", response_model=GuestResponse, status_code=status.HTTP_201_CREATED)
async def create_guest_endpoint(guest_data: GuestCreate, gateway: StorageGateway = Depends(get_gateway)):
    return await create_guest(gateway, guest_data)


@router.get("/", response_model=list[GuestResponse])
async def list_guests_endpoint(gateway: StorageGateway = Depends(get_gateway)):
    return await list_guests(gateway)


@router.get("/{guest_id}", response_model=GuestResponse)
async def get_guest_endpoint(guest_id: int, gateway: StorageGateway = Depends(get_gateway)):
    return await get_guest(gateway, guest_id)


@router.put("/{guest_id}", response_model=GuestResponse)
async def update_guest_endpoint(
    guest_id: int,
    guest_data: GuestUpdate,
    gateway: StorageGateway = Depends(get_gateway),
):
    return await update_guest(gateway, guest_id, guest_data)
