"""
FastAPI dependencies wiring sessions, the gateway and the services.

The validator and coordinator are built per request from explicit inputs
(settings, session) so tests can override any layer independently.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.gateway import StorageGateway
from app.db.session import get_db
from app.services.occupancy_service import OccupancyCoordinator
from app.services.reservation_validator import OperatingHours, ReservationValidator


def get_gateway(db: AsyncSession = Depends(get_db)) -> StorageGateway:
    return StorageGateway(db)


def get_validator() -> ReservationValidator:
    return ReservationValidator(OperatingHours.from_settings(get_settings()))


def get_coordinator(gateway: StorageGateway = Depends(get_gateway)) -> OccupancyCoordinator:
    return OccupancyCoordinator(gateway)
