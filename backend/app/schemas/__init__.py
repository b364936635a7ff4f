from app.schemas.reservation import ReservationResponse
from app.schemas.table import TableCreate, TableUpdate, SeatRequest, TableResponse
from app.schemas.guest import GuestCreate, GuestUpdate, GuestResponse

__all__ = [
    "ReservationResponse",
    "TableCreate", "TableUpdate", "SeatRequest", "TableResponse",
    "GuestCreate", "GuestUpdate", "GuestResponse",
]
