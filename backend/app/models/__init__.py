from app.models.guest import Guest
from app.models.reservation import Reservation
from app.models.table import Table

__all__ = ["Guest", "Reservation", "Table"]
