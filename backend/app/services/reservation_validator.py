"""
Reservation admission rules.

Pure functions: nothing here touches the database or the clock. The caller
passes the current moment and the operating calendar in, which keeps the
rules testable against fixed instants.

Checks run in a fixed order and the first failure wins:

    required fields -> date/time parse -> people -> future-only
    -> closed day -> operating window
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Callable, Mapping, Optional

from app.core.config import Settings
from app.core.errors import ReservationValidationError

REQUIRED_FIELDS = (
    "first_name",
    "last_name",
    "mobile_number",
    "reservation_date",
    "reservation_time",
    "people",
)

TIME_FORMATS = ("%H:%M", "%H:%M:%S")

WEEKDAY_NAMES = ("Mondays", "Tuesdays", "Wednesdays", "Thursdays", "Fridays", "Saturdays", "Sundays")


@dataclass(frozen=True)
class OperatingHours:
    """Bookable window: strictly after `opening_time`, strictly before `last_seating`."""

    opening_time: time = time(10, 30)
    last_seating: time = time(21, 30)
    closed_weekday: Optional[int] = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> "OperatingHours":
        return cls(
            opening_time=parse_time(settings.OPENING_TIME),
            last_seating=parse_time(settings.LAST_SEATING_TIME),
            closed_weekday=settings.CLOSED_WEEKDAY,
        )


@dataclass(frozen=True)
class ReservationDraft:
    first_name: str
    last_name: str
    mobile_number: str
    reservation_date: date
    reservation_time: time
    people: int
    guest_id: Optional[int] = None

    def as_fields(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "mobile_number": self.mobile_number,
            "reservation_date": self.reservation_date,
            "reservation_time": self.reservation_time,
            "people": self.people,
            "guest_id": self.guest_id,
        }


def parse_date(value: str) -> date:
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_time(value: str) -> time:
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"not a time of day: {value!r}")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_required(payload: Mapping[str, Any]) -> None:
    for field in REQUIRED_FIELDS:
        if _is_blank(payload.get(field)):
            raise ReservationValidationError(field)
    for field in ("first_name", "last_name", "mobile_number"):
        if not isinstance(payload[field], str):
            raise ReservationValidationError(field, f"{field} must be a string")


def _parse_date_field(value: Any) -> date:
    try:
        return parse_date(value)
    except (TypeError, ValueError):
        raise ReservationValidationError(
            "reservation_date", "reservation_date must be a date formatted YYYY-MM-DD"
        ) from None


def _parse_time_field(value: Any) -> time:
    try:
        return parse_time(value)
    except (TypeError, ValueError):
        raise ReservationValidationError(
            "reservation_time", "reservation_time must be a time formatted HH:MM"
        ) from None


def _check_people(value: Any) -> int:
    # bool is an int subclass; numeric strings are a type error, not a party size
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ReservationValidationError("people", "people must be a positive integer")
    return value


def _check_guest_id(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ReservationValidationError("guest_id", "guest_id must be an integer")
    return value


def check_schedule(
    reservation_date: date,
    reservation_time: time,
    now: datetime,
    hours: OperatingHours,
) -> None:
    """Business-hour rules, in priority order."""
    if datetime.combine(reservation_date, reservation_time) <= now:
        raise ReservationValidationError(
            "reservation_date", "reservation_date and reservation_time must be in the future"
        )

    if hours.closed_weekday is not None and reservation_date.weekday() == hours.closed_weekday:
        raise ReservationValidationError(
            "reservation_date",
            f"Restaurant is closed on {WEEKDAY_NAMES[hours.closed_weekday]}",
        )

    if not hours.opening_time < reservation_time < hours.last_seating:
        raise ReservationValidationError(
            "reservation_time",
            "reservation_time must be after {} and before {}".format(
                hours.opening_time.strftime("%H:%M"), hours.last_seating.strftime("%H:%M")
            ),
        )


def validate_reservation(
    payload: Mapping[str, Any],
    now: datetime,
    hours: OperatingHours,
) -> ReservationDraft:
    """Accept a raw reservation payload or raise ReservationValidationError."""
    _check_required(payload)
    reservation_date = _parse_date_field(payload["reservation_date"])
    reservation_time = _parse_time_field(payload["reservation_time"])
    people = _check_people(payload["people"])
    check_schedule(reservation_date, reservation_time, now, hours)
    guest_id = _check_guest_id(payload.get("guest_id"))

    return ReservationDraft(
        first_name=payload["first_name"],
        last_name=payload["last_name"],
        mobile_number=payload["mobile_number"],
        reservation_date=reservation_date,
        reservation_time=reservation_time,
        people=people,
        guest_id=guest_id,
    )


class ReservationValidator:
    """Binds the operating calendar and a clock to `validate_reservation`."""

    def __init__(self, hours: OperatingHours, clock: Callable[[], datetime] = datetime.now):
        self.hours = hours
        self.clock = clock

    def validate(self, payload: Mapping[str, Any]) -> ReservationDraft:
        return validate_reservation(payload, self.clock(), self.hours)
