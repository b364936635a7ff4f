"""
Unit tests for the admission rules, run against a fixed clock.
"""

from datetime import date, datetime, time

import pytest

from app.core.config import Settings
from app.core.errors import ReservationValidationError
from app.services.reservation_validator import (
    OperatingHours,
    ReservationValidator,
    validate_reservation,
)

# Monday noon
NOW = datetime(2026, 10, 19, 12, 0)
HOURS = OperatingHours()

WEDNESDAY = "2026-10-21"
TUESDAY = "2026-10-20"


def payload(**overrides) -> dict:
    data = {
        "first_name": "first",
        "last_name": "last",
        "mobile_number": "800-555-1212",
        "reservation_date": WEDNESDAY,
        "reservation_time": "17:30",
        "people": 2,
    }
    data.update(overrides)
    return data


def rejection(data: dict) -> ReservationValidationError:
    with pytest.raises(ReservationValidationError) as exc_info:
        validate_reservation(data, NOW, HOURS)
    return exc_info.value


def test_valid_payload_is_parsed():
    draft = validate_reservation(payload(), NOW, HOURS)
    assert draft.first_name == "first"
    assert draft.reservation_date == date(2026, 10, 21)
    assert draft.reservation_time == time(17, 30)
    assert draft.people == 2
    assert draft.guest_id is None


def test_seconds_are_accepted_in_time():
    draft = validate_reservation(payload(reservation_time="17:30:15"), NOW, HOURS)
    assert draft.reservation_time == time(17, 30, 15)


@pytest.mark.parametrize(
    "field",
    ["first_name", "last_name", "mobile_number", "reservation_date", "reservation_time", "people"],
)
def test_missing_field_is_named(field):
    data = payload()
    del data[field]
    error = rejection(data)
    assert error.field == field
    assert field in error.message


@pytest.mark.parametrize("field", ["first_name", "last_name", "mobile_number", "reservation_date"])
def test_empty_field_is_named(field):
    error = rejection(payload(**{field: ""}))
    assert error.field == field


def test_blank_whitespace_counts_as_missing():
    assert rejection(payload(first_name="   ")).field == "first_name"


def test_required_fields_reported_in_fixed_order():
    error = rejection({"mobile_number": "", "people": 0})
    assert error.field == "first_name"


def test_unparseable_date():
    error = rejection(payload(reservation_date="not-a-date"))
    assert error.field == "reservation_date"
    assert "reservation_date" in error.message


def test_unparseable_time():
    error = rejection(payload(reservation_time="not-a-time"))
    assert error.field == "reservation_time"


def test_date_parse_checked_before_people():
    assert rejection(payload(reservation_date="nope", people=0)).field == "reservation_date"


@pytest.mark.parametrize("people", [0, -3, "2", 2.5, True])
def test_people_must_be_positive_integer(people):
    error = rejection(payload(people=people))
    assert error.field == "people"
    assert "people" in error.message


def test_past_reservation_rejected():
    error = rejection(payload(reservation_date="1999-01-01"))
    assert "future" in error.message


def test_same_day_earlier_time_is_past():
    # Monday 11:00 when it is already Monday noon
    assert "future" in rejection(payload(reservation_date="2026-10-19", reservation_time="11:00")).message


def test_exactly_now_is_not_future():
    now = datetime(2026, 10, 21, 17, 30)
    with pytest.raises(ReservationValidationError, match="future"):
        validate_reservation(payload(), now, HOURS)


def test_past_checked_before_people_is_not():
    # people validity comes before the temporal rules
    assert rejection(payload(reservation_date="1999-01-01", people=0)).field == "people"


def test_closed_on_tuesday():
    error = rejection(payload(reservation_date=TUESDAY))
    assert "closed" in error.message


@pytest.mark.parametrize("reservation_time", ["10:30", "11:00", "17:30", "21:29"])
def test_closed_day_regardless_of_time(reservation_time):
    error = rejection(payload(reservation_date=TUESDAY, reservation_time=reservation_time))
    assert "closed" in error.message


def test_future_checked_before_closed_day():
    # 1996-01-02 was a Tuesday
    assert "future" in rejection(payload(reservation_date="1996-01-02")).message


@pytest.mark.parametrize("reservation_time", ["05:30", "09:30", "10:30", "21:30", "22:45", "23:30"])
def test_outside_operating_window(reservation_time):
    error = rejection(payload(reservation_time=reservation_time))
    assert error.field == "reservation_time"
    assert "10:30" in error.message and "21:30" in error.message


@pytest.mark.parametrize("reservation_time", ["10:31", "13:30", "21:29"])
def test_inside_operating_window(reservation_time):
    validate_reservation(payload(reservation_time=reservation_time), NOW, HOURS)


def test_window_is_configurable():
    late_hours = OperatingHours(opening_time=time(16, 0), last_seating=time(23, 0), closed_weekday=None)
    validate_reservation(payload(reservation_date=TUESDAY, reservation_time="22:45"), NOW, late_hours)
    with pytest.raises(ReservationValidationError):
        validate_reservation(payload(reservation_time="13:30"), NOW, late_hours)


def test_hours_from_settings():
    settings = Settings(OPENING_TIME="11:00", LAST_SEATING_TIME="22:00", CLOSED_WEEKDAY=0)
    hours = OperatingHours.from_settings(settings)
    assert hours == OperatingHours(time(11, 0), time(22, 0), 0)


def test_guest_id_must_be_integer():
    assert rejection(payload(guest_id="7")).field == "guest_id"
    assert validate_reservation(payload(guest_id=7), NOW, HOURS).guest_id == 7


def test_validator_uses_its_clock():
    validator = ReservationValidator(HOURS, clock=lambda: datetime(2051, 1, 1))
    with pytest.raises(ReservationValidationError, match="future"):
        validator.validate(payload(reservation_date="2050-01-05"))
