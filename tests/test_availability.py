from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import InternalError, NotFoundError, ValidationError
from app.models.appointment import AppointmentStatus
from app.services import availability
from app.services.availability import get_available_slots

UTC = timezone.utc

DAY = "2025-12-10"


@pytest.fixture
def client_user(make_user):
    return make_user()


def test_free_morning_lists_every_slot(session, make_barber, make_service):
    barber = make_barber("09:00-11:00")
    service = make_service(duration=30)

    assert get_available_slots(session, DAY, service.id, barber.id) == [
        "9:00 AM", "9:30 AM", "10:00 AM", "10:30 AM",
    ]


def test_confirmed_appointment_blocks_its_slot(session, client_user, make_barber, make_service, make_appointment):
    barber = make_barber("09:00-11:00")
    service = make_service(duration=30)
    make_appointment(client_user, barber, service, datetime(2025, 12, 10, 9, 30, tzinfo=UTC))

    assert get_available_slots(session, DAY, service.id, barber.id) == ["9:00 AM", "10:00 AM", "10:30 AM"]


def test_malformed_working_hours_fall_back_to_default(session, make_barber, make_service, caplog):
    barber = make_barber("whenever")
    service = make_service(duration=60)

    slots = get_available_slots(session, DAY, service.id, barber.id)

    assert slots[0] == "9:00 AM"
    assert slots[-1] == "4:00 PM"
    assert len(slots) == 15
    assert "Invalid working_hours" in caplog.text


def test_missing_working_hours_fall_back_to_default(session, make_barber, make_service):
    barber = make_barber(None)
    service = make_service(duration=30)

    slots = get_available_slots(session, DAY, service.id, barber.id)

    assert slots[0] == "9:00 AM"
    assert slots[-1] == "4:30 PM"


def test_touching_endpoints_are_not_conflicts(session, client_user, make_barber, make_service, make_appointment):
    barber = make_barber("09:00-12:00")
    hour_long = make_service(name="Full", duration=60)
    short = make_service(name="Quick", duration=30)
    make_appointment(client_user, barber, short, datetime(2025, 12, 10, 10, 0, tzinfo=UTC))

    # 9:00-10:00 termina quando a ocupação começa; 10:30 começa quando termina
    assert get_available_slots(session, DAY, hour_long.id, barber.id) == ["9:00 AM", "10:30 AM", "11:00 AM"]


def test_existing_appointment_uses_its_own_duration(session, client_user, make_barber, make_service, make_appointment):
    barber = make_barber("09:00-11:00")
    long_service = make_service(name="Full", duration=90)
    short = make_service(name="Quick", duration=30)
    make_appointment(client_user, barber, long_service, datetime(2025, 12, 10, 9, 0, tzinfo=UTC))

    assert get_available_slots(session, DAY, short.id, barber.id) == ["10:30 AM"]


@pytest.mark.parametrize("status", [AppointmentStatus.CANCELED, AppointmentStatus.NO_SHOW])
def test_inactive_appointments_never_block(status, session, client_user, make_barber, make_service, make_appointment):
    barber = make_barber("09:00-11:00")
    service = make_service(duration=30)
    make_appointment(client_user, barber, service, datetime(2025, 12, 10, 9, 30, tzinfo=UTC), status=status)

    assert "9:30 AM" in get_available_slots(session, DAY, service.id, barber.id)


@pytest.mark.parametrize("status", [AppointmentStatus.PENDING, AppointmentStatus.COMPLETED])
def test_other_statuses_block(status, session, client_user, make_barber, make_service, make_appointment):
    barber = make_barber("09:00-11:00")
    service = make_service(duration=30)
    make_appointment(client_user, barber, service, datetime(2025, 12, 10, 9, 30, tzinfo=UTC), status=status)

    assert "9:30 AM" not in get_available_slots(session, DAY, service.id, barber.id)


def test_other_days_and_barbers_do_not_block(session, client_user, make_barber, make_service, make_appointment):
    barber = make_barber("09:00-11:00")
    other_barber = make_barber("09:00-11:00", first_name="Piotr")
    service = make_service(duration=30)
    make_appointment(client_user, barber, service, datetime(2025, 12, 11, 9, 30, tzinfo=UTC))
    make_appointment(client_user, other_barber, service, datetime(2025, 12, 10, 9, 30, tzinfo=UTC))

    assert len(get_available_slots(session, DAY, service.id, barber.id)) == 4


def test_fully_booked_day_is_empty_not_an_error(session, client_user, make_barber, make_service, make_appointment):
    barber = make_barber("09:00-10:00")
    service = make_service(duration=60)
    make_appointment(client_user, barber, service, datetime(2025, 12, 10, 9, 0, tzinfo=UTC))

    assert get_available_slots(session, DAY, service.id, barber.id) == []


@pytest.mark.parametrize(
    "day,service_id,barber_id",
    [(None, 1, 1), (DAY, None, 1), (DAY, 1, None), ("", 1, 1)],
)
def test_missing_inputs(session, day, service_id, barber_id):
    with pytest.raises(ValidationError, match="required"):
        get_available_slots(session, day, service_id, barber_id)


@pytest.mark.parametrize("day", ["10-12-2025", "2025/12/10", "2025-02-30"])
def test_malformed_date(session, day):
    with pytest.raises(ValidationError, match="YYYY-MM-DD"):
        get_available_slots(session, day, 1, 1)


def test_unknown_service(session, make_barber):
    barber = make_barber()

    with pytest.raises(NotFoundError):
        get_available_slots(session, DAY, 999, barber.id)


def test_inactive_service(session, make_barber, make_service):
    barber = make_barber()
    service = make_service(is_active=False)

    with pytest.raises(NotFoundError):
        get_available_slots(session, DAY, service.id, barber.id)


def test_persistence_failure_is_internal_error(session, make_barber, make_service, monkeypatch):
    barber = make_barber()
    service = make_service()

    def broken(*args, **kwargs):
        raise OperationalError("SELECT ...", {}, Exception("database is locked"))

    monkeypatch.setattr(availability, "occupied_intervals", broken)

    with pytest.raises(InternalError) as excinfo:
        get_available_slots(session, DAY, service.id, barber.id)

    assert "locked" not in excinfo.value.message
