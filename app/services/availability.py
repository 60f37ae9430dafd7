"""Horários livres de um barbeiro num dia, para um serviço."""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from app.config import DEFAULT_WORK_END, DEFAULT_WORK_START, SLOT_STEP_MINUTES
from app.core.errors import InternalError, NotFoundError, ValidationError
from app.core.scheduling import (
    day_bounds,
    format_display_time,
    generate_slots,
    overlaps,
    parse_calendar_date,
    parse_working_hours,
    slot_instant,
)
from app.models.appointment import INACTIVE_STATUSES, Appointment
from app.models.barber import Barber
from app.models.service import Service

logger = logging.getLogger(__name__)

Interval = Tuple[datetime, datetime]


def resolve_working_hours(session: Session, barber_id: int) -> Tuple[str, str]:
    barber = session.get(Barber, barber_id)
    if barber is None or not barber.working_hours:
        logger.warning("Working hours not set for barber %s. Using default.", barber_id)
        return DEFAULT_WORK_START, DEFAULT_WORK_END

    window = parse_working_hours(barber.working_hours)
    if window is None:
        logger.warning(
            "Invalid working_hours %r for barber %s. Using default.", barber.working_hours, barber_id
        )
        return DEFAULT_WORK_START, DEFAULT_WORK_END

    return window


def occupied_intervals(session: Session, barber_id: int, day: date) -> List[Interval]:
    """Intervalos [início, início + duração) dos agendamentos ativos do dia.

    Cancelados e no-show não ocupam a agenda.
    """
    day_start, day_end = day_bounds(day)

    rows = session.exec(
        select(Appointment.appointment_time, Service.duration)
        .join(Service, col(Service.id) == col(Appointment.service_id))
        .where(
            Appointment.barber_id == barber_id,
            Appointment.appointment_time >= day_start,
            Appointment.appointment_time < day_end,
            col(Appointment.status).not_in(list(INACTIVE_STATUSES)),
        )
    ).all()

    return [(start, start + timedelta(minutes=duration)) for start, duration in rows]


def has_conflict(busy: List[Interval], start: datetime, end: datetime) -> bool:
    for b_start, b_end in busy:
        if overlaps(start, end, b_start, b_end):
            return True
    return False


def get_available_slots(
    session: Session,
    day: Optional[str],
    service_id: Optional[int],
    barber_id: Optional[int],
) -> List[str]:
    """Lista ordenada de horários livres, no formato de exibição ("9:00 AM").

    Lista vazia é um resultado válido (dia lotado).
    """
    if not day or not service_id or not barber_id:
        raise ValidationError("Date, serviceId, and barberId are required.")

    try:
        target_day = parse_calendar_date(day)
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD.")

    try:
        service = session.get(Service, service_id)
        if not service or not service.is_active:
            raise NotFoundError("Service not found or is not active.")

        work_start, work_end = resolve_working_hours(session, barber_id)
        candidates = generate_slots(work_start, work_end, SLOT_STEP_MINUTES, service.duration)
        busy = occupied_intervals(session, barber_id, target_day)
    except SQLAlchemyError:
        logger.exception("Error fetching time slots for barber %s on %s", barber_id, day)
        raise InternalError("Server error fetching time slots.")

    duration = timedelta(minutes=service.duration)
    available: List[str] = []

    for hhmm in candidates:
        slot_start = slot_instant(target_day, hhmm)
        if has_conflict(busy, slot_start, slot_start + duration):
            continue
        available.append(format_display_time(slot_start.time()))

    return available
