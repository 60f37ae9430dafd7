"""Criação de agendamento + notificações, numa única transação."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app import config
from app.core.errors import BookingError, ConflictError, InternalError, ValidationError
from app.core.scheduling import format_appointment_time, parse_display_time
from app.models.appointment import Appointment, AppointmentStatus
from app.models.barber import Barber
from app.models.booking import BookingCreate, BookingSummary
from app.models.notification import AdminNotification, BarberNotification, UserNotification
from app.models.service import Service
from app.models.user import User, UserRole
from app.services.availability import has_conflict, occupied_intervals

logger = logging.getLogger(__name__)

CLIENT_APPOINTMENTS_LINK = "/user-dashboard/appointments"
BARBER_SCHEDULE_LINK = "/barber-dashboard/schedule"
ADMIN_APPOINTMENT_LINK = "/admin-dashboard/appointments?appointmentId={appointment_id}"

# códigos SQLSTATE (PostgreSQL)
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"


@dataclass
class BookingContext:
    """Dados desnormalizados do agendamento recém-criado, para os textos."""

    appointment: Appointment
    service_name: str
    client_name: str
    barber_id: int
    barber_name: str
    barber_user_id: Optional[int]

    @property
    def when(self) -> str:
        return format_appointment_time(self.appointment.appointment_time)


def resolve_appointment_time(day: str, time_slot: str) -> datetime:
    """Combina a data (ignora qualquer "T..." já presente) com o slot "h:mm AM"."""
    date_part = day.split("T")[0]
    try:
        slot_time = parse_display_time(time_slot)
        target_day = date.fromisoformat(date_part)
    except ValueError:
        raise ValidationError("Invalid date or time format provided.")
    return datetime.combine(target_day, slot_time, tzinfo=timezone.utc)


def _ensure_slot_free(session: Session, barber_id: int, service: Optional[Service], start: datetime) -> None:
    # serviço inexistente: a FK rejeita no INSERT
    if service is None:
        return
    end = start + timedelta(minutes=service.duration)
    if has_conflict(occupied_intervals(session, barber_id, start.date()), start, end):
        raise ConflictError("Selected time slot is no longer available.")


def _load_context(session: Session, appointment: Appointment) -> BookingContext:
    service = session.get(Service, appointment.service_id)
    client = session.get(User, appointment.client_id)
    barber = session.get(Barber, appointment.barber_id)
    if service is None or barber is None or client is None:
        raise ConflictError("Invalid service or barber selected, or other relational issue.")

    barber_user = session.get(User, barber.user_id)

    return BookingContext(
        appointment=appointment,
        service_name=service.name,
        client_name=client.display_name,
        barber_id=barber.id,
        barber_name=barber_user.display_name if barber_user else "",
        barber_user_id=barber.user_id,
    )


# =========================
# NOTIFICAÇÕES
# =========================

def notify_client(session: Session, ctx: BookingContext) -> UserNotification:
    notification = UserNotification(
        user_id=ctx.appointment.client_id,
        type="booking_pending",
        title="Booking Pending Confirmation",
        message=(
            f"Your booking for {ctx.service_name} with {ctx.barber_name} on {ctx.when} is pending. "
            "We will notify you upon confirmation."
        ),
        link=CLIENT_APPOINTMENTS_LINK,
    )
    session.add(notification)
    return notification


def notify_barber(session: Session, ctx: BookingContext) -> BarberNotification:
    notification = BarberNotification(
        barber_id=ctx.barber_id,
        recipient_user_id=ctx.barber_user_id,
        type="new_booking_barber",
        title="New Booking Received",
        message=(
            f"New booking from {ctx.client_name} for {ctx.service_name} on {ctx.when} "
            f"(Appt ID: {ctx.appointment.id})."
        ),
        link=BARBER_SCHEDULE_LINK,
    )
    session.add(notification)
    return notification


def notify_admins(session: Session, ctx: BookingContext) -> list:
    admin_ids = session.exec(select(User.id).where(User.role == UserRole.ADMIN)).all()

    message = (
        f"A new appointment (ID: {ctx.appointment.id}) has been booked by {ctx.client_name} "
        f"with {ctx.barber_name} for {ctx.service_name} on {ctx.when}."
    )
    link = ADMIN_APPOINTMENT_LINK.format(appointment_id=ctx.appointment.id)

    notifications = [
        AdminNotification(
            admin_user_id=admin_id,
            type="new_appointment_booked",
            title="New Appointment Booked",
            message=message,
            link=link,
            related_appointment_id=ctx.appointment.id,
            related_client_id=ctx.appointment.client_id,
            related_barber_id=ctx.barber_id,
        )
        for admin_id in admin_ids
    ]
    session.add_all(notifications)
    return notifications


def _map_integrity_error(exc: IntegrityError) -> BookingError:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    text = str(orig).lower()

    if code == FOREIGN_KEY_VIOLATION or "foreign key" in text:
        return ConflictError("Invalid service or barber selected, or other relational issue.")
    if code == UNIQUE_VIOLATION or "unique" in text:
        return ConflictError("Duplicate key error: this booking already exists.")

    return InternalError("Server error creating booking.")


# =========================
# CRIAR AGENDAMENTO
# =========================

def create_booking(
    session_factory: Callable[[], Session],
    client: User,
    request: BookingCreate,
) -> BookingSummary:
    """Cria o agendamento ``pending`` e as notificações, tudo ou nada.

    Usa uma sessão própria (não a da requisição). Qualquer falha depois de
    aberta a transação faz rollback antes de propagar, e a sessão é sempre
    fechada.
    """
    if not (request.service_id and request.barber_id and request.date and request.time_slot):
        raise ValidationError("Service, barber, date, and time slot are required.")

    session = session_factory()
    try:
        session.begin()

        appointment_time = resolve_appointment_time(request.date, request.time_slot)

        service = session.get(Service, request.service_id)
        _ensure_slot_free(session, request.barber_id, service, appointment_time)

        appointment = Appointment(
            client_id=client.id,
            barber_id=request.barber_id,
            service_id=request.service_id,
            appointment_time=appointment_time,
            status=AppointmentStatus.PENDING,
            notes=request.notes or None,
        )
        session.add(appointment)
        session.flush()

        ctx = _load_context(session, appointment)

        notify_client(session, ctx)
        if request.barber_id:
            notify_barber(session, ctx)
        if config.NOTIFY_ADMINS_ON_BOOKING:
            notify_admins(session, ctx)

        session.flush()

        summary = BookingSummary(
            id=appointment.id,
            appointment_time=appointment.appointment_time,
            service_name=ctx.service_name,
            client_name=ctx.client_name,
            barber_name=ctx.barber_name,
            status=AppointmentStatus.PENDING,
        )

        session.commit()
    except BookingError:
        session.rollback()
        raise
    except IntegrityError as exc:
        session.rollback()
        logger.warning("Booking rejected by constraint for client %s: %s", client.id, exc.orig)
        raise _map_integrity_error(exc)
    except Exception:
        session.rollback()
        logger.exception("Error in create_booking for client %s", client.id)
        raise InternalError("Server error creating booking.")
    finally:
        session.close()

    logger.info(
        "Booking %s created: client=%s barber=%s at %s",
        summary.id, client.id, request.barber_id, summary.appointment_time.isoformat(),
    )
    return summary
