import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, col, select

from app.core.errors import NotFoundError, ValidationError
from app.core.scheduling import day_bounds, parse_calendar_date
from app.core.security import get_current_barber_profile, get_current_user
from app.database import get_session
from app.models.appointment import ALLOWED_TRANSITIONS, Appointment, AppointmentStatus
from app.models.barber import Barber
from app.models.booking import StatusUpdate
from app.models.notification import UserNotification
from app.models.user import User, UserRole


router = APIRouter(prefix="/api/appointments", tags=["appointments"])

logger = logging.getLogger(__name__)

# texto da notificação enviada ao cliente em cada mudança de status
STATUS_NOTIFICATIONS = {
    AppointmentStatus.CONFIRMED: ("booking_confirmed", "Booking Confirmed"),
    AppointmentStatus.CANCELED: ("booking_canceled", "Booking Canceled"),
    AppointmentStatus.COMPLETED: ("booking_completed", "Appointment Completed"),
    AppointmentStatus.NO_SHOW: ("booking_no_show", "Appointment Marked as No-Show"),
}


def _get_appointment(session: Session, appointment_id: int) -> Appointment:
    appt = session.get(Appointment, appointment_id)
    if not appt:
        raise NotFoundError("Appointment not found.")
    return appt


# =========================
# LISTAR AGENDAMENTOS
# - cliente: só os próprios
# - barbeiro: só os da agenda dele (opcionalmente de um dia)
# - admin: todos
# =========================
@router.get("/")
def list_appointments(
    date: Optional[str] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    barber: Optional[Barber] = Depends(get_current_barber_profile),
):
    query = select(Appointment).order_by(col(Appointment.appointment_time))

    if current_user.role == UserRole.CLIENT:
        query = query.where(Appointment.client_id == current_user.id)
    elif current_user.role == UserRole.BARBER:
        query = query.where(Appointment.barber_id == barber.id)

    if date:
        try:
            start, end = day_bounds(parse_calendar_date(date))
        except ValueError:
            raise ValidationError("Invalid date format. Use YYYY-MM-DD.")
        query = query.where(
            Appointment.appointment_time >= start,
            Appointment.appointment_time < end,
        )

    return session.exec(query).all()


# =========================
# MUDAR STATUS
# - barbeiro dono da agenda ou admin: qualquer transição válida
# - cliente: só cancelar os próprios
# =========================
@router.patch("/{appointment_id}/status")
def update_appointment_status(
    appointment_id: int,
    payload: StatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    barber: Optional[Barber] = Depends(get_current_barber_profile),
):
    try:
        new_status = AppointmentStatus.parse(payload.status)
    except ValueError:
        raise ValidationError("Invalid or missing status.")

    appt = _get_appointment(session, appointment_id)

    if current_user.role == UserRole.CLIENT:
        if appt.client_id != current_user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")
        if new_status != AppointmentStatus.CANCELED:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Clients can only cancel their appointments",
            )
    elif current_user.role == UserRole.BARBER:
        if appt.barber_id != barber.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")

    if appt.status == new_status:
        return appt

    if new_status not in ALLOWED_TRANSITIONS.get(appt.status, frozenset()):
        raise ValidationError(
            f"Cannot change appointment status from {appt.status.value} to {new_status.value}."
        )

    previous = appt.status
    appt.status = new_status
    session.add(appt)

    notification_type, title = STATUS_NOTIFICATIONS[new_status]
    session.add(
        UserNotification(
            user_id=appt.client_id,
            type=notification_type,
            title=title,
            message=f"Your appointment #{appt.id} is now {new_status.value}.",
            link="/user-dashboard/appointments",
        )
    )

    session.commit()
    session.refresh(appt)

    logger.info(
        "Appointment %s: %s -> %s by user %s",
        appt.id, previous.value, new_status.value, current_user.id,
    )
    return appt
