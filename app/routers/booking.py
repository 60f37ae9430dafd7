from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, col, select

from app.core.security import get_current_client
from app.database import get_session, get_session_factory
from app.models.barber import Barber
from app.models.booking import BookingCreate, BookingSummary
from app.models.service import Service
from app.models.user import User
from app.services.availability import get_available_slots
from app.services.booking import create_booking


# todas as rotas de reserva exigem cliente logado
router = APIRouter(
    prefix="/api/booking",
    tags=["booking"],
    dependencies=[Depends(get_current_client)],
)


@router.get("/services")
def list_services_for_booking(session: Session = Depends(get_session)):
    services = session.exec(
        select(Service).where(Service.is_active == True).order_by(col(Service.name))  # noqa: E712
    ).all()

    return [
        {
            "id": s.id,
            "name": s.name,
            "description": s.description,
            "duration": s.duration,
            "price": float(s.price),
        }
        for s in services
    ]


@router.get("/barbers")
def list_barbers_for_booking(session: Session = Depends(get_session)):
    rows = session.exec(
        select(Barber, User)
        .join(User, col(User.id) == col(Barber.user_id))
        .order_by(col(User.first_name), col(User.last_name))
    ).all()

    return [
        {
            "id": barber.id,
            "name": user.display_name,
            "role": barber.job_title or "Barber",
            "experience": barber.experience_years,
        }
        for barber, user in rows
    ]


# =========================
# HORÁRIOS DISPONÍVEIS
# GET /api/booking/availability?date=2025-12-10&serviceId=1&barberId=2
# =========================
@router.get("/availability", response_model=List[str])
def get_availability(
    date: Optional[str] = None,
    service_id: Optional[int] = Query(default=None, alias="serviceId"),
    barber_id: Optional[int] = Query(default=None, alias="barberId"),
    session: Session = Depends(get_session),
):
    return get_available_slots(session, date, service_id, barber_id)


# =========================
# CRIAR AGENDAMENTO (CLIENTE)
# =========================
@router.post("/create", status_code=status.HTTP_201_CREATED, response_model=BookingSummary)
def create_appointment(
    payload: BookingCreate,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    current_client: User = Depends(get_current_client),
):
    return create_booking(session_factory, current_client, payload)
