from fastapi import APIRouter, Depends, status
from sqlmodel import Session, col, select

from app.core.errors import NotFoundError
from app.database import get_session
from app.models.service import Service, ServiceCreate
from app.core.security import get_current_admin


router = APIRouter(
    prefix="/api/admin/services",
    tags=["services"],
    dependencies=[Depends(get_current_admin)],
)


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_service(
    payload: ServiceCreate,
    session: Session = Depends(get_session),
):
    service = Service.model_validate(payload)

    session.add(service)
    session.commit()
    session.refresh(service)

    return service


@router.get("/")
def list_services(session: Session = Depends(get_session)):
    return session.exec(select(Service).order_by(col(Service.name))).all()


@router.patch("/{service_id}/deactivate")
def deactivate_service(
    service_id: int,
    session: Session = Depends(get_session),
):
    service = session.get(Service, service_id)
    if not service:
        raise NotFoundError("Service not found.")

    # inativo some da reserva, mas os agendamentos antigos continuam válidos
    service.is_active = False
    session.add(service)
    session.commit()
    session.refresh(service)
    return service
