from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel, Field

from app.models.types import UTCDateTime, utc_now


class NotificationBase(SQLModel):
    type: str = Field(index=True)
    title: str
    message: str
    link: Optional[str] = None
    is_read: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)


class UserNotification(NotificationBase, table=True):
    """Notificações do cliente."""

    __tablename__ = "user_notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)


class BarberNotification(NotificationBase, table=True):
    """Notificações da agenda do barbeiro (chave: barbers.id)."""

    __tablename__ = "notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="barbers.id", index=True)
    recipient_user_id: Optional[int] = Field(default=None, foreign_key="user.id")


class AdminNotification(NotificationBase, table=True):
    """Uma linha por admin; os related_* apontam para o agendamento de origem."""

    __tablename__ = "admin_notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    admin_user_id: int = Field(foreign_key="user.id", index=True)

    related_appointment_id: Optional[int] = Field(default=None, foreign_key="appointments.id")
    related_client_id: Optional[int] = Field(default=None, foreign_key="user.id")
    related_barber_id: Optional[int] = Field(default=None, foreign_key="barbers.id")
