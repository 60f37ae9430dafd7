from enum import Enum
from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel, Field

from app.models.types import UTCDateTime, utc_now


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELED = "canceled"
    NO_SHOW = "no-show"

    @classmethod
    def parse(cls, value: str) -> "AppointmentStatus":
        """Normaliza grafias externas ("cancelled", "no_show", ...)."""
        key = value.strip().lower().replace("_", "-")
        key = _STATUS_ALIASES.get(key, key)
        return cls(key)


_STATUS_ALIASES = {
    "cancelled": "canceled",
    "noshow": "no-show",
}

# não bloqueiam horário na agenda
INACTIVE_STATUSES = frozenset({AppointmentStatus.CANCELED, AppointmentStatus.NO_SHOW})

# pending -> {confirmed, canceled} -> {completed, no-show, canceled}
ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELED}),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.NO_SHOW, AppointmentStatus.CANCELED}
    ),
}


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"

    id: Optional[int] = Field(default=None, primary_key=True)

    client_id: int = Field(foreign_key="user.id", index=True)
    barber_id: int = Field(foreign_key="barbers.id", index=True)
    service_id: int = Field(foreign_key="services.id", index=True)

    # sempre em UTC com tzinfo, inclusive nas comparações de intervalo
    appointment_time: datetime = Field(sa_type=UTCDateTime, index=True)

    status: AppointmentStatus = Field(default=AppointmentStatus.PENDING, index=True)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
