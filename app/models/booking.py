from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.appointment import AppointmentStatus


class BookingCreate(BaseModel):
    """Payload do POST de agendamento (mesmos nomes do frontend)."""

    model_config = ConfigDict(populate_by_name=True)

    service_id: Optional[int] = Field(default=None, alias="serviceId")
    barber_id: Optional[int] = Field(default=None, alias="barberId")
    date: Optional[str] = None
    time_slot: Optional[str] = Field(default=None, alias="timeSlot")
    notes: Optional[str] = None


class BookingSummary(BaseModel):
    id: int
    appointment_time: datetime
    service_name: str
    client_name: str
    barber_name: str
    status: AppointmentStatus


class StatusUpdate(BaseModel):
    status: str
