from decimal import Decimal
from typing import Optional

from sqlmodel import SQLModel, Field


class ServiceBase(SQLModel):
    name: str
    description: Optional[str] = None
    duration: int = Field(gt=0)  # minutos
    price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    is_active: bool = True


class Service(ServiceBase, table=True):
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)


class ServiceCreate(ServiceBase):
    pass
