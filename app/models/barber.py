from typing import Optional

from sqlmodel import SQLModel, Field


class Barber(SQLModel, table=True):
    __tablename__ = "barbers"

    # id próprio, diferente do user.id da pessoa
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", unique=True, index=True)

    job_title: Optional[str] = None
    experience_years: int = 0

    # formato "HH:mm-HH:mm"; vazio ou inválido usa o expediente padrão
    working_hours: Optional[str] = None
