from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field


class UserRole(str, Enum):
    CLIENT = "client"
    BARBER = "barber"
    ADMIN = "admin"


class UserBase(SQLModel):
    email: str = Field(index=True, unique=True)
    first_name: str
    last_name: str


class User(UserBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: str
    role: UserRole = Field(default=UserRole.CLIENT, index=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class UserCreate(UserBase):
    password: str


class UserRead(UserBase):
    id: int
    role: UserRole
