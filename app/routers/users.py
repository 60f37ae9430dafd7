import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from app.database import get_session
from app.models.user import User, UserCreate, UserRead, UserRole
from app.core.security import get_password_hash

router = APIRouter(prefix="/api", tags=["users"])

logger = logging.getLogger(__name__)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserRead)
def register_user(user: UserCreate, session: Session = Depends(get_session)):

    existing_user = session.exec(
        select(User).where(User.email == user.email)
    ).first()

    if existing_user:
        raise HTTPException(status_code=400, detail="Email already registered")

    hashed_password = get_password_hash(user.password)

    # cadastro público cria sempre cliente; barbeiro/admin vêm do seed/admin
    db_user = User(
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        password_hash=hashed_password,
        role=UserRole.CLIENT,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)

    logger.info("Registered client %s", db_user.id)
    return db_user
