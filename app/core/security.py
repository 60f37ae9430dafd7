from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlmodel import Session, select

from app.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from app.core.errors import NotFoundError
from app.database import get_session
from app.models.barber import Barber
from app.models.user import User, UserRole


# =========================
# HASH DE SENHA
# =========================

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# =========================
# TOKEN JWT
# =========================

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/login")


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_user_token(user: User) -> str:
    """Token com a identidade que a agenda usa: {sub, id, role}."""
    return create_access_token(
        data={"sub": user.email, "id": user.id, "role": user.role.value}
    )


# =========================
# USUÁRIO AUTENTICADO
# =========================

def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> User:

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        email: str = payload.get("sub")

        if email is None:
            raise credentials_exception

    except JWTError:
        raise credentials_exception

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None:
        raise credentials_exception

    return user


def _require_role(user: User, role: UserRole, detail: str) -> User:
    if user.role != role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return user


# =========================
# SOMENTE CLIENTE
# =========================

def get_current_client(
    current_user: User = Depends(get_current_user),
) -> User:
    return _require_role(current_user, UserRole.CLIENT, "Access denied. Client role required.")


# =========================
# PERFIL DE BARBEIRO
# =========================

def get_current_barber_profile(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> Optional[Barber]:
    """Linha de ``barbers`` de quem chama; None para cliente e admin."""
    if current_user.role != UserRole.BARBER:
        return None

    barber = session.exec(
        select(Barber).where(Barber.user_id == current_user.id)
    ).first()

    if barber is None:
        raise NotFoundError("Barber not found.")

    return barber


# =========================
# SOMENTE ADMIN
# =========================

def get_current_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    return _require_role(current_user, UserRole.ADMIN, "Access denied. Admin role required.")
