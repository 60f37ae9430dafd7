import logging
from decimal import Decimal

from sqlmodel import Session, select

from app.database import create_db_and_tables, engine
from app.core.security import get_password_hash
from app.models.barber import Barber
from app.models.service import Service
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "changeme123"

USERS = [
    dict(email="admin@barbershop.local", first_name="Admin", last_name="Root", role=UserRole.ADMIN),
    dict(email="barber@barbershop.local", first_name="Jan", last_name="Kowalski", role=UserRole.BARBER),
    dict(email="client@barbershop.local", first_name="Anna", last_name="Nowak", role=UserRole.CLIENT),
]

SERVICES = [
    dict(name="Haircut", duration=30, price=Decimal("40.00")),
    dict(name="Beard Trim", duration=20, price=Decimal("30.00")),
    dict(name="Haircut + Beard", duration=50, price=Decimal("65.00")),
]


def _get_or_create_user(session: Session, data: dict) -> User:
    user = session.exec(select(User).where(User.email == data["email"])).first()
    if user:
        return user

    user = User(password_hash=get_password_hash(DEFAULT_PASSWORD), **data)
    session.add(user)
    session.flush()
    return user


def main():
    create_db_and_tables()

    with Session(engine) as session:
        # 1) usuários (admin, barbeiro, cliente)
        users = {u["role"]: _get_or_create_user(session, u) for u in USERS}

        # 2) perfil do barbeiro com expediente
        barber_user = users[UserRole.BARBER]
        barber = session.exec(select(Barber).where(Barber.user_id == barber_user.id)).first()
        if not barber:
            session.add(
                Barber(user_id=barber_user.id, job_title="Senior Barber", experience_years=5, working_hours="09:00-17:00")
            )

        # 3) serviços (se não existir nenhum)
        if not session.exec(select(Service)).first():
            session.add_all([Service(**s) for s in SERVICES])

        session.commit()

    logger.info("Seed done: %s users, %s services", len(USERS), len(SERVICES))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
