import logging
from typing import Callable, Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app.config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    # sqlite + FastAPI: a sessão pode trocar de thread entre dependências
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """SQLite só aplica FOREIGN KEY com o pragma ligado em cada conexão."""
    if target.dialect.name != "sqlite":
        return

    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    pool_pre_ping=True,
    connect_args=_connect_args(DATABASE_URL),
)
enable_sqlite_foreign_keys(engine)


def create_db_and_tables() -> None:
    # importa os modelos para registrar as tabelas no metadata
    from app.models import appointment, barber, notification, service, user  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ready (%s)", engine.url.render_as_string(hide_password=True))


def get_session() -> Iterator[Session]:
    """Sessão por requisição, usada nas consultas avulsas."""
    with Session(engine) as session:
        yield session


def get_session_factory() -> Callable[[], Session]:
    """Fábrica de sessões dedicadas, usada nas transações de agendamento."""
    return lambda: Session(engine)
