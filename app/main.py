import logging

from fastapi import FastAPI, Request

from app.config import LOG_LEVEL
from app.core.errors import BookingError, booking_error_handler
from app.database import create_db_and_tables
from app.routers import users
from app.routers import auth
from app.routers import services
from app.routers import booking
from app.routers import appointments
from app.routers import notifications

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Barbershop Booking API")
app.add_exception_handler(BookingError, booking_error_handler)

app.include_router(users.router)
app.include_router(auth.router)
app.include_router(services.router)
app.include_router(booking.router)
app.include_router(appointments.router)
app.include_router(notifications.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
    return response


@app.on_event("startup")
def on_startup():
    create_db_and_tables()


@app.get("/health")
def health():
    return {"status": "ok"}
