from fastapi import Request, status
from fastapi.responses import JSONResponse


class BookingError(Exception):
    """Erro de domínio com status HTTP associado.

    A mensagem vai para o cliente como está, então nunca deve carregar
    detalhes internos (SQL, stack, etc).
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BookingError):
    # violação de FK/unique ou horário já ocupado: erro do cliente
    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(BookingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
