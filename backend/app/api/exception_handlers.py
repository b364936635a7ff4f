"""
Maps domain errors onto HTTP responses.

Body: {"detail": <message>, "kind": <validation|not_found|conflict|storage>}
plus "field" for validation errors.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.errors import ReservationError
from app.core.logging import get_logger

logger = get_logger(__name__)


async def reservation_error_handler(request: Request, exc: ReservationError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_error", kind=exc.kind, detail=exc.message)
    else:
        logger.warning("request_rejected", kind=exc.kind, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReservationError, reservation_error_handler)
