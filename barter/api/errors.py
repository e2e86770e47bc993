"""Translation of exchange errors into HTTP responses."""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from barter.exceptions import ExchangeError

logger = logging.getLogger(__name__)


def http_error(exc: ExchangeError) -> HTTPException:
    """HTTPException carrying the error code and the user-facing message."""
    return HTTPException(status_code=exc.http_status, detail=exc.to_response())


def register_error_handlers(app: FastAPI) -> None:
    """Catch exchange errors raised outside a route's own try block."""

    @app.exception_handler(ExchangeError)
    async def exchange_error_handler(request: Request, exc: ExchangeError):
        logger.warning(
            "ExchangeError %s on %s: %s",
            exc.code,
            request.url.path,
            exc.message,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content={"detail": exc.to_response()},
        )
