"""
Exception handlers mapping orbis-access errors to JSON responses.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.exceptions import OrbisAccessError, create_error_response, get_http_status_code

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register orbis-access exception handlers on a FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(OrbisAccessError)
    async def access_exception_handler(request: Request, exc: OrbisAccessError):
        status_code = get_http_status_code(exc)
        if status_code >= 500:
            logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=status_code, content=create_error_response(exc))
