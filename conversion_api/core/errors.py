"""Error taxonomy and the FastAPI handlers that render it.

Every domain failure derives from ConversionError, which carries the HTTP
status and the client-facing message. Handlers always answer {"error": ...}.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("conversion_api.errors")

MISSING_PARAMETERS_MESSAGE = "Faltan parámetros requeridos"
INVALID_CONVERSION_MESSAGE = "Conversión no válida"
INVALID_CURRENCY_MESSAGE = "Conversión de moneda no válida"
GENERIC_ERROR_MESSAGE = "Algo salió mal!"


class ConversionError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = INVALID_CONVERSION_MESSAGE

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingParameter(ConversionError):
    default_message = MISSING_PARAMETERS_MESSAGE


class InvalidConversion(ConversionError):
    default_message = INVALID_CONVERSION_MESSAGE


class UnexpectedConversionError(ConversionError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = GENERIC_ERROR_MESSAGE


class UpstreamUnavailable(Exception):
    """External rate source failed; recovered by the rate cache, never rendered."""


def conversion_error_handler(request: Request, exc: ConversionError):  # type: ignore
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        detail = f"No route for {request.method} {request.url.path}"
    else:
        detail = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": detail})


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    logger.debug("request validation failed: %s", exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": MISSING_PARAMETERS_MESSAGE},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.error("unhandled exception", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": GENERIC_ERROR_MESSAGE},
    )
