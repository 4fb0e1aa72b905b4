"""Global error handling middleware

All exceptions are logged and converted to the flat error envelope the
frontend reads:

    {"error": "<message>", "code": "<CODE>", "details": {...}}
"""
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.core.exceptions import (
    APIException,
    ServiceException,
    ValidationException
)
from backend.utils.logger import get_logger

logger = get_logger(__name__)


def error_body(message, code: str, details=None) -> dict:
    return {"error": message, "code": code, "details": details or {}}


def api_error_response(exc: APIException) -> JSONResponse:
    """Render an APIException as a JSON response"""
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_body(exc.message, exc.error_code, exc.details))
    )


def setup_exception_handlers(app: FastAPI):
    """Setup global exception handlers for the FastAPI app

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ServiceException)
    async def service_exception_handler(request: Request, exc: ServiceException):
        """Handle provider failures surfaced by the routes"""
        logger.error(
            f"Service Exception | path={request.url.path} | "
            f"service={exc.service_name} | message={exc.message} | "
            f"reason={exc.details.get('reason')}"
        )
        return api_error_response(exc)

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(request: Request, exc: ValidationException):
        """Handle validation exceptions"""
        logger.warning(f"Validation error | field={exc.field} | message={exc.message}")
        return api_error_response(exc)

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        """Handle custom API exceptions"""
        logger.error(
            f"API Exception | path={request.url.path} | "
            f"code={exc.error_code} | message={exc.message}"
        )
        return api_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors"""
        logger.warning(f"Request validation error | errors={exc.errors()}")

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=jsonable_encoder(
                error_body("Request validation failed", "VALIDATION_ERROR", {"errors": exc.errors()})
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions"""
        logger.warning(
            f"HTTP Exception | path={request.url.path} | "
            f"status={exc.status_code} | detail={exc.detail}"
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.detail, "HTTP_ERROR")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other unexpected exceptions"""
        logger.exception(
            f"Unexpected error | path={request.url.path} | "
            f"error={type(exc).__name__} | message={str(exc)}"
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                "An unexpected error occurred",
                "INTERNAL_ERROR",
                {"type": type(exc).__name__, "message": str(exc)}
            )
        )
