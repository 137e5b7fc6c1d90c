"""
Enveloppe de réponse commune et gestion centralisée des erreurs.

Succès : {"success": true, "data": ...}
Erreur : {"success": false, "error": {"message": ..., "code": ...}}
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Erreur applicative convertie en enveloppe JSON par le handler global."""

    def __init__(
        self,
        status_code: int,
        message: str,
        code: Optional[str] = None,
        details: Any = None,
        headers: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.code = code
        self.details = details
        self.headers = headers
        super().__init__(message)


def success(data: Any, status_code: int = status.HTTP_200_OK, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data)},
        headers=headers,
    )


def error(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    code: Optional[str] = None,
    details: Any = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    body = {"message": message, "code": code}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": body},
        headers=headers,
    )


class ApiErrors:
    """Catalogue des erreurs courantes, à lever avec `raise ApiErrors.X()`."""

    # Authentification
    @staticmethod
    def UNAUTHORIZED() -> ApiError:
        return ApiError(401, "Unauthorized", "UNAUTHORIZED")

    @staticmethod
    def INVALID_TOKEN() -> ApiError:
        return ApiError(401, "Invalid or expired token", "INVALID_TOKEN")

    @staticmethod
    def MISSING_TOKEN() -> ApiError:
        return ApiError(401, "Missing authentication token", "MISSING_TOKEN")

    @staticmethod
    def INVALID_CREDENTIALS() -> ApiError:
        return ApiError(401, "Invalid email or password", "INVALID_CREDENTIALS")

    # Utilisateurs
    @staticmethod
    def USER_NOT_FOUND() -> ApiError:
        return ApiError(404, "User not found", "USER_NOT_FOUND")

    @staticmethod
    def EMAIL_ALREADY_EXISTS() -> ApiError:
        return ApiError(400, "Email already registered", "EMAIL_ALREADY_EXISTS")

    @staticmethod
    def INVALID_EMAIL() -> ApiError:
        return ApiError(400, "Invalid email format", "INVALID_EMAIL")

    @staticmethod
    def WEAK_PASSWORD(errors: list) -> ApiError:
        return ApiError(400, "Password does not meet requirements", "WEAK_PASSWORD", {"errors": errors})

    # Ressources
    @staticmethod
    def NOT_FOUND(resource: str) -> ApiError:
        return ApiError(404, f"{resource} not found", "NOT_FOUND")

    @staticmethod
    def FORBIDDEN(message: str = "You don't have permission to access this resource") -> ApiError:
        return ApiError(403, message, "FORBIDDEN")

    # Validation
    @staticmethod
    def INVALID_INPUT(message: str = "Invalid input", details: Any = None) -> ApiError:
        return ApiError(400, message, "INVALID_INPUT", details)

    @staticmethod
    def MISSING_REQUIRED_FIELD(field: str) -> ApiError:
        return ApiError(400, f"{field} is required", "MISSING_FIELD")

    @staticmethod
    def MISSING_FIELDS() -> ApiError:
        return ApiError(400, "Missing required fields", "MISSING_FIELDS")


_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    429: "RATE_LIMIT",
}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return error(exc.message, exc.status_code, exc.code, exc.details, exc.headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    return error(str(exc.detail), exc.status_code, code, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error("Invalid input", status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", exc.errors())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Jamais de détail brut côté client
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error("An unexpected error occurred", status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
