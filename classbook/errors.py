# classbook/errors.py
"""
Exception handlers.

Every error leaves the API as a problem+json style body::

    {"type": "about:blank", "title": "Conflict", "status": 409,
     "detail": "...", "instance": "/dashboard/classes", "code": "CLASS_CODE_TAKEN"}

``code`` and ``errors`` are only present when known. The Stripe webhook
route answers with its own ``{"error": ...}`` bodies and never reaches
these handlers.
"""

from http import HTTPStatus
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from classbook.core.exceptions import DomainException

logger = logging.getLogger(__name__)


def _title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _problem_response(
    request: Request,
    status_code: int,
    detail: Any = None,
    *,
    code: Optional[str] = None,
    errors: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": _title(status_code),
        "status": status_code,
        "detail": detail or "",
        "instance": request.url.path,
    }
    if code:
        body["code"] = code
    if errors:
        body["errors"] = jsonable_encoder(errors)
    return JSONResponse(body, status_code=status_code, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail, code, errors = exc.detail, None, None
        if isinstance(detail, dict):
            code = detail.get("code")
            errors = detail.get("details")
            detail = detail.get("message")
        return _problem_response(
            request, exc.status_code, detail, code=code, errors=errors, headers=exc.headers
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        status_code = exc.to_http_exception().status_code
        if status_code >= 500:
            logger.error(f"Service error on {request.url.path}: {exc.message}")
        return _problem_response(
            request, status_code, exc.message, code=exc.code, errors=exc.details
        )

    @app.exception_handler(RequestValidationError)
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: Any) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        return _problem_response(request, 422, errors, code="validation_error", errors=errors)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.url.path}")
        return _problem_response(
            request, 500, "Internal Server Error", code="internal_server_error"
        )
