"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.request_id import get_request_id
from app.domain.errors import DomainError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "conflict": status.HTTP_409_CONFLICT,
    "unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: DomainError) -> int:
    return STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_exc_handler(request: Request, exc: DomainError):  # type: ignore[override]
        rid = get_request_id(request)
        code = status_for(exc)
        if code >= 500:
            logger.warning("domain failure", extra={"reason": exc.reason, "kind": exc.kind})
        payload = {"detail": exc.reason, "kind": exc.kind, "message": exc.message, "request_id": rid}
        return JSONResponse(status_code=code, content=payload)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": exc.detail, "request_id": rid}
        return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": "validation_error", "errors": exc.errors(), "request_id": rid}
        return JSONResponse(status_code=422, content=payload)
