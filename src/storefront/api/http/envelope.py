"""Response envelope and exception translation for every JSON response.

Successful handler output is wrapped by ``EnvelopeRoute``; errors are turned
into the same envelope by the exception handlers registered in
``register_exception_handlers``.
"""

import json
from collections.abc import Callable, Coroutine
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from loguru import logger
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from src.storefront.core.errors import error_code_for
from src.storefront.core.models.common import (
    ApiResponse,
    ErrorBody,
    PaginationMeta,
    ResponseMeta,
)
from src.storefront.core.security import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    sanitize_body,
)
from src.storefront.entities.core._base import utcnow
from src.storefront.runtime.context import get_config

INTERNAL_ERROR_MESSAGE = "Internal server error. Please try again later."
VALIDATION_ERROR_CODE = "VALIDATION_ERROR"

_PAGINATED_KEYS = frozenset({"data", "total", "page", "limit", "totalPages"})


def correlation_id_for(request: Request) -> str:
    """Correlation id of the request, assigned once and reused for its lifetime."""
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id is None:
        correlation_id = request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        request.state.correlation_id = correlation_id
    return correlation_id


def _meta(request: Request, status_code: int) -> ResponseMeta:
    return ResponseMeta(
        timestamp=utcnow(),
        correlation_id=correlation_id_for(request),
        path=request.url.path,
        method=request.method,
        status_code=status_code,
        version=get_config().app.version,
    )


def success_payload(request: Request, status_code: int, data: Any) -> dict[str, Any]:
    pagination = None
    if isinstance(data, dict) and _PAGINATED_KEYS <= data.keys():
        pagination = PaginationMeta.from_page(
            page=data["page"],
            limit=data["limit"],
            total=data["total"],
            total_pages=data["totalPages"],
        )
        data = data["data"]
    return ApiResponse(
        success=True,
        data=data,
        meta=_meta(request, status_code),
        pagination=pagination,
    ).to_payload()


def error_payload(
    request: Request,
    status_code: int,
    message: str,
    *,
    code: str | None = None,
    details: Any = None,
) -> dict[str, Any]:
    return ApiResponse(
        success=False,
        error=ErrorBody(
            code=code or error_code_for(status_code),
            message=message,
            details=details,
        ),
        meta=_meta(request, status_code),
    ).to_payload()


def error_response(
    request: Request,
    status_code: int,
    message: str,
    *,
    code: str | None = None,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        content=error_payload(request, status_code, message, code=code, details=details),
        headers=headers,
    )
    response.headers[CORRELATION_ID_HEADER] = correlation_id_for(request)
    return response


def _wrap(request: Request, response: Response) -> Response:
    if response.status_code == 204 or response.media_type != "application/json":
        return response

    body = json.loads(response.body) if response.body else None
    if response.status_code >= 400:
        payload = error_payload(
            request,
            response.status_code,
            HTTPStatus(response.status_code).phrase,
            details=body,
        )
    else:
        payload = success_payload(request, response.status_code, body)

    headers = {
        key: value
        for key, value in response.headers.items()
        if key.lower() != "content-length"
    }
    wrapped = JSONResponse(
        status_code=response.status_code,
        content=payload,
        headers=headers,
        background=response.background,
    )
    wrapped.headers[CORRELATION_ID_HEADER] = correlation_id_for(request)
    return wrapped


async def _sanitized_body(request: Request) -> Any:
    try:
        raw = await request.body()
        return sanitize_body(json.loads(raw)) if raw else None
    except (ValueError, RuntimeError):
        return None


class EnvelopeRoute(APIRoute):
    """Route that wraps JSON output in the standard response envelope."""

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_handler = super().get_route_handler()

        async def envelope_handler(request: Request) -> Response:
            try:
                response = await original_handler(request)
            except Exception:
                # Keep the body for the error log; the stream is gone afterwards
                request.state.request_body = await _sanitized_body(request)
                raise
            return _wrap(request, response)

        return envelope_handler


# --- Exception handlers ---


def _log_server_error(request: Request, exc: BaseException, status_code: int) -> None:
    logger.bind(
        status_code=status_code,
        error_type=type(exc).__name__,
        body=getattr(request.state, "request_body", None),
    ).opt(exception=exc).error("Unhandled server error: {}", exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    status_code = exc.status_code
    if status_code >= 500:
        _log_server_error(request, exc, status_code)
        return error_response(request, status_code, INTERNAL_ERROR_MESSAGE, headers=exc.headers)

    logger.bind(status_code=status_code, error_type=type(exc).__name__).warning(
        "Request failed: {}", exc.detail
    )
    message = exc.detail if isinstance(exc.detail, str) else HTTPStatus(status_code).phrase
    details = getattr(exc, "details", None)
    if details is None and not isinstance(exc.detail, str):
        details = exc.detail
    return error_response(
        request, status_code, message, details=details, headers=exc.headers
    )


def _validation_details(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    details = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(error.get("msg", "Invalid value"))
        details.append(
            {
                "field": ".".join(location) or None,
                "message": message.removeprefix("Value error, "),
                "type": error.get("type"),
            }
        )
    return details


def _validation_response(request: Request, errors: list[dict[str, Any]]) -> JSONResponse:
    details = _validation_details(errors)
    messages = list(dict.fromkeys(item["message"] for item in details))
    message = messages[0] if len(messages) == 1 else "Validation failed"
    logger.bind(status_code=400, validation=details).warning("Request validation failed")
    return error_response(
        request,
        400,
        message,
        code=VALIDATION_ERROR_CODE,
        details={"validation": details},
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _validation_response(request, list(exc.errors()))


async def pydantic_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _validation_response(request, exc.errors(include_url=False))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    _log_server_error(request, exc, 500)
    return error_response(request, 500, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
