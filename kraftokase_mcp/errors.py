from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kraftokase_mcp.logging_config import log_error
from kraftokase_mcp.schemas import describe_errors, first_error_message
from kraftokase_mcp.shopify_api import ShopifyApiError

logger = logging.getLogger(__name__)

KNOWN_ENDPOINTS = [
    "GET /health",
    "GET /products",
    "GET /products/:id",
    "PUT /products/:id/tags",
    "GET /products/:id/metafields",
    "POST /products/:id/metafields",
    "GET /collections",
    "POST /collections",
    "GET /collections/:id",
    "POST /sync/products/metafield",
]

_GENERIC_FAILURE_MESSAGE = "An unexpected error occurred"
_RATE_LIMITED_MESSAGE = "Too many requests to Shopify API. Please try again later."


class GatewayError(Exception):
    """A failure decided by the gateway itself, rendered as the error envelope."""

    def __init__(self, *, status_code: int, error: str, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message
        self.extra = extra


def error_envelope(*, error: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "error": error, "message": message, **extra}


def describe_operation(failure: str, *, resource: str | None = None):
    """Route dependency naming the labels used when a remote call fails.

    ``failure`` becomes the ``error`` field of a 500 answer; ``resource``
    enables the not-found mapping for a remote 404.
    """

    def _describe(request: Request) -> None:
        request.state.failure_label = failure
        request.state.not_found_resource = resource

    return Depends(_describe)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _is_production(request: Request) -> bool:
    return request.app.state.settings.is_production


def _shopify_error_response(request: Request, exc: ShopifyApiError) -> ORJSONResponse:
    log_error(
        exc,
        endpoint=f"{request.method} {request.url.path}",
        path_params=dict(request.path_params),
        remote_status=exc.remote_status,
        request_id=_request_id(request),
    )

    if exc.remote_status == status.HTTP_404_NOT_FOUND:
        resource = getattr(request.state, "not_found_resource", None)
        if resource:
            body = error_envelope(
                error=f"{resource.capitalize()} not found",
                message=f"The specified {resource} was not found",
            )
        else:
            body = error_envelope(
                error="Not Found",
                message="The requested resource was not found",
            )
        return ORJSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=body)

    if exc.remote_status == status.HTTP_429_TOO_MANY_REQUESTS:
        return ORJSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=error_envelope(error="Rate Limited", message=_RATE_LIMITED_MESSAGE),
        )

    failure = getattr(request.state, "failure_label", None) or "Internal Server Error"
    message = _GENERIC_FAILURE_MESSAGE if _is_production(request) else str(exc)
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(error=failure, message=message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GatewayError)
    async def gateway_error_handler(_request: Request, exc: GatewayError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=exc.status_code,
            content=error_envelope(error=exc.error, message=exc.message, **exc.extra),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
        errors = list(exc.errors())
        details = describe_errors(errors)
        logger.warning(
            "Validation error path=%s errors=%s request_id=%s",
            request.url.path,
            details,
            _request_id(request),
        )
        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_envelope(
                error="Validation Error",
                message=first_error_message(errors),
                details=details,
            ),
        )

    @app.exception_handler(ShopifyApiError)
    async def shopify_error_handler(request: Request, exc: ShopifyApiError) -> ORJSONResponse:
        return _shopify_error_response(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
        # Unmatched method on a known path is reported like an unknown route.
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return ORJSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content=error_envelope(
                    error="Not Found",
                    message=f"Route {request.method} {request.url.path} not found",
                    available_endpoints=KNOWN_ENDPOINTS,
                ),
            )
        return ORJSONResponse(
            status_code=exc.status_code,
            content=error_envelope(error=str(exc.detail), message=str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception(
            "Unhandled server exception method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        message = _GENERIC_FAILURE_MESSAGE if _is_production(request) else str(exc)
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope(error="Internal Server Error", message=message),
        )
