from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from kraftokase_mcp.config import Settings, get_settings
from kraftokase_mcp.errors import register_exception_handlers
from kraftokase_mcp.logging_config import configure_logging
from kraftokase_mcp.routers import collections, products, sync
from kraftokase_mcp.security import enforce_api_key
from kraftokase_mcp.shopify_api import ShopifyApiClient

logger = logging.getLogger(__name__)

SERVICE_TITLE = "Kraftokase MCP"
SERVICE_VERSION = "1.0.0"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _endpoint_directory() -> dict[str, Any]:
    return {
        "name": SERVICE_TITLE,
        "version": SERVICE_VERSION,
        "description": "Middleware Control Panel for Kraftokase Shopify Store",
        "endpoints": {
            "health": "GET /health",
            "products": {
                "list": "GET /products",
                "single": "GET /products/:id",
                "update_tags": "PUT /products/:id/tags",
                "metafields": "GET /products/:id/metafields",
                "update_metafield": "POST /products/:id/metafields",
            },
            "collections": {
                "list": "GET /collections",
                "create": "POST /collections",
                "single": "GET /collections/:id",
                "bulk_metafield": "POST /sync/products/metafield",
            },
        },
        "authentication": "All endpoints except /health and / require the X-API-Key header",
    }


def create_app(
    settings: Settings | None = None,
    shopify_api: ShopifyApiClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=SERVICE_TITLE,
        version=SERVICE_VERSION,
        default_response_class=ORJSONResponse,
    )
    app.state.settings = settings
    app.state.shopify_api = shopify_api or ShopifyApiClient(settings)
    app.state.started_at = time.monotonic()

    # Middleware added later wraps the earlier ones; the key check runs innermost.
    app.middleware("http")(enforce_api_key)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request.state.request_id = uuid4().hex
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Request processed method=%s path=%s status=%s duration=%.0fms ip=%s user_agent=%s request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request.client.host if request.client else None,
            request.headers.get("user-agent"),
            request.state.request_id,
        )
        response.headers["X-Request-ID"] = request.state.request_id
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-API-Key"],
        max_age=86400,
    )

    register_exception_handlers(app)

    @app.get("/health")
    async def health(request: Request) -> ORJSONResponse:
        app_settings: Settings = request.app.state.settings
        missing = app_settings.missing_required()
        if missing:
            return ORJSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "status": "unhealthy",
                    "timestamp": _utc_timestamp(),
                    "error": "Missing environment variables",
                    "missing_variables": missing,
                    "message": "Configure the missing environment variables and restart the service",
                },
            )

        try:
            connection = await request.app.state.shopify_api.test_connection()
        except Exception as exc:
            logger.exception("Health check failed", exc_info=exc)
            return ORJSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "timestamp": _utc_timestamp(), "error": str(exc)},
            )

        return ORJSONResponse(
            content={
                "status": "healthy",
                "timestamp": _utc_timestamp(),
                "uptime": round(time.monotonic() - request.app.state.started_at, 3),
                "shopify_connection": bool(connection.get("success")),
                "environment": app_settings.ENVIRONMENT,
                "store_domain": app_settings.SHOPIFY_STORE_DOMAIN,
            }
        )

    @app.get("/")
    async def root() -> dict[str, Any]:
        return _endpoint_directory()

    app.include_router(products.router)
    app.include_router(collections.router)
    app.include_router(sync.router)

    logger.info(
        "%s configured environment=%s store=%s api_key=%s",
        SERVICE_TITLE,
        settings.ENVIRONMENT,
        settings.SHOPIFY_STORE_DOMAIN or "not configured",
        "configured" if settings.MCP_API_KEY else "missing",
    )
    return app


app = create_app()
