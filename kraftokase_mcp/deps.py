from __future__ import annotations

from fastapi import Request

from kraftokase_mcp.config import Settings
from kraftokase_mcp.shopify_api import ShopifyApiClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_shopify_api(request: Request) -> ShopifyApiClient:
    return request.app.state.shopify_api


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)
