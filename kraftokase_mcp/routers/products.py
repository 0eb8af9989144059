from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from kraftokase_mcp.config import Settings
from kraftokase_mcp.deps import get_app_settings, get_request_id, get_shopify_api
from kraftokase_mcp.errors import describe_operation
from kraftokase_mcp.logging_config import log_task
from kraftokase_mcp.schemas import UpdateMetafieldRequest, UpdateProductTagsRequest
from kraftokase_mcp.shopify_api import ShopifyApiClient

router = APIRouter(prefix="/products", tags=["products"])


def parse_limit(raw: str | None, default: int) -> int:
    """Lenient ``?limit=`` parsing: anything not a positive integer means the default."""
    try:
        limit = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


@router.get("", dependencies=[describe_operation("Failed to fetch products")])
async def list_products(
    limit: str | None = None,
    shopify_api: ShopifyApiClient = Depends(get_shopify_api),
    settings: Settings = Depends(get_app_settings),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, Any]:
    resolved_limit = parse_limit(limit, settings.DEFAULT_PRODUCT_LIMIT)
    products = await shopify_api.get_products(resolved_limit)
    log_task("get_products", limit=resolved_limit, count=len(products), request_id=request_id)
    return {
        "success": True,
        "data": {"products": products, "count": len(products), "limit": resolved_limit},
    }


@router.get(
    "/{product_id}",
    dependencies=[describe_operation("Failed to fetch product", resource="product")],
)
async def get_product(
    product_id: str,
    shopify_api: ShopifyApiClient = Depends(get_shopify_api),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, Any]:
    product = await shopify_api.get_product(product_id)
    log_task("get_product", product_id=product_id, request_id=request_id)
    return {"success": True, "data": {"product": product}}


@router.put(
    "/{product_id}/tags",
    dependencies=[describe_operation("Failed to update product tags", resource="product")],
)
async def update_product_tags(
    product_id: str,
    payload: UpdateProductTagsRequest,
    shopify_api: ShopifyApiClient = Depends(get_shopify_api),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, Any]:
    product = await shopify_api.update_product_tags(product_id, payload.tags)
    log_task("update_product_tags", product_id=product_id, tags=payload.tags, request_id=request_id)
    return {
        "success": True,
        "data": {
            "product": product,
            "message": f"Successfully updated tags for product {product_id}",
        },
    }


@router.get(
    "/{product_id}/metafields",
    dependencies=[describe_operation("Failed to fetch product metafields", resource="product")],
)
async def get_product_metafields(
    product_id: str,
    shopify_api: ShopifyApiClient = Depends(get_shopify_api),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, Any]:
    metafields = await shopify_api.get_product_metafields(product_id)
    log_task(
        "get_product_metafields",
        product_id=product_id,
        count=len(metafields),
        request_id=request_id,
    )
    return {"success": True, "data": {"metafields": metafields, "count": len(metafields)}}


@router.post(
    "/{product_id}/metafields",
    dependencies=[describe_operation("Failed to update product metafield", resource="product")],
)
async def update_product_metafield(
    product_id: str,
    payload: UpdateMetafieldRequest,
    shopify_api: ShopifyApiClient = Depends(get_shopify_api),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, Any]:
    metafield = await shopify_api.update_product_metafield(
        product_id,
        namespace=payload.namespace,
        key=payload.key,
        value=payload.value,
        type=payload.type,
    )
    log_task(
        "update_product_metafield",
        product_id=product_id,
        namespace=payload.namespace,
        key=payload.key,
        value=payload.value,
        type=payload.type,
        request_id=request_id,
    )
    return {
        "success": True,
        "data": {
            "metafield": metafield,
            "message": (
                f"Successfully updated metafield {payload.namespace}.{payload.key} "
                f"for product {product_id}"
            ),
        },
    }
