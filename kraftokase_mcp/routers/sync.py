from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status

from kraftokase_mcp.deps import get_request_id, get_shopify_api
from kraftokase_mcp.errors import GatewayError, describe_operation
from kraftokase_mcp.logging_config import log_task
from kraftokase_mcp.schemas import UpdateMetafieldRequest
from kraftokase_mcp.shopify_api import ShopifyApiClient

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post(
    "/products/metafield",
    dependencies=[describe_operation("Failed to perform bulk metafield update")],
)
async def bulk_update_product_metafield(
    payload: UpdateMetafieldRequest,
    keyword: str | None = None,
    shopify_api: ShopifyApiClient = Depends(get_shopify_api),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, Any]:
    if not keyword:
        raise GatewayError(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Missing keyword",
            message="Keyword parameter is required for bulk metafield updates",
        )

    result = await shopify_api.update_products_by_keyword(
        keyword,
        namespace=payload.namespace,
        key=payload.key,
        value=payload.value,
        type=payload.type,
    )
    succeeded = sum(1 for item in result["results"] if item["success"])
    log_task(
        "bulk_metafield_update",
        keyword=keyword,
        namespace=payload.namespace,
        key=payload.key,
        value=payload.value,
        total_products=result["total_products"],
        successful_updates=succeeded,
        failed_updates=len(result["results"]) - succeeded,
        request_id=request_id,
    )
    return {
        "success": True,
        "data": {
            **result,
            "message": f"Bulk metafield update completed for keyword: {keyword}",
        },
    }
