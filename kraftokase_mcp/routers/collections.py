from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status

from kraftokase_mcp.deps import get_request_id, get_shopify_api
from kraftokase_mcp.errors import GatewayError, describe_operation
from kraftokase_mcp.logging_config import log_task
from kraftokase_mcp.schemas import CreateCollectionRequest
from kraftokase_mcp.shopify_api import ShopifyApiClient

router = APIRouter(prefix="/collections", tags=["collections"])


@router.get("", dependencies=[describe_operation("Failed to fetch collections")])
async def list_collections(
    shopify_api: ShopifyApiClient = Depends(get_shopify_api),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, Any]:
    collections = await shopify_api.get_collections()
    log_task("get_collections", count=len(collections), request_id=request_id)
    return {"success": True, "data": {"collections": collections, "count": len(collections)}}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[describe_operation("Failed to create collection")],
)
async def create_collection(
    payload: CreateCollectionRequest,
    shopify_api: ShopifyApiClient = Depends(get_shopify_api),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, Any]:
    collection = await shopify_api.create_smart_collection(
        title=payload.title,
        rule_keywords=payload.rule_keywords,
        description=payload.description,
    )
    log_task(
        "create_smart_collection",
        title=payload.title,
        rule_keywords=payload.rule_keywords,
        collection_id=collection.get("id"),
        request_id=request_id,
    )
    return {
        "success": True,
        "data": {
            "collection": collection,
            "message": f"Successfully created smart collection: {payload.title}",
        },
    }


@router.get(
    "/{collection_id}",
    dependencies=[describe_operation("Failed to fetch collection", resource="collection")],
)
async def get_collection(
    collection_id: str,
    shopify_api: ShopifyApiClient = Depends(get_shopify_api),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, Any]:
    collections = await shopify_api.get_collections()
    collection = next(
        (item for item in collections if str(item.get("id")) == collection_id),
        None,
    )
    if collection is None:
        raise GatewayError(
            status_code=status.HTTP_404_NOT_FOUND,
            error="Collection not found",
            message="The specified collection was not found",
        )
    log_task("get_collection", collection_id=collection_id, request_id=request_id)
    return {"success": True, "data": {"collection": collection}}
