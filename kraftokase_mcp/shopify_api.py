from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from kraftokase_mcp.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_METAFIELD_TYPE = "single_line_text_field"
_PRODUCT_LIST_FIELDS = "id,title,handle,tags,images,vendor,product_type,created_at,updated_at"


class ShopifyApiError(RuntimeError):
    def __init__(
        self,
        *,
        message: str,
        status_code: int = 502,
        remote_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.remote_status = remote_status


class ShopifyApiClient:
    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._timeout = settings.SHOPIFY_REQUEST_TIMEOUT_SECONDS
        self._call_delay = settings.SHOPIFY_CALL_DELAY_SECONDS
        self._bulk_item_delay = settings.SHOPIFY_BULK_ITEM_DELAY_SECONDS
        self._transport = transport
        self._sleep = asyncio.sleep

    async def get_products(self, limit: int | None = None) -> list[dict[str, Any]]:
        params = {
            "limit": limit or self._settings.DEFAULT_PRODUCT_LIMIT,
            "fields": _PRODUCT_LIST_FIELDS,
        }
        body = await self._request("GET", "/products.json", params=params)
        return self._expect_list(body, "products")

    async def get_product(self, product_id: str | int) -> dict[str, Any]:
        body = await self._request("GET", f"/products/{product_id}.json")
        return self._expect_object(body, "product")

    async def update_product_tags(self, product_id: str | int, tags: list[str]) -> dict[str, Any]:
        # Shopify REST takes tags as a single comma-separated string.
        joined = ", ".join(tags)
        payload = {"product": {"id": product_id, "tags": joined}}
        body = await self._request("PUT", f"/products/{product_id}.json", json=payload)
        logger.info("Updated tags for product %s: %s", product_id, joined)
        return self._expect_object(body, "product")

    async def get_collections(self) -> list[dict[str, Any]]:
        body = await self._request("GET", "/collections.json")
        return self._expect_list(body, "collections")

    @staticmethod
    def build_smart_collection_rules(rule_keywords: list[str]) -> list[dict[str, str]]:
        return [
            {"column": "tag", "relation": "equals", "condition": keyword}
            for keyword in rule_keywords
        ]

    async def create_smart_collection(
        self,
        *,
        title: str,
        rule_keywords: list[str],
        description: str | None = None,
    ) -> dict[str, Any]:
        payload = {
            "collection": {
                "title": title,
                "body_html": description or "",
                "collection_type": "smart",
                "rules": self.build_smart_collection_rules(rule_keywords),
                "published": True,
            }
        }
        body = await self._request("POST", "/collections.json", json=payload)
        logger.info("Created smart collection: %s", title)
        return self._expect_object(body, "collection")

    async def get_product_metafields(self, product_id: str | int) -> list[dict[str, Any]]:
        body = await self._request("GET", f"/products/{product_id}/metafields.json")
        return self._expect_list(body, "metafields")

    async def update_product_metafield(
        self,
        product_id: str | int,
        *,
        namespace: str,
        key: str,
        value: Any,
        type: str = DEFAULT_METAFIELD_TYPE,
    ) -> dict[str, Any]:
        payload = {
            "metafield": {
                "namespace": namespace,
                "key": key,
                "value": str(value),
                "type": type,
            }
        }
        body = await self._request("POST", f"/products/{product_id}/metafields.json", json=payload)
        logger.info(
            "Updated metafield for product %s: %s.%s = %s",
            product_id,
            namespace,
            key,
            value,
        )
        return self._expect_object(body, "metafield")

    async def update_products_by_keyword(
        self,
        keyword: str,
        *,
        namespace: str,
        key: str,
        value: Any,
        type: str = DEFAULT_METAFIELD_TYPE,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Set one metafield on every product whose title contains ``keyword``.

        Matching is a case-insensitive substring test on the product title.
        Matches are updated one at a time with a fixed pause between items. A
        failed item is recorded and the loop moves on; it is never retried,
        and updates already applied are not rolled back.
        """
        products = await self.get_products(limit)
        needle = keyword.lower()
        matching = [
            product for product in products if needle in str(product.get("title") or "").lower()
        ]
        logger.info("Found %d products matching keyword: %s", len(matching), keyword)

        results: list[dict[str, Any]] = []
        for product in matching:
            product_id = product.get("id")
            try:
                metafield = await self.update_product_metafield(
                    product_id,
                    namespace=namespace,
                    key=key,
                    value=value,
                    type=type,
                )
            except ShopifyApiError as exc:
                results.append({"product_id": product_id, "success": False, "error": str(exc)})
            else:
                results.append({"product_id": product_id, "success": True, "metafield": metafield})
            await self._sleep(self._bulk_item_delay)

        return {"keyword": keyword, "total_products": len(matching), "results": results}

    async def test_connection(self) -> dict[str, Any]:
        try:
            body = await self._request("GET", "/shop.json")
        except ShopifyApiError as exc:
            logger.error("Connection test failed: %s", exc)
            return {"success": False, "error": str(exc)}
        return {"success": True, "shop": body.get("shop"), "message": "Connection successful"}

    @staticmethod
    def _expect_list(body: dict[str, Any], root_key: str) -> list[dict[str, Any]]:
        items = body.get(root_key)
        if not isinstance(items, list):
            raise ShopifyApiError(message=f"Shopify response is missing {root_key}")
        return items

    @staticmethod
    def _expect_object(body: dict[str, Any], root_key: str) -> dict[str, Any]:
        item = body.get(root_key)
        if not isinstance(item, dict):
            raise ShopifyApiError(message=f"Shopify response is missing {root_key}")
        return item

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not self._settings.SHOPIFY_STORE_DOMAIN or not self._settings.SHOPIFY_ACCESS_TOKEN:
            raise ShopifyApiError(
                message="Shopify store domain and access token must be configured",
                status_code=500,
            )

        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self._settings.SHOPIFY_ACCESS_TOKEN,
        }
        logger.info("Shopify API Request: %s %s", method, path)
        try:
            async with httpx.AsyncClient(
                base_url=self._settings.shopify_base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, params=params, json=json, headers=headers)
        except httpx.RequestError as exc:
            logger.error("Shopify API Request Error: %s %s: %s", method, path, exc)
            raise ShopifyApiError(message=f"Network error while calling Shopify: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "Shopify API Response Error: %s %s %s",
                response.status_code,
                path,
                response.text,
            )
            raise ShopifyApiError(
                message=f"Shopify API call failed ({response.status_code}): {response.text}",
                status_code=502,
                remote_status=response.status_code,
            )
        logger.info("Shopify API Response: %s %s", response.status_code, path)

        try:
            body = response.json()
        except ValueError as exc:
            raise ShopifyApiError(message="Shopify API returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise ShopifyApiError(message="Shopify API response must be a JSON object")

        await self._sleep(self._call_delay)
        return body
