from __future__ import annotations

from typing import Any

import httpx

from kraftokase_mcp.schemas import validate_payload


class GatewayClientError(RuntimeError):
    def __init__(self, *, status_code: int, error: str, message: str) -> None:
        super().__init__(f"{error}: {message}")
        self.status_code = status_code
        self.error = error
        self.message = message


class McpGatewayClient:
    """Async client for the gateway's own HTTP surface.

    Used by the theme scripts and the smoke check. Responses are unwrapped
    from the ``{success, data}`` envelope; error envelopes become
    ``GatewayClientError``.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def check_health(self) -> dict[str, Any]:
        # /health answers 503 with a useful body, so it is returned as is.
        response = await self._send("GET", "/health")
        return self._decode(response)

    async def get_products(self, limit: int = 250) -> list[dict[str, Any]]:
        data = await self._call("GET", "/products", params={"limit": limit})
        return data["products"]

    async def get_product(self, product_id: str | int) -> dict[str, Any]:
        data = await self._call("GET", f"/products/{product_id}")
        return data["product"]

    async def update_product_tags(self, product_id: str | int, tags: list[str]) -> dict[str, Any]:
        payload = validate_payload("updateProductTags", {"tags": tags})
        data = await self._call("PUT", f"/products/{product_id}/tags", json=payload.model_dump())
        return data["product"]

    async def get_product_metafields(self, product_id: str | int) -> list[dict[str, Any]]:
        data = await self._call("GET", f"/products/{product_id}/metafields")
        return data["metafields"]

    async def update_product_metafield(
        self,
        product_id: str | int,
        *,
        namespace: str,
        key: str,
        value: str,
        type: str = "single_line_text_field",
    ) -> dict[str, Any]:
        payload = validate_payload(
            "updateMetafield",
            {"namespace": namespace, "key": key, "value": value, "type": type},
        )
        data = await self._call(
            "POST",
            f"/products/{product_id}/metafields",
            json=payload.model_dump(),
        )
        return data["metafield"]

    async def get_collections(self) -> list[dict[str, Any]]:
        data = await self._call("GET", "/collections")
        return data["collections"]

    async def create_smart_collection(
        self,
        *,
        title: str,
        rule_keywords: list[str],
        description: str | None = None,
    ) -> dict[str, Any]:
        payload = validate_payload(
            "createCollection",
            {"title": title, "rule_keywords": rule_keywords, "description": description},
        )
        data = await self._call("POST", "/collections", json=payload.model_dump(exclude_none=True))
        return data["collection"]

    async def bulk_update_products_by_keyword(
        self,
        keyword: str,
        *,
        namespace: str,
        key: str,
        value: str,
        type: str = "single_line_text_field",
    ) -> dict[str, Any]:
        payload = validate_payload(
            "updateMetafield",
            {"namespace": namespace, "key": key, "value": value, "type": type},
        )
        return await self._call(
            "POST",
            "/sync/products/metafield",
            params={"keyword": keyword},
            json=payload.model_dump(),
        )

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise GatewayClientError(
                status_code=response.status_code,
                error="Invalid Response",
                message="Gateway returned invalid JSON",
            ) from exc
        if not isinstance(body, dict):
            raise GatewayClientError(
                status_code=response.status_code,
                error="Invalid Response",
                message="Gateway response must be a JSON object",
            )
        return body

    async def _call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = await self._send(method, path, params=params, json=json)
        body = self._decode(response)
        if response.status_code >= 400 or not body.get("success"):
            raise GatewayClientError(
                status_code=response.status_code,
                error=str(body.get("error") or "Gateway Error"),
                message=str(body.get("message") or response.text),
            )
        data = body.get("data")
        if not isinstance(data, dict):
            raise GatewayClientError(
                status_code=response.status_code,
                error="Invalid Response",
                message="Gateway response is missing data",
            )
        return data

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["X-API-Key"] = self._api_key
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                return await client.request(method, path, params=params, json=json, headers=headers)
        except httpx.RequestError as exc:
            raise GatewayClientError(
                status_code=503,
                error="Network Error",
                message=f"Could not reach the gateway at {self._base_url}: {exc}",
            ) from exc
