from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from kraftokase_mcp.gateway_client import GatewayClientError, McpGatewayClient
from kraftokase_mcp.schemas import PayloadValidationError


def _client(handler) -> McpGatewayClient:
    return McpGatewayClient(
        base_url="https://mcp.example/",
        api_key="test_api_key",
        transport=httpx.MockTransport(handler),
    )


def test_get_products_unwraps_envelope_and_sends_key():
    observed: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        observed.append(request)
        return httpx.Response(
            200,
            json={"success": True, "data": {"products": [{"id": 1}], "count": 1, "limit": 5}},
        )

    products = asyncio.run(_client(handler).get_products(5))

    assert products == [{"id": 1}]
    assert observed[0].url.path == "/products"
    assert observed[0].url.params["limit"] == "5"
    assert observed[0].headers["X-API-Key"] == "test_api_key"


def test_error_envelope_raises_gateway_client_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404,
            json={"success": False, "error": "Product not found", "message": "The specified product was not found"},
        )

    with pytest.raises(GatewayClientError) as exc_info:
        asyncio.run(_client(handler).get_product(999))

    assert exc_info.value.status_code == 404
    assert exc_info.value.error == "Product not found"


def test_invalid_payload_is_rejected_before_sending():
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"success": True, "data": {}})

    with pytest.raises(PayloadValidationError):
        asyncio.run(_client(handler).update_product_metafield(1, namespace="custom", key="k", value="v", type="color"))
    assert calls == []


def test_bulk_update_sends_keyword_as_query_param():
    observed: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        observed.append(request)
        return httpx.Response(
            200,
            json={"success": True, "data": {"keyword": "red", "total_products": 0, "results": [], "message": "done"}},
        )

    result = asyncio.run(
        _client(handler).bulk_update_products_by_keyword("red leather", namespace="custom", key="colour", value="red")
    )

    assert result["keyword"] == "red"
    request = observed[0]
    assert request.url.path == "/sync/products/metafield"
    assert request.url.params["keyword"] == "red leather"
    assert json.loads(request.content) == {
        "namespace": "custom",
        "key": "colour",
        "value": "red",
        "type": "single_line_text_field",
    }


def test_create_smart_collection_omits_missing_description():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"success": True, "data": {"collection": {"id": 3}, "message": "ok"}})

    collection = asyncio.run(_client(handler).create_smart_collection(title="MagSafe", rule_keywords=["MagSafe"]))

    assert collection == {"id": 3}
    assert bodies == [{"title": "MagSafe", "rule_keywords": ["MagSafe"]}]


def test_check_health_returns_unhealthy_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"status": "unhealthy", "missing_variables": ["MCP_API_KEY"]})

    health = asyncio.run(_client(handler).check_health())

    assert health["status"] == "unhealthy"


def test_unreachable_gateway_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(GatewayClientError, match="Could not reach the gateway"):
        asyncio.run(_client(handler).get_collections())
