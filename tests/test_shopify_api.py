from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from kraftokase_mcp.shopify_api import ShopifyApiClient, ShopifyApiError

BASE_PATH = "/admin/api/2024-01"


def _client(settings, handler, sleeps: list[float] | None = None) -> ShopifyApiClient:
    client = ShopifyApiClient(settings, transport=httpx.MockTransport(handler))

    async def fake_sleep(seconds: float) -> None:
        if sleeps is not None:
            sleeps.append(seconds)

    client._sleep = fake_sleep  # type: ignore[method-assign]
    return client


def test_get_products_targets_versioned_path_with_token_and_fields(settings):
    observed: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        observed.append(request)
        return httpx.Response(200, json={"products": [{"id": 1, "title": "Red Case"}]})

    client = _client(settings, handler)
    products = asyncio.run(client.get_products(10))

    assert products == [{"id": 1, "title": "Red Case"}]
    request = observed[0]
    assert request.url.host == "kraftokase-test.myshopify.com"
    assert request.url.path == f"{BASE_PATH}/products.json"
    assert request.url.params["limit"] == "10"
    assert "handle" in request.url.params["fields"].split(",")
    assert request.headers["X-Shopify-Access-Token"] == "shpat_test_token"


def test_get_products_uses_default_batch_size(settings):
    observed: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        observed.append(request)
        return httpx.Response(200, json={"products": []})

    asyncio.run(_client(settings, handler).get_products())

    assert observed[0].url.params["limit"] == "250"


def test_update_product_tags_sends_comma_joined_string(settings):
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PUT"
        assert request.url.path == f"{BASE_PATH}/products/42.json"
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"product": {"id": 42, "tags": "MagSafe, Leather"}})

    product = asyncio.run(_client(settings, handler).update_product_tags("42", ["MagSafe", "Leather", "iPhone 15"]))

    assert product["id"] == 42
    assert bodies == [{"product": {"id": "42", "tags": "MagSafe, Leather, iPhone 15"}}]


def test_create_smart_collection_maps_each_keyword_to_tag_rule(settings):
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"collection": {"id": 7, "title": "MagSafe Cases"}})

    collection = asyncio.run(
        _client(settings, handler).create_smart_collection(title="MagSafe Cases", rule_keywords=["MagSafe"])
    )

    assert collection["id"] == 7
    sent = bodies[0]["collection"]
    assert sent["rules"] == [{"column": "tag", "relation": "equals", "condition": "MagSafe"}]
    assert sent["collection_type"] == "smart"
    assert sent["published"] is True
    assert sent["body_html"] == ""


def test_update_product_metafield_stringifies_value_and_defaults_type(settings):
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == f"{BASE_PATH}/products/5/metafields.json"
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"metafield": {"id": 99}})

    metafield = asyncio.run(
        _client(settings, handler).update_product_metafield(5, namespace="custom", key="material", value=12)
    )

    assert metafield == {"id": 99}
    assert bodies[0]["metafield"] == {
        "namespace": "custom",
        "key": "material",
        "value": "12",
        "type": "single_line_text_field",
    }


def test_remote_error_carries_remote_status(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"errors": "Not Found"})

    with pytest.raises(ShopifyApiError) as exc_info:
        asyncio.run(_client(settings, handler).get_product(123))

    assert exc_info.value.remote_status == 404
    assert "404" in str(exc_info.value)


def test_transport_error_is_raised_without_remote_status(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ShopifyApiError, match="Network error while calling Shopify") as exc_info:
        asyncio.run(_client(settings, handler).get_collections())

    assert exc_info.value.remote_status is None


def test_fixed_delay_follows_successful_calls_only(settings_factory):
    settings = settings_factory(SHOPIFY_CALL_DELAY_SECONDS=0.5)
    sleeps: list[float] = []
    responses = iter(
        [
            httpx.Response(200, json={"collections": []}),
            httpx.Response(500, text="boom"),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    client = _client(settings, handler, sleeps)
    asyncio.run(client.get_collections())
    with pytest.raises(ShopifyApiError):
        asyncio.run(client.get_collections())

    assert sleeps == [0.5]


def test_missing_configuration_fails_before_any_request(settings_factory):
    settings = settings_factory(SHOPIFY_ACCESS_TOKEN=None)
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(ShopifyApiError, match="must be configured"):
        asyncio.run(_client(settings, handler).get_products())
    assert calls == []


def test_bulk_update_matches_titles_case_insensitively_and_continues_past_failures(settings_factory):
    settings = settings_factory(SHOPIFY_BULK_ITEM_DELAY_SECONDS=1.0)
    sleeps: list[float] = []
    attempted: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/products.json"):
            return httpx.Response(
                200,
                json={
                    "products": [
                        {"id": 1, "title": "Red Case"},
                        {"id": 2, "title": "red wallet"},
                        {"id": 3, "title": "Blue Case"},
                    ]
                },
            )
        attempted.append(request.url.path)
        if request.url.path == f"{BASE_PATH}/products/1/metafields.json":
            return httpx.Response(422, json={"errors": {"value": ["is invalid"]}})
        return httpx.Response(201, json={"metafield": {"id": 200, "owner_id": 2}})

    client = _client(settings, handler, sleeps)
    result = asyncio.run(
        client.update_products_by_keyword("red", namespace="custom", key="colour", value="red")
    )

    assert result["keyword"] == "red"
    assert result["total_products"] == 2
    assert attempted == [
        f"{BASE_PATH}/products/1/metafields.json",
        f"{BASE_PATH}/products/2/metafields.json",
    ]
    first, second = result["results"]
    assert first["product_id"] == 1
    assert first["success"] is False
    assert "422" in first["error"]
    assert second == {"product_id": 2, "success": True, "metafield": {"id": 200, "owner_id": 2}}
    assert sleeps.count(1.0) == 2


def test_bulk_update_with_no_matches_makes_no_updates(settings):
    attempted: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/products.json"):
            return httpx.Response(200, json={"products": [{"id": 3, "title": "Blue Case"}]})
        attempted.append(request.url.path)
        return httpx.Response(201, json={"metafield": {}})

    result = asyncio.run(
        _client(settings, handler).update_products_by_keyword("red", namespace="custom", key="k", value="v")
    )

    assert result == {"keyword": "red", "total_products": 0, "results": []}
    assert attempted == []


def test_test_connection_reports_failure_without_raising(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"errors": "[API] Invalid API key or access token"})

    result = asyncio.run(_client(settings, handler).test_connection())

    assert result["success"] is False
    assert "401" in result["error"]


def test_test_connection_returns_shop(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == f"{BASE_PATH}/shop.json"
        return httpx.Response(200, json={"shop": {"name": "Kraftokase"}})

    result = asyncio.run(_client(settings, handler).test_connection())

    assert result == {"success": True, "shop": {"name": "Kraftokase"}, "message": "Connection successful"}
