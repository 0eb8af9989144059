import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("SHOPIFY_STORE_DOMAIN", "kraftokase-test.myshopify.com")
os.environ.setdefault("SHOPIFY_ACCESS_TOKEN", "shpat_test_token")
os.environ.setdefault("MCP_API_KEY", "test_api_key")
os.environ.setdefault("SHOPIFY_CALL_DELAY_SECONDS", "0")
os.environ.setdefault("SHOPIFY_BULK_ITEM_DELAY_SECONDS", "0")
os.environ.setdefault("LOG_DIR", "")

from kraftokase_mcp.config import Settings
from kraftokase_mcp.main import create_app
from kraftokase_mcp.shopify_api import ShopifyApiClient

API_KEY = "test_api_key"
AUTH_HEADERS = {"X-API-Key": API_KEY}


def make_settings(**overrides) -> Settings:
    values = {
        "SHOPIFY_STORE_DOMAIN": "kraftokase-test.myshopify.com",
        "SHOPIFY_ACCESS_TOKEN": "shpat_test_token",
        "MCP_API_KEY": API_KEY,
        "SHOPIFY_CALL_DELAY_SECONDS": 0,
        "SHOPIFY_BULK_ITEM_DELAY_SECONDS": 0,
        "LOG_DIR": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def settings_factory():
    return make_settings


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def shopify_api(settings) -> ShopifyApiClient:
    return ShopifyApiClient(settings)


@pytest.fixture()
def api_client(settings, shopify_api):
    app = create_app(settings=settings, shopify_api=shopify_api)
    with TestClient(app) as client:
        yield client
