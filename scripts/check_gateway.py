from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kraftokase_mcp.config import get_settings  # noqa: E402
from kraftokase_mcp.gateway_client import GatewayClientError, McpGatewayClient  # noqa: E402


async def _run(limit: int) -> int:
    settings = get_settings()
    client = McpGatewayClient(base_url=settings.MCP_GATEWAY_URL, api_key=settings.MCP_API_KEY)
    try:
        health = await client.check_health()
        print(f"Health: {health.get('status')} (shopify_connection={health.get('shopify_connection')})")

        products = await client.get_products(limit)
        print(f"Products: {len(products)}")
        if products:
            sample = products[0]
            print(f"Sample product: id={sample.get('id')} title={sample.get('title')} tags={sample.get('tags')}")

        collections = await client.get_collections()
        print(f"Collections: {len(collections)}")
    except GatewayClientError as exc:
        print(f"Gateway check failed ({exc.status_code}): {exc}")
        return 1
    print("Gateway check passed")
    return 0


def main(limit: int) -> None:
    raise SystemExit(asyncio.run(_run(limit)))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke-test a running gateway: health, products, collections.")
    parser.add_argument("--limit", type=int, default=5)
    args = parser.parse_args()
    main(args.limit)
