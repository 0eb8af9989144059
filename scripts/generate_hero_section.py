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
from kraftokase_mcp.theme.hero_section import (  # noqa: E402
    FALLBACK_PRODUCT,
    build_hero_section,
    render_preview_html,
    select_hero_product,
    split_tags,
)
from kraftokase_mcp.theme.index_template import HERO_SECTION_PATH, write_theme_file  # noqa: E402


async def _fetch_hero_product(limit: int) -> dict | None:
    settings = get_settings()
    client = McpGatewayClient(base_url=settings.MCP_GATEWAY_URL, api_key=settings.MCP_API_KEY)
    try:
        products = await client.get_products(limit)
    except GatewayClientError as exc:
        print(f"Could not fetch products from the gateway: {exc}")
        return None
    return select_hero_product(products)


def main(theme_dir: Path, preview_path: Path, limit: int, use_fallback: bool) -> None:
    product = None if use_fallback else asyncio.run(_fetch_hero_product(limit))
    if product is None:
        print("Using fallback hero product")
        product = FALLBACK_PRODUCT

    result = build_hero_section(product)
    section_path = write_theme_file(theme_dir, HERO_SECTION_PATH, result["complete_section"])
    preview_path.parent.mkdir(parents=True, exist_ok=True)
    preview_path.write_text(render_preview_html(product), encoding="utf-8")

    print(f"Hero section saved to: {section_path}")
    print(f"Preview HTML saved to: {preview_path}")
    print(f"Hero product: {product.get('title')} (id={product.get('id')}, handle={product.get('handle')})")
    print(f"Tags: {', '.join(split_tags(product.get('tags'))) or 'None'}")
    print(f"Liquid code length: {len(result['liquid_code'])} characters")
    print(f"Schema code length: {len(result['schema_code'])} characters")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate the storefront hero section from live product data.")
    parser.add_argument("--theme-dir", type=Path, required=True, help="Theme directory to write sections/ into.")
    parser.add_argument(
        "--preview",
        type=Path,
        default=Path("hero-section-preview.html"),
        help="Where to write the standalone preview HTML.",
    )
    parser.add_argument("--limit", type=int, default=50, help="Number of products to consider.")
    parser.add_argument("--fallback", action="store_true", help="Skip the gateway and use the sample product.")
    args = parser.parse_args()
    main(args.theme_dir, args.preview, args.limit, args.fallback)
