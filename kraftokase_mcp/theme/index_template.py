from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from kraftokase_mcp.theme.hero_section import (
    DEFAULT_BADGE_TEXT,
    DEFAULT_HEADLINE,
    DEFAULT_SECONDARY_CTA_LINK,
    DEFAULT_SUBHEADLINE,
    FALLBACK_PRODUCT,
)

INDEX_TEMPLATE_PATH = "templates/index.json"
HERO_SECTION_PATH = "sections/hero-product.liquid"
SECTION_ORDER = ["hero_product", "featured_collections", "trust_block", "newsletter_signup"]


def build_index_template(hero_product: dict[str, Any] | None = None) -> dict[str, Any]:
    product = hero_product or FALLBACK_PRODUCT
    return {
        "sections": {
            "hero_product": {
                "type": "hero-product",
                "settings": {
                    "headline": DEFAULT_HEADLINE,
                    "subheadline": DEFAULT_SUBHEADLINE,
                    "product_title": product.get("title"),
                    "product_handle": product.get("handle"),
                    "primary_cta": "Shop Now",
                    "secondary_cta": "See Bestsellers",
                    "secondary_cta_link": DEFAULT_SECONDARY_CTA_LINK,
                    "show_badge": True,
                    "badge_text": DEFAULT_BADGE_TEXT,
                    "show_trust_indicators": True,
                    "show_scroll_indicator": True,
                },
            },
            "featured_collections": {
                "type": "featured-collections",
                "settings": {
                    "title": "Shop by Category",
                    "subtitle": "Find the perfect case for your device",
                },
            },
            "trust_block": {
                "type": "trust-block",
                "settings": {"title": "Why Choose Kraftokase?", "show_trust_indicators": True},
            },
            "newsletter_signup": {
                "type": "newsletter-signup",
                "settings": {
                    "title": "Stay Updated",
                    "subtitle": "Get notified about new products and exclusive offers",
                },
            },
        },
        "order": list(SECTION_ORDER),
    }


def render_index_template(hero_product: dict[str, Any] | None = None) -> str:
    return json.dumps(build_index_template(hero_product), indent=2, ensure_ascii=False) + "\n"


def write_theme_file(theme_dir: str | Path, relative_path: str, content: str) -> Path:
    target = Path(theme_dir) / relative_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target
