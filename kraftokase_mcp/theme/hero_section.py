from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from html import escape
from typing import Any

HERO_TAGS = ("MagSafe", "Leather")
DEFAULT_HEADLINE = "Your Phone Deserves Better."
DEFAULT_SUBHEADLINE = "Explore curated, premium cases engineered for grip, style & performance."
DEFAULT_BADGE_TEXT = "Ships in 24H ⏱️ | COD Available"
DEFAULT_SECONDARY_CTA_LINK = "/collections/magsafe-leather-series"
FALLBACK_IMAGE_URL = (
    "https://images.unsplash.com/photo-1511707171634-5f897ff02aa9?w=1200&h=800&fit=crop&crop=center"
)
TRUST_INDICATORS = (
    ("🛡️", "Premium Protection"),
    ("🚚", "Free Shipping"),
    ("💎", "Lifetime Warranty"),
)

FALLBACK_PRODUCT: dict[str, Any] = {
    "id": "sample-1",
    "title": "Premium MagSafe Leather Case for iPhone 15 Pro",
    "handle": "premium-magsafe-leather-case-iphone-15-pro",
    "tags": ["MagSafe", "Leather", "iPhone 15", "Premium"],
    "images": [{"src": FALLBACK_IMAGE_URL}],
    "vendor": "Kraftokase",
    "price": "₹2,499",
}


def split_tags(tags: Any) -> list[str]:
    """Shopify REST returns tags as one comma-separated string; accept lists too."""
    if isinstance(tags, str):
        return [tag.strip() for tag in tags.split(",") if tag.strip()]
    if isinstance(tags, (list, tuple)):
        return [str(tag).strip() for tag in tags if str(tag).strip()]
    return []


def _has_images(product: dict[str, Any]) -> bool:
    images = product.get("images")
    return isinstance(images, list) and len(images) > 0


def select_hero_product(
    products: Iterable[dict[str, Any]],
    tags: Sequence[str] = HERO_TAGS,
) -> dict[str, Any] | None:
    products = list(products)
    wanted = [tag.lower() for tag in tags]
    for product in products:
        product_tags = [tag.lower() for tag in split_tags(product.get("tags"))]
        if any(want in product_tag for want in wanted for product_tag in product_tags):
            return product
    for product in products:
        if _has_images(product):
            return product
    return None


def _display_price(product: dict[str, Any]) -> str:
    # REST products carry prices on their variants.
    price = product.get("price")
    if not price:
        variants = product.get("variants")
        if isinstance(variants, list) and variants and isinstance(variants[0], dict):
            price = variants[0].get("price")
    return str(price) if price else "N/A"


def _first_image_src(product: dict[str, Any] | None) -> str:
    if product and _has_images(product):
        src = product["images"][0].get("src")
        if isinstance(src, str) and src:
            return src
    return FALLBACK_IMAGE_URL


_TRUST_LIQUID = "\n".join(
    f'          <div class="flex items-center"><span class="mr-2">{icon}</span>{label}</div>'
    for icon, label in TRUST_INDICATORS
)

_HERO_LIQUID = f"""{{% comment %}}
  Kraftokase Hero Section
  Dynamic hero section with live product data
{{% endcomment %}}

<div class="hero-section relative min-h-screen flex items-center justify-center overflow-hidden bg-gradient-to-br from-gray-900 via-gray-800 to-black">
  <div class="absolute inset-0 z-0">
    {{% if section.settings.background_image %}}
      <img src="{{{{ section.settings.background_image | img_url: 'master' }}}}" alt="{{{{ section.settings.background_image.alt | default: 'Kraftokase Hero Background' }}}}" class="w-full h-full object-cover opacity-40" loading="eager">
    {{% elsif section.settings.product_image %}}
      <img src="{{{{ section.settings.product_image | img_url: 'master' }}}}" alt="{{{{ section.settings.product_title | default: 'Kraftokase Product' }}}}" class="w-full h-full object-cover opacity-40" loading="eager">
    {{% else %}}
      <div class="w-full h-full bg-gradient-to-br from-blue-900 via-purple-900 to-indigo-900"></div>
    {{% endif %}}
    <div class="absolute inset-0 bg-black bg-opacity-50"></div>
  </div>

  <div class="relative z-10 container mx-auto px-4 sm:px-6 lg:px-8 text-center">
    <div class="max-w-4xl mx-auto">
      {{% if section.settings.show_badge %}}
        <div class="inline-flex items-center px-4 py-2 rounded-full bg-white bg-opacity-20 backdrop-blur-sm text-white text-sm font-medium mb-8">
          <span class="mr-2">🚀</span>
          {{{{ section.settings.badge_text | default: '{DEFAULT_BADGE_TEXT}' }}}}
        </div>
      {{% endif %}}

      <h1 class="text-4xl sm:text-5xl lg:text-6xl font-bold text-white mb-6 leading-tight">
        {{{{ section.settings.headline | default: '{DEFAULT_HEADLINE}' }}}}
      </h1>

      <p class="text-xl sm:text-2xl text-gray-200 mb-8 max-w-2xl mx-auto leading-relaxed">
        {{% if section.settings.product_title %}}
          {{{{ section.settings.product_title }}}}
        {{% else %}}
          {{{{ section.settings.subheadline | default: '{DEFAULT_SUBHEADLINE}' }}}}
        {{% endif %}}
      </p>

      <div class="flex flex-col sm:flex-row gap-4 justify-center items-center">
        {{% if section.settings.product_handle %}}
          <a href="/products/{{{{ section.settings.product_handle }}}}" class="inline-flex items-center px-8 py-4 bg-white text-gray-900 font-semibold rounded-lg shadow-lg">
            <span class="mr-2">🛍️</span>{{{{ section.settings.primary_cta | default: 'Shop Now' }}}}
          </a>
        {{% else %}}
          <a href="{{{{ section.settings.primary_cta_link | default: '/collections/all' }}}}" class="inline-flex items-center px-8 py-4 bg-white text-gray-900 font-semibold rounded-lg shadow-lg">
            <span class="mr-2">🛍️</span>{{{{ section.settings.primary_cta | default: 'Shop Collections' }}}}
          </a>
        {{% endif %}}
        <a href="{{{{ section.settings.secondary_cta_link | default: '{DEFAULT_SECONDARY_CTA_LINK}' }}}}" class="inline-flex items-center px-8 py-4 border-2 border-white text-white font-semibold rounded-lg">
          <span class="mr-2">✨</span>{{{{ section.settings.secondary_cta | default: 'See Bestsellers' }}}}
        </a>
      </div>

      {{% if section.settings.show_trust_indicators %}}
        <div class="mt-12 flex flex-wrap justify-center items-center gap-8 text-gray-300 text-sm">
{_TRUST_LIQUID}
        </div>
      {{% endif %}}
    </div>
  </div>

  {{% if section.settings.show_scroll_indicator %}}
    <div class="absolute bottom-8 left-1/2 transform -translate-x-1/2 z-10">
      <div class="animate-bounce">
        <svg class="w-6 h-6 text-white" fill="none" stroke="currentColor" viewBox="0 0 24 24">
          <path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" d="M19 14l-7 7m0 0l-7-7m7 7V3"></path>
        </svg>
      </div>
    </div>
  {{% endif %}}
</div>

<style>
  .hero-section {{
    font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
  }}
  @media (max-width: 640px) {{
    .hero-section {{ min-height: 80vh; }}
  }}
</style>"""


def render_hero_liquid() -> str:
    return _HERO_LIQUID


def _setting(setting_type: str, setting_id: str, label: str, default: Any = None) -> dict[str, Any]:
    setting: dict[str, Any] = {"type": setting_type, "id": setting_id, "label": label}
    if default is not None:
        setting["default"] = default
    return setting


def _header(content: str) -> dict[str, str]:
    return {"type": "header", "content": content}


def section_schema() -> dict[str, Any]:
    return {
        "name": "Hero Section",
        "tag": "section",
        "class": "hero-section",
        "settings": [
            _header("Content Settings"),
            _setting("text", "headline", "Main Headline", DEFAULT_HEADLINE),
            _setting("textarea", "subheadline", "Subheadline", DEFAULT_SUBHEADLINE),
            _header("Product Settings"),
            _setting("text", "product_title", "Product Title (overrides subheadline)"),
            _setting("image_picker", "product_image", "Product Background Image"),
            _setting("text", "product_handle", "Product Handle (for CTA link)"),
            _header("Call-to-Action"),
            _setting("text", "primary_cta", "Primary CTA Text", "Shop Now"),
            _setting("url", "primary_cta_link", "Primary CTA Link (if no product)"),
            _setting("text", "secondary_cta", "Secondary CTA Text", "See Bestsellers"),
            _setting("url", "secondary_cta_link", "Secondary CTA Link", DEFAULT_SECONDARY_CTA_LINK),
            _header("Background"),
            _setting("image_picker", "background_image", "Background Image (overrides product image)"),
            _header("Display Options"),
            _setting("checkbox", "show_badge", "Show Badge", True),
            _setting("text", "badge_text", "Badge Text", DEFAULT_BADGE_TEXT),
            _setting("checkbox", "show_trust_indicators", "Show Trust Indicators", True),
            _setting("checkbox", "show_scroll_indicator", "Show Scroll Indicator", True),
        ],
        "presets": [{"name": "Hero Section", "category": "Custom Sections"}],
    }


def render_section_schema() -> str:
    return json.dumps(section_schema(), indent=2, ensure_ascii=False)


def build_hero_section(product: dict[str, Any] | None) -> dict[str, Any]:
    liquid = render_hero_liquid()
    schema = render_section_schema()
    complete = f"{liquid}\n\n{{% comment %}} Section Schema {{% endcomment %}}\n{{% schema %}}\n{schema}\n{{% endschema %}}\n"
    return {
        "liquid_code": liquid,
        "schema_code": schema,
        "complete_section": complete,
        "hero_product": product,
    }


def render_preview_html(product: dict[str, Any] | None) -> str:
    source = product or FALLBACK_PRODUCT
    title = escape(str(source.get("title") or FALLBACK_PRODUCT["title"]))
    handle = escape(str(source.get("handle") or FALLBACK_PRODUCT["handle"]))
    image = escape(_first_image_src(source))
    tags = escape(", ".join(split_tags(source.get("tags"))) or "None")
    price = escape(_display_price(source))
    vendor = escape(str(source.get("vendor") or "N/A"))
    trust = "\n".join(
        f'          <div class="flex items-center"><span class="mr-2">{icon}</span>{label}</div>'
        for icon, label in TRUST_INDICATORS
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Kraftokase Hero Section Preview</title>
  <script src="https://cdn.tailwindcss.com"></script>
  <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap" rel="stylesheet">
  <style>body {{ font-family: 'Inter', sans-serif; }}</style>
</head>
<body>
  <div class="hero-section relative min-h-screen flex items-center justify-center overflow-hidden bg-gradient-to-br from-gray-900 via-gray-800 to-black">
    <div class="absolute inset-0 z-0">
      <img src="{image}" alt="{title}" class="w-full h-full object-cover opacity-40" loading="eager">
      <div class="absolute inset-0 bg-black bg-opacity-50"></div>
    </div>
    <div class="relative z-10 container mx-auto px-4 sm:px-6 lg:px-8 text-center">
      <div class="max-w-4xl mx-auto">
        <div class="inline-flex items-center px-4 py-2 rounded-full bg-white bg-opacity-20 text-white text-sm font-medium mb-8">
          <span class="mr-2">🚀</span>{escape(DEFAULT_BADGE_TEXT)}
        </div>
        <h1 class="text-4xl sm:text-5xl lg:text-6xl font-bold text-white mb-6 leading-tight">{escape(DEFAULT_HEADLINE)}</h1>
        <p class="text-xl sm:text-2xl text-gray-200 mb-8 max-w-2xl mx-auto leading-relaxed">{title}</p>
        <div class="flex flex-col sm:flex-row gap-4 justify-center items-center">
          <a href="/products/{handle}" class="inline-flex items-center px-8 py-4 bg-white text-gray-900 font-semibold rounded-lg shadow-lg"><span class="mr-2">🛍️</span>Shop Now</a>
          <a href="{DEFAULT_SECONDARY_CTA_LINK}" class="inline-flex items-center px-8 py-4 border-2 border-white text-white font-semibold rounded-lg"><span class="mr-2">✨</span>See Bestsellers</a>
        </div>
        <div class="mt-12 flex flex-wrap justify-center items-center gap-8 text-gray-300 text-sm">
{trust}
        </div>
      </div>
    </div>
  </div>
  <div class="bg-gray-100 p-8">
    <div class="max-w-4xl mx-auto bg-white p-6 rounded-lg shadow">
      <h2 class="text-2xl font-bold mb-4">Hero Section Preview</h2>
      <ul class="text-sm space-y-1">
        <li><strong>Title:</strong> {title}</li>
        <li><strong>Handle:</strong> {handle}</li>
        <li><strong>Image:</strong> {image}</li>
        <li><strong>Tags:</strong> {tags}</li>
        <li><strong>Price:</strong> {price}</li>
        <li><strong>Vendor:</strong> {vendor}</li>
      </ul>
    </div>
  </div>
</body>
</html>
"""
