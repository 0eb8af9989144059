from __future__ import annotations

import json

from kraftokase_mcp.theme.hero_section import (
    FALLBACK_PRODUCT,
    build_hero_section,
    render_preview_html,
    section_schema,
    select_hero_product,
    split_tags,
)
from kraftokase_mcp.theme.index_template import (
    INDEX_TEMPLATE_PATH,
    SECTION_ORDER,
    build_index_template,
    render_index_template,
    write_theme_file,
)


def test_split_tags_accepts_string_and_list():
    assert split_tags("MagSafe, Leather ,, iPhone 15") == ["MagSafe", "Leather", "iPhone 15"]
    assert split_tags(["MagSafe", " "]) == ["MagSafe"]
    assert split_tags(None) == []


def test_select_hero_product_prefers_tag_match():
    products = [
        {"id": 1, "title": "Plain", "tags": "basic", "images": [{"src": "a.jpg"}]},
        {"id": 2, "title": "Magnetic", "tags": "magsafe-compatible, premium", "images": []},
    ]

    assert select_hero_product(products)["id"] == 2


def test_select_hero_product_falls_back_to_first_with_images():
    products = [
        {"id": 1, "title": "No images", "tags": "basic", "images": []},
        {"id": 2, "title": "Pictured", "tags": "basic", "images": [{"src": "b.jpg"}]},
    ]

    assert select_hero_product(products)["id"] == 2
    assert select_hero_product([{"id": 3, "tags": "", "images": []}]) is None


def test_build_hero_section_appends_schema_block():
    result = build_hero_section(FALLBACK_PRODUCT)

    assert result["complete_section"].startswith(result["liquid_code"])
    assert "{% schema %}" in result["complete_section"]
    assert "{% endschema %}" in result["complete_section"]
    assert "{{ section.settings.headline | default: 'Your Phone Deserves Better.' }}" in result["liquid_code"]
    assert json.loads(result["schema_code"]) == section_schema()
    assert result["hero_product"] is FALLBACK_PRODUCT


def test_section_schema_setting_ids_are_unique():
    ids = [setting["id"] for setting in section_schema()["settings"] if "id" in setting]

    assert len(ids) == len(set(ids))
    assert "product_handle" in ids


def test_preview_html_escapes_product_data():
    product = {"id": 9, "title": "<script>x</script>", "handle": "safe", "tags": ["A&B"], "images": []}

    html = render_preview_html(product)

    assert "<script>x</script>" not in html
    assert "&lt;script&gt;" in html
    assert "A&amp;B" in html
    assert "/products/safe" in html


def test_index_template_orders_sections_with_hero_first():
    template = build_index_template({"title": "Live Case", "handle": "live-case"})

    assert template["order"] == SECTION_ORDER
    assert set(template["sections"]) == set(SECTION_ORDER)
    assert template["sections"]["hero_product"]["settings"]["product_handle"] == "live-case"


def test_write_theme_file_creates_directories(tmp_path):
    path = write_theme_file(tmp_path / "theme", INDEX_TEMPLATE_PATH, render_index_template())

    assert path == tmp_path / "theme" / "templates" / "index.json"
    assert json.loads(path.read_text(encoding="utf-8"))["order"][0] == "hero_product"


def test_preview_html_lists_price_and_vendor():
    fallback_html = render_preview_html(FALLBACK_PRODUCT)
    assert "<strong>Price:</strong> ₹2,499" in fallback_html
    assert "<strong>Vendor:</strong> Kraftokase" in fallback_html

    live_html = render_preview_html({"title": "Live", "handle": "live", "variants": [{"price": "19.99"}]})
    assert "<strong>Price:</strong> 19.99" in live_html
    assert "<strong>Vendor:</strong> N/A" in live_html
