from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kraftokase_mcp.theme.index_template import (  # noqa: E402
    INDEX_TEMPLATE_PATH,
    SECTION_ORDER,
    render_index_template,
    write_theme_file,
)


def main(theme_dir: Path) -> None:
    path = write_theme_file(theme_dir, INDEX_TEMPLATE_PATH, render_index_template())
    print(f"Index template saved to: {path}")
    for position, section in enumerate(SECTION_ORDER, start=1):
        print(f"{position}. {section}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Write templates/index.json with the hero section first.")
    parser.add_argument("--theme-dir", type=Path, required=True, help="Theme directory to write templates/ into.")
    args = parser.parse_args()
    main(args.theme_dir)
