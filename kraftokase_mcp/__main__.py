from __future__ import annotations

import uvicorn

from kraftokase_mcp.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("kraftokase_mcp.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
