from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Scripts run from the repo root read the same .env as the server.
_project_root = Path(__file__).resolve().parents[1]
load_dotenv(_project_root / ".env", override=False)

_REQUIRED_SETTINGS = ("SHOPIFY_STORE_DOMAIN", "SHOPIFY_ACCESS_TOKEN", "MCP_API_KEY")


class Settings(BaseSettings):
    SHOPIFY_STORE_DOMAIN: str | None = None
    SHOPIFY_ACCESS_TOKEN: str | None = None
    SHOPIFY_API_VERSION: str = "2024-01"
    SHOPIFY_REQUEST_TIMEOUT_SECONDS: float = 30.0
    SHOPIFY_CALL_DELAY_SECONDS: float = 0.5
    SHOPIFY_BULK_ITEM_DELAY_SECONDS: float = 1.0
    DEFAULT_PRODUCT_LIMIT: int = 250

    MCP_API_KEY: str | None = None
    MCP_GATEWAY_URL: str = "http://localhost:3000"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    ALLOWED_ORIGINS: str = "*"

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    @field_validator("SHOPIFY_STORE_DOMAIN")
    @classmethod
    def normalize_store_domain(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip().lower()
        for prefix in ("https://", "http://"):
            if cleaned.startswith(prefix):
                cleaned = cleaned[len(prefix):]
        return cleaned.rstrip("/") or None

    @field_validator("SHOPIFY_CALL_DELAY_SECONDS", "SHOPIFY_BULK_ITEM_DELAY_SECONDS")
    @classmethod
    def validate_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("Shopify call delays must be zero or positive")
        return value

    @field_validator("DEFAULT_PRODUCT_LIMIT")
    @classmethod
    def validate_default_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError("DEFAULT_PRODUCT_LIMIT must be at least 1")
        return value

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    @property
    def shopify_base_url(self) -> str:
        return f"https://{self.SHOPIFY_STORE_DOMAIN}/admin/api/{self.SHOPIFY_API_VERSION}"

    @property
    def allowed_origins(self) -> list[str]:
        origins = [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]
        return origins or ["*"]

    def missing_required(self) -> list[str]:
        return [name for name in _REQUIRED_SETTINGS if not getattr(self, name)]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def get_settings() -> Settings:
    return Settings()
