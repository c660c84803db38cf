from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_CACHE_TTL_SECONDS = 900
DEFAULT_MODEL_PROBE_CONCURRENCY = 5
MAX_MODEL_PROBE_CONCURRENCY = 20


class Settings(BaseSettings):
    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    cors_allow_origins: list[str] = ["*"]

    # Cache store
    database_url: str = "sqlite:///./gift_resolver.db"
    cache_enabled: bool = True
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS

    # Upstream sources
    changes_api_base: str = "https://api.changes.tg"
    changes_cdn_base: str = "https://cdn.changes.tg"
    telegram_nft_base: str = "https://t.me/nft"
    poso_api_base: str = "https://poso.see.tg"
    poso_tgauth: str = ""

    # Scraper
    scraper_user_agent: str = "Mozilla/5.0 (compatible; gift-resolver/1.0)"
    request_timeout: float = 12.0
    page_max_bytes: int = 2 << 20
    directory_max_bytes: int = 5 << 20
    api_max_bytes: int = 1 << 20

    # Resolution
    model_probe_concurrency: int = DEFAULT_MODEL_PROBE_CONCURRENCY
    title_directory_ttl_seconds: int = 6 * 3600
    supply_scan_limit: int = 10

    # Log
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "protected_namespaces": (),
    }

    @field_validator("cache_ttl_seconds")
    @classmethod
    def _default_ttl(cls, v: int) -> int:
        return v if v > 0 else DEFAULT_CACHE_TTL_SECONDS

    @field_validator("model_probe_concurrency")
    @classmethod
    def _clamp_concurrency(cls, v: int) -> int:
        if v <= 0:
            return DEFAULT_MODEL_PROBE_CONCURRENCY
        return min(v, MAX_MODEL_PROBE_CONCURRENCY)


settings = Settings()
