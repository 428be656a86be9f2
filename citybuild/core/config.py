from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ─────────── APP ───────────
    app_name: str = "CityBuild Marketplace"
    environment: str = "dev"
    log_level: str = "INFO"

    # ─────────── API ───────────
    api_prefix: str = "/api/v1"
    request_id_header: str = "X-Request-Id"
    api_base_url: str = "http://localhost:8000"

    # ─────────── STORAGE ───────────
    database_url: str = "sqlite:///./citybuild.db"
    storage_backend: Literal["memory", "sql", "unavailable"] = "memory"
    seed_on_startup: bool = True
    notification_retention_per_user: int = 100

    # ─────────── MOCK API ───────────
    mock_api_latency_scale: float = 1.0
    upload_max_bytes: int = 10 * 1024 * 1024

    # ─────────── JWT / AUTH ───────────
    jwt_secret_key: str = "citybuild-dev-secret"
    jwt_algorithm: str = "HS256"
    jwt_access_token_minutes: int = 1440  # 24 hours

    @property
    def is_dev(self) -> bool:
        return self.environment.lower() in {"dev", "development", "local", "test"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
