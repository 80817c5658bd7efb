# backend/automarket/config.py

from functools import lru_cache
from pathlib import Path

from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # project root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/automarket.db"
    redis_url: str = "redis://localhost:6379/0"

    log_level: str = "INFO"
    auto_create_schema: bool = False

    # Job dispatch
    broadcast_timeout_minutes: int = 15
    broadcast_radius_km: float = 10.0
    average_speed_kmh: float = 40.0
    broadcast_expiry_interval_seconds: int = 60  # 0 = loop disabled

    # Scheduling
    default_slot_duration_minutes: int = 60

    # Google Maps short-link expansion
    maps_expand_timeout: float = 5.0

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Dependency for FastAPI: the instance the app was built with
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
