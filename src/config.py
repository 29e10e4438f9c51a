from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_OFFSETS = (7, 3, 1)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Environment
    environment: str = "development"  # "development" or "production"

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/coupons.db"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # Reminder scheduling
    notification_enabled: bool = True
    reminder_offsets: str = "7,3,1"  # days before expiry, comma-separated
    dedup_window_hours: int = 24
    notification_job_timeout_seconds: int = 300
    notification_cron_hour: int = 9
    notification_cron_minute: int = 0

    # Web Push
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_subject: str = "mailto:noreply@couponapp.com"
    push_ttl_seconds: int = 86400
    push_max_workers: int = 8

    # Notification payload
    notification_url: str = "/dashboard"
    notification_icon: str = "/icon-192x192.png"
    notification_badge: str = "/badge-72x72.png"

    # CORS (comma-separated origins, empty means localhost only)
    cors_origins: str = ""

    # Admin
    admin_api_key: str = ""

    @field_validator("reminder_offsets")
    @classmethod
    def _check_offsets(cls, value: str) -> str:
        for part in value.split(","):
            part = part.strip()
            if not part.isdigit() or int(part) not in SUPPORTED_OFFSETS:
                raise ValueError(
                    f"Unsupported reminder offset {part!r}; "
                    f"choose from {list(SUPPORTED_OFFSETS)}"
                )
        return value

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def offsets(self) -> List[int]:
        return [int(part) for part in self.reminder_offsets.split(",")]

    @property
    def sync_database_url(self) -> str:
        return self.database_url.replace("+aiosqlite", "")


@lru_cache
def get_settings() -> Settings:
    return Settings()
