"""Kiosk agent configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Kiosk agent settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Local agent server (consumed by the on-device renderer)
    host: str = "127.0.0.1"
    port: int = 8100
    debug: bool = False

    # CORS - the renderer is served from the same device
    cors_origins: list[str] = ["*"]

    # Central check-in API
    api_base_url: str = "http://localhost:3001/api"
    ws_url: str = "ws://localhost:3001/ws"
    request_timeout_seconds: float = 10.0

    # Lane binding
    lane_id: str = "lane-1"
    kiosk_token: str = ""

    # Polling fallback (used while the push channel is down)
    polling_grace_seconds: float = 1.2
    polling_interval_seconds: float = 1.5

    # Push channel reconnect
    push_retry_delay_seconds: float = 1.0
    push_max_retries: int = 5

    # Inventory refresh
    inventory_refresh_seconds: float = 10.0

    # Welcome overlay shown when a new customer session appears
    welcome_overlay_seconds: float = 2.0


settings = Settings()
