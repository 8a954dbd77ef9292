"""Application configuration using Pydantic settings."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Price tracker settings, read from PRICE_TRACKER_* env vars or .env."""

    model_config = SettingsConfigDict(
        env_prefix="PRICE_TRACKER_",
        env_file=".env",
        extra="ignore",
    )

    # Storage
    catalog_path: Path = Path("data/products.json")
    history_dir: Path = Path("data/prices")
    retention_days: int = 60

    # Pacing between products (seconds)
    min_delay_seconds: float = 2.0
    max_delay_seconds: float = 5.0

    # Browser
    headless: bool = True
    diagnostics_dir: Optional[Path] = None

    # Vendors
    checkin_days_ahead: int = 7
    vendor_config_path: Optional[Path] = None

    log_level: str = "INFO"


settings = Settings()
