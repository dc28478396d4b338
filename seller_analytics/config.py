"""Configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Seller-Analytics"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./analytics.db"

    # Analytics defaults
    analytics_lookback_months: int = 6
    analytics_top_n: int = 5
    analytics_recent_orders_limit: int = 10
    analytics_weekly_window_days: int = 7

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
