from __future__ import annotations

from functools import cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    base_currency: str = "USD"
    staleness_window_seconds: int = 6 * 60 * 60
    max_selected_currencies: int = 50
    default_currency_codes: list[str] = ["USD", "CNY", "RUB", "BTC"]

    http_timeout_seconds: float = 10.0
    http_retry_attempts: int = 0
    fiat_api_base_url: str = "https://api.exchangerate-api.com/v4"
    crypto_api_base_url: str = "https://api.coingecko.com/api/v3"
    include_base_rate: bool = True

    database_url: str = "sqlite:///currency_converter.db"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@cache
def config() -> AppSettings:
    return AppSettings()
