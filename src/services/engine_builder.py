from __future__ import annotations

from datetime import timedelta

from config import AppSettings, config
from db.db import init_db
from db.repositories import SqlKeyValueStore

from .coingecko_source import CryptoRateSource, _CoinGeckoClient
from .conversion_engine import ConversionEngine
from .exchange_rate_api_source import FiatRateSource, _ExchangeRateApiClient
from .key_value_store import KeyValueStore
from .rate_cache import RateCache
from .rate_sources import HybridRateProvider
from .selection_registry import SelectionRegistry


def build_rate_provider(settings: AppSettings) -> HybridRateProvider:
    fiat_client = _ExchangeRateApiClient(
        base_url=settings.fiat_api_base_url,
        timeout=settings.http_timeout_seconds,
        retry_attempts=settings.http_retry_attempts,
    )
    crypto_client = _CoinGeckoClient(
        base_url=settings.crypto_api_base_url,
        timeout=settings.http_timeout_seconds,
        retry_attempts=settings.http_retry_attempts,
    )
    return HybridRateProvider(
        fiat_source=FiatRateSource(
            base_currency=settings.base_currency,
            include_base_rate=settings.include_base_rate,
            client=fiat_client,
        ),
        crypto_source=CryptoRateSource(base_currency=settings.base_currency, client=crypto_client),
    )


def build_engine(settings: AppSettings | None = None, *, store: KeyValueStore | None = None) -> ConversionEngine:
    resolved = settings or config()
    resolved_store = store or SqlKeyValueStore(init_db(resolved.database_url))
    registry = SelectionRegistry(
        resolved_store,
        max_count=resolved.max_selected_currencies,
        default_codes=resolved.default_currency_codes,
    )
    return ConversionEngine(
        provider=build_rate_provider(resolved),
        registry=registry,
        cache=RateCache(resolved_store),
        base_currency=resolved.base_currency,
        staleness_window=timedelta(seconds=resolved.staleness_window_seconds),
    )


__all__ = ["build_engine", "build_rate_provider"]
