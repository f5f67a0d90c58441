from __future__ import annotations

from pathlib import Path
from typing import cast

from config import AppSettings
from domain.rates import RateConvention
from services.coingecko_source import CryptoRateSource
from services.engine_builder import build_engine, build_rate_provider
from services.exchange_rate_api_source import FiatRateSource
from tests.helpers.engine_doubles import RecordingStore


def _settings(tmp_path: Path, **overrides: object) -> AppSettings:
    values: dict[str, object] = {"database_url": f"sqlite:///{tmp_path / 'converter.db'}"}
    values.update(overrides)
    return AppSettings(**values)  # type: ignore[arg-type]


def test_build_rate_provider_uses_settings(tmp_path: Path) -> None:
    settings = _settings(
        tmp_path,
        base_currency="EUR",
        fiat_api_base_url="https://fiat.example/v4/",
        crypto_api_base_url="https://crypto.example/api/v3",
        include_base_rate=False,
    )

    provider = build_rate_provider(settings)
    fiat_source = cast(FiatRateSource, provider.fiat_source)
    crypto_source = cast(CryptoRateSource, provider.crypto_source)

    assert fiat_source.base_currency == "EUR"
    assert fiat_source.convention is RateConvention.PER_BASE
    assert not fiat_source.include_base_rate
    assert fiat_source.client.base_url == "https://fiat.example/v4"
    assert crypto_source.base_currency == "EUR"
    assert crypto_source.convention is RateConvention.BASE_PER_UNIT
    assert crypto_source.client.base_url == "https://crypto.example/api/v3"


def test_build_engine_uses_sql_store_by_default(tmp_path: Path) -> None:
    settings = _settings(tmp_path, default_currency_codes=["USD", "GBP"], staleness_window_seconds=60)

    with build_engine(settings) as engine:
        assert [currency.code for currency in engine.selected_currencies] == ["USD", "GBP"]
        assert engine.staleness_window.total_seconds() == 60
        assert engine.is_first_launch

    assert (tmp_path / "converter.db").exists()


def test_build_engine_accepts_custom_store(tmp_path: Path) -> None:
    store = RecordingStore()

    with build_engine(_settings(tmp_path, max_selected_currencies=2), store=store) as engine:
        assert engine.base_currency == "USD"
        assert [currency.code for currency in engine.selected_currencies] == ["USD", "CNY", "RUB", "BTC"]

    assert not (tmp_path / "converter.db").exists()
