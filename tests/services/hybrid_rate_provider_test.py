from __future__ import annotations

import threading
from typing import Iterable

import pytest

from domain.catalog import find_currency
from domain.currency import Currency
from domain.errors import BadResponse, FetchError, FetchTimeout, NetworkError
from domain.rates import RateQuote
from services.rate_sources import HybridRateProvider
from tests.helpers.engine_doubles import quote


def _currencies(*codes: str) -> list[Currency]:
    resolved = [find_currency(code) for code in codes]
    assert all(currency is not None for currency in resolved)
    return [currency for currency in resolved if currency is not None]


class _StubQuoteSource:
    def __init__(self, quotes: dict[str, RateQuote] | None = None, error: Exception | None = None) -> None:
        self.quotes = quotes or {}
        self.error = error
        self.calls: list[list[str]] = []

    def fetch_quotes(self, codes: Iterable[str]) -> dict[str, RateQuote]:
        requested = list(codes)
        self.calls.append(requested)
        if self.error is not None:
            raise self.error
        return {code: q for code, q in self.quotes.items() if code in requested}


def test_fetch_partitions_by_class_and_unions_results() -> None:
    fiat = _StubQuoteSource({"USD": quote("USD", 1.0), "EUR": quote("EUR", 0.85)})
    crypto = _StubQuoteSource({"BTC": quote("BTC", 50000.0, crypto=True)})
    provider = HybridRateProvider(fiat_source=fiat, crypto_source=crypto)

    result = provider.fetch(_currencies("USD", "EUR", "BTC", "EUR"))

    assert result.rates == {"USD": 1.0, "EUR": 0.85, "BTC": 50000.0}
    assert not result.is_partial
    assert fiat.calls == [["USD", "EUR"]]
    assert crypto.calls == [["BTC"]]


def test_fetch_only_queries_requested_classes() -> None:
    fiat = _StubQuoteSource({"EUR": quote("EUR", 0.85)})
    crypto = _StubQuoteSource()
    provider = HybridRateProvider(fiat_source=fiat, crypto_source=crypto)

    provider.fetch(_currencies("EUR"))

    assert crypto.calls == []


def test_fetch_returns_partial_success_when_crypto_fails() -> None:
    fiat = _StubQuoteSource({"EUR": quote("EUR", 0.85)})
    crypto = _StubQuoteSource(error=FetchTimeout("slow", source="crypto"))
    provider = HybridRateProvider(fiat_source=fiat, crypto_source=crypto)

    result = provider.fetch(_currencies("EUR", "BTC"))

    assert result.rates == {"EUR": 0.85}
    assert result.is_partial
    assert isinstance(result.failures[0], FetchTimeout)


def test_fetch_returns_partial_success_when_fiat_fails() -> None:
    fiat = _StubQuoteSource(error=NetworkError("offline"))
    crypto = _StubQuoteSource({"BTC": quote("BTC", 50000.0, crypto=True)})
    provider = HybridRateProvider(fiat_source=fiat, crypto_source=crypto)

    result = provider.fetch(_currencies("EUR", "BTC"))

    assert result.rates == {"BTC": 50000.0}
    assert result.is_partial


def test_fetch_raises_first_failure_when_both_fail() -> None:
    fiat_error = NetworkError("fiat offline")
    crypto_error = BadResponse("crypto broken")
    provider = HybridRateProvider(
        fiat_source=_StubQuoteSource(error=fiat_error),
        crypto_source=_StubQuoteSource(error=crypto_error),
    )

    with pytest.raises(NetworkError) as excinfo:
        provider.fetch(_currencies("EUR", "BTC"))

    assert excinfo.value is fiat_error


def test_fetch_raises_when_only_requested_class_fails() -> None:
    provider = HybridRateProvider(
        fiat_source=_StubQuoteSource({"EUR": quote("EUR", 0.85)}),
        crypto_source=_StubQuoteSource(error=BadResponse("crypto broken")),
    )

    with pytest.raises(BadResponse):
        provider.fetch(_currencies("BTC", "ETH"))


def test_fetch_raises_when_survivor_returned_nothing() -> None:
    provider = HybridRateProvider(
        fiat_source=_StubQuoteSource({}),
        crypto_source=_StubQuoteSource(error=BadResponse("crypto broken")),
    )

    with pytest.raises(BadResponse):
        provider.fetch(_currencies("EUR", "BTC"))


def test_fetch_with_no_currencies_skips_sources() -> None:
    fiat = _StubQuoteSource()
    crypto = _StubQuoteSource()
    provider = HybridRateProvider(fiat_source=fiat, crypto_source=crypto)

    result = provider.fetch([])

    assert result.rates == {}
    assert fiat.calls == [] and crypto.calls == []


def test_fetch_ignores_quotes_in_the_wrong_convention() -> None:
    fiat = _StubQuoteSource({"EUR": quote("EUR", 0.85, crypto=True), "GBP": quote("GBP", 0.75)})
    provider = HybridRateProvider(fiat_source=fiat, crypto_source=_StubQuoteSource())

    result = provider.fetch(_currencies("EUR", "GBP"))

    assert result.rates == {"GBP": 0.75}


class _BarrierSource(_StubQuoteSource):
    def __init__(self, barrier: threading.Barrier, quotes: dict[str, RateQuote]) -> None:
        super().__init__(quotes)
        self.barrier = barrier

    def fetch_quotes(self, codes: Iterable[str]) -> dict[str, RateQuote]:
        self.barrier.wait(timeout=5)
        return super().fetch_quotes(codes)


def test_fetch_runs_both_partitions_concurrently() -> None:
    barrier = threading.Barrier(2)
    provider = HybridRateProvider(
        fiat_source=_BarrierSource(barrier, {"EUR": quote("EUR", 0.85)}),
        crypto_source=_BarrierSource(barrier, {"BTC": quote("BTC", 50000.0, crypto=True)}),
    )

    result = provider.fetch(_currencies("EUR", "BTC"))

    assert result.rates == {"EUR": 0.85, "BTC": 50000.0}


def test_unexpected_source_error_becomes_a_partial_failure() -> None:
    provider = HybridRateProvider(
        fiat_source=_StubQuoteSource({"EUR": quote("EUR", 0.85)}),
        crypto_source=_StubQuoteSource(error=KeyError("bitcoin")),
    )

    result = provider.fetch(_currencies("EUR", "BTC"))

    assert result.rates == {"EUR": 0.85}
    assert result.is_partial
    failure = result.failures[0]
    assert failure.source == "crypto"
    assert isinstance(failure.__cause__, KeyError)


def test_unexpected_errors_on_both_sides_raise_fetch_error() -> None:
    provider = HybridRateProvider(
        fiat_source=_StubQuoteSource(error=ValueError("bad fiat")),
        crypto_source=_StubQuoteSource(error=KeyError("bitcoin")),
    )

    with pytest.raises(FetchError, match="fiat rate source failed"):
        provider.fetch(_currencies("EUR", "BTC"))
