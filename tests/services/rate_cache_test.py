from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from services.rate_cache import FETCHED_AT_KEY, RATES_KEY, CachedRates, RateCache
from tests.helpers.engine_doubles import FailingStore, RecordingStore


def test_save_then_load_restores_rates_and_timestamp(store: RecordingStore) -> None:
    cache = RateCache(store)
    fetched_at = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    cache.save({"EUR": 0.85, "BTC": 50000.0}, fetched_at)

    assert cache.load() == CachedRates(rates={"EUR": 0.85, "BTC": 50000.0}, fetched_at=fetched_at)
    assert [key for key, _ in store.writes] == [RATES_KEY, FETCHED_AT_KEY]


def test_timestamp_is_stored_in_utc(store: RecordingStore) -> None:
    cache = RateCache(store)
    local = datetime(2025, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

    cache.save({"EUR": 0.85}, local)

    assert store.get(FETCHED_AT_KEY) == b"2025-01-01T12:00:00+00:00"


def test_load_returns_none_when_absent(store: RecordingStore) -> None:
    assert RateCache(store).load() is None


def test_load_returns_none_for_garbage() -> None:
    cache = RateCache(RecordingStore({RATES_KEY: b"{not json"}))

    assert cache.load() is None


def test_load_returns_none_for_non_object_payload() -> None:
    cache = RateCache(RecordingStore({RATES_KEY: b"[1, 2, 3]"}))

    assert cache.load() is None


def test_load_filters_invalid_entries_and_uppercases_codes() -> None:
    payload = json.dumps({"eur": 0.85, "GBP": 0, "JPY": -1, "XXX": "abc", "BTC": 50000}).encode()
    cache = RateCache(RecordingStore({RATES_KEY: payload}))

    cached = cache.load()

    assert cached is not None
    assert cached.rates == {"EUR": 0.85, "BTC": 50000.0}
    assert cached.fetched_at is None


def test_load_tolerates_unparsable_timestamp() -> None:
    cache = RateCache(RecordingStore({RATES_KEY: b'{"EUR": 0.85}', FETCHED_AT_KEY: b"yesterday"}))

    cached = cache.load()

    assert cached is not None
    assert cached.fetched_at is None


def test_load_assumes_utc_for_naive_timestamp() -> None:
    cache = RateCache(RecordingStore({RATES_KEY: b'{"EUR": 0.85}', FETCHED_AT_KEY: b"2025-01-01T12:00:00"}))

    cached = cache.load()

    assert cached is not None
    assert cached.fetched_at == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_store_failures_are_swallowed() -> None:
    cache = RateCache(FailingStore())

    cache.save({"EUR": 0.85}, datetime(2025, 1, 1, tzinfo=timezone.utc))

    assert cache.load() is None
