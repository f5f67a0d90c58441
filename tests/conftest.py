from typing import Generator

import pytest

from config import config
from domain.catalog import find_currency
from domain.currency import Currency
from tests.helpers.engine_doubles import FakeClock, ImmediateExecutor, RecordingStore, StubRateProvider


@pytest.fixture(autouse=True)
def _reset_config_cache() -> Generator[None, None, None]:
    config.cache_clear()
    yield
    config.cache_clear()


def _currency(code: str) -> Currency:
    currency = find_currency(code)
    assert currency is not None
    return currency


@pytest.fixture(scope="function")
def usd() -> Currency:
    return _currency("USD")


@pytest.fixture(scope="function")
def eur() -> Currency:
    return _currency("EUR")


@pytest.fixture(scope="function")
def btc() -> Currency:
    return _currency("BTC")


@pytest.fixture(scope="function")
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture(scope="function")
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="function")
def provider() -> StubRateProvider:
    return StubRateProvider()


@pytest.fixture(scope="function")
def executor() -> ImmediateExecutor:
    return ImmediateExecutor()
