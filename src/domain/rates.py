from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Iterable, Protocol

from .currency import Currency, CurrencyClass
from .errors import FetchError

RateTable = dict[str, float]


class RateConvention(StrEnum):
    """How a raw rate relates a currency to the base currency."""

    # units of the currency per one unit of base (fiat quotes: EUR per USD)
    PER_BASE = "PER_BASE"
    # units of base per one unit of the currency (crypto prices: USD per BTC)
    BASE_PER_UNIT = "BASE_PER_UNIT"


def convention_for(currency_class: CurrencyClass) -> RateConvention:
    if currency_class == CurrencyClass.CRYPTO:
        return RateConvention.BASE_PER_UNIT
    return RateConvention.PER_BASE


def usable_rate(value: Any) -> float | None:
    """Return ``value`` as a float if it is a positive finite number, else None."""
    if isinstance(value, bool):
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


@dataclass(frozen=True)
class RateQuote:
    code: str
    rate: float
    convention: RateConvention
    source: str


@dataclass(frozen=True)
class RateFetchResult:
    """Successful provider outcome; may be incomplete when ``failures`` is non-empty."""

    quotes: dict[str, RateQuote] = field(default_factory=dict)
    failures: tuple[FetchError, ...] = ()

    @property
    def rates(self) -> RateTable:
        return {code: quote.rate for code, quote in self.quotes.items()}

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)


class RateProvider(Protocol):
    """Fetches rates for a set of currencies, each in its class's native convention."""

    def fetch(self, currencies: Iterable[Currency]) -> RateFetchResult: ...


__all__ = [
    "RateConvention",
    "RateFetchResult",
    "RateProvider",
    "RateQuote",
    "RateTable",
    "convention_for",
    "usable_rate",
]
