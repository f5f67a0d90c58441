from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, Protocol

from domain.currency import Currency, CurrencyClass
from domain.errors import FetchError
from domain.rates import RateFetchResult, RateProvider, RateQuote, convention_for

logger = logging.getLogger(__name__)


class RateQuoteSource(Protocol):
    def fetch_quotes(self, codes: Iterable[str]) -> dict[str, RateQuote]: ...


class HybridRateProvider(RateProvider):
    """Routes fiat codes to one source and crypto codes to another, then joins them.

    Both batches run concurrently and are always awaited together.
    """

    def __init__(
        self,
        *,
        fiat_source: RateQuoteSource,
        crypto_source: RateQuoteSource,
    ) -> None:
        self.fiat_source = fiat_source
        self.crypto_source = crypto_source

    def fetch(self, currencies: Iterable[Currency]) -> RateFetchResult:
        partitions = self._partition(currencies)
        if not partitions:
            return RateFetchResult()

        sources = {CurrencyClass.FIAT: self.fiat_source, CurrencyClass.CRYPTO: self.crypto_source}
        with ThreadPoolExecutor(max_workers=len(partitions), thread_name_prefix="rate-fetch") as pool:
            futures: dict[CurrencyClass, Future[dict[str, RateQuote]]] = {
                currency_class: pool.submit(sources[currency_class].fetch_quotes, codes)
                for currency_class, codes in partitions.items()
            }
            outcomes = {
                currency_class: self._outcome(future, currency_class) for currency_class, future in futures.items()
            }

        quotes: dict[str, RateQuote] = {}
        failures: list[FetchError] = []
        for currency_class in (CurrencyClass.FIAT, CurrencyClass.CRYPTO):
            if currency_class not in outcomes:
                continue
            outcome = outcomes[currency_class]
            if isinstance(outcome, FetchError):
                logger.warning("%s rate fetch failed: %s", currency_class.value.lower(), outcome)
                failures.append(outcome)
                continue
            expected = convention_for(currency_class)
            for code, quote in outcome.items():
                if quote.convention != expected:
                    logger.warning("Ignoring %s quote for %s with %s convention", currency_class, code, quote.convention)
                    continue
                quotes[code] = quote

        if failures and not quotes:
            raise failures[0]
        if failures:
            logger.warning("Partial rate fetch: %d rates received, %d source(s) failed", len(quotes), len(failures))
        return RateFetchResult(quotes=quotes, failures=tuple(failures))

    @staticmethod
    def _partition(currencies: Iterable[Currency]) -> dict[CurrencyClass, list[str]]:
        partitions: dict[CurrencyClass, list[str]] = {}
        seen: set[str] = set()
        for currency in currencies:
            if currency.code in seen:
                continue
            seen.add(currency.code)
            partitions.setdefault(currency.currency_class, []).append(currency.code)
        return partitions

    @staticmethod
    def _outcome(
        future: Future[dict[str, RateQuote]], currency_class: CurrencyClass
    ) -> dict[str, RateQuote] | FetchError:
        try:
            return future.result()
        except FetchError as exc:
            return exc
        except Exception as exc:
            label = currency_class.value.lower()
            logger.exception("%s rate source failed unexpectedly", label)
            error = FetchError(f"{label} rate source failed: {exc!r}", source=label)
            error.__cause__ = exc
            return error


__all__ = ["HybridRateProvider", "RateQuoteSource"]
