from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

import requests

from config import config
from domain.errors import BadResponse, DecodeError
from domain.rates import RateConvention, RateQuote, usable_rate

from .http_json import build_session, request_json

logger = logging.getLogger(__name__)

SOURCE_LABEL = "ExchangeRate-API"


@dataclass(frozen=True)
class LatestRates:
    base: str
    date: str | None
    rates: dict[str, Any]


class _ExchangeRateApiClient:
    # API docs: https://www.exchangerate-api.com/docs/free
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
        retry_attempts: int | None = None,
    ) -> None:
        settings = config()
        self.base_url = (base_url or settings.fiat_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        attempts = retry_attempts if retry_attempts is not None else settings.http_retry_attempts
        self._session = build_session(retry_attempts=attempts, session=session)

    def get_latest_rates(self, *, base: str) -> LatestRates:
        payload = request_json(
            self._session,
            "GET",
            f"{self.base_url}/latest/{base.upper()}",
            source=SOURCE_LABEL,
            timeout=self.timeout,
        )
        if not isinstance(payload, dict):
            raise DecodeError(f"{SOURCE_LABEL} returned unexpected payload type", source=SOURCE_LABEL, payload=payload)

        if payload.get("result") == "error":
            message = payload.get("error-type") or f"{SOURCE_LABEL} error"
            raise BadResponse(str(message), source=SOURCE_LABEL, payload=payload)

        base_raw = payload.get("base") or payload.get("base_code")
        rates_raw = payload.get("rates")
        if rates_raw is None:
            rates_raw = payload.get("conversion_rates")
        if base_raw is None or not isinstance(rates_raw, dict):
            raise DecodeError(f"{SOURCE_LABEL} payload missing required fields", source=SOURCE_LABEL, payload=payload)

        date_raw = payload.get("date")
        return LatestRates(
            base=str(base_raw).upper(),
            date=str(date_raw) if date_raw is not None else None,
            rates={str(code).upper(): value for code, value in rates_raw.items()},
        )


class FiatRateSource:
    """Fiat rates quoted as units of currency per one unit of the base currency."""

    convention = RateConvention.PER_BASE

    def __init__(
        self,
        *,
        base_currency: str | None = None,
        include_base_rate: bool | None = None,
        client: _ExchangeRateApiClient | None = None,
        source_name: str = "exchangerate-api-latest",
    ) -> None:
        settings = config()
        self.base_currency = (base_currency or settings.base_currency).upper()
        self.include_base_rate = settings.include_base_rate if include_base_rate is None else include_base_rate
        self.client = client or _ExchangeRateApiClient()
        self.source_name = source_name

    def fetch_quotes(self, codes: Iterable[str]) -> dict[str, RateQuote]:
        requested = {code.upper() for code in codes}
        if not requested:
            return {}

        snapshot = self.client.get_latest_rates(base=self.base_currency)
        if snapshot.base != self.base_currency:
            msg = f"{SOURCE_LABEL} answered for base {snapshot.base}, expected {self.base_currency}"
            raise DecodeError(msg, source=SOURCE_LABEL)

        quotes: dict[str, RateQuote] = {}
        for code in sorted(requested):
            if code == self.base_currency:
                if self.include_base_rate:
                    quotes[code] = self._quote(code, 1.0)
                continue
            if code not in snapshot.rates:
                logger.debug("%s has no rate for %s", SOURCE_LABEL, code)
                continue
            rate = usable_rate(snapshot.rates[code])
            if rate is None:
                logger.debug("Dropping unusable %s rate for %s: %r", SOURCE_LABEL, code, snapshot.rates[code])
                continue
            quotes[code] = self._quote(code, rate)
        return quotes

    def _quote(self, code: str, rate: float) -> RateQuote:
        return RateQuote(code=code, rate=rate, convention=self.convention, source=self.source_name)


__all__ = ["FiatRateSource", "LatestRates"]
