from __future__ import annotations

import logging
from typing import Any, Iterable

import requests

from config import config
from domain.errors import DecodeError
from domain.rates import RateConvention, RateQuote, usable_rate

from .http_json import build_session, request_json

logger = logging.getLogger(__name__)

SOURCE_LABEL = "CoinGecko"

COINGECKO_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "BNB": "binancecoin",
    "XRP": "ripple",
    "ADA": "cardano",
    "DOGE": "dogecoin",
    "SOL": "solana",
    "DOT": "polkadot",
    "MATIC": "matic-network",
    "LTC": "litecoin",
    "AVAX": "avalanche-2",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "ATOM": "cosmos",
    "ICP": "internet-computer",
    "BCH": "bitcoin-cash",
    "XLM": "stellar",
    "VET": "vechain",
    "FIL": "filecoin",
    "TRX": "tron",
    "ETC": "ethereum-classic",
    "XMR": "monero",
    "ALGO": "algorand",
    "HBAR": "hedera-hashgraph",
    "NEAR": "near",
}


class _CoinGeckoClient:
    # API docs: https://docs.coingecko.com/reference/simple-price
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
        retry_attempts: int | None = None,
    ) -> None:
        settings = config()
        self.base_url = (base_url or settings.crypto_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        attempts = retry_attempts if retry_attempts is not None else settings.http_retry_attempts
        self._session = build_session(retry_attempts=attempts, session=session)

    def get_simple_prices(self, *, coin_ids: list[str], vs_currency: str) -> dict[str, dict[str, Any]]:
        if not coin_ids:
            msg = "coin_ids must contain at least one entry"
            raise ValueError(msg)

        params = {"ids": ",".join(coin_ids), "vs_currencies": vs_currency.lower()}
        payload = request_json(
            self._session,
            "GET",
            f"{self.base_url}/simple/price",
            source=SOURCE_LABEL,
            timeout=self.timeout,
            params=params,
        )
        if not isinstance(payload, dict):
            raise DecodeError(f"{SOURCE_LABEL} returned unexpected payload type", source=SOURCE_LABEL, payload=payload)

        prices: dict[str, dict[str, Any]] = {}
        for coin_id, entry in payload.items():
            if isinstance(entry, dict):
                prices[str(coin_id)] = entry
        return prices


class CryptoRateSource:
    """Crypto prices quoted as units of the base currency per one coin."""

    convention = RateConvention.BASE_PER_UNIT

    def __init__(
        self,
        *,
        base_currency: str | None = None,
        coin_ids: dict[str, str] | None = None,
        client: _CoinGeckoClient | None = None,
        source_name: str = "coingecko-simple-price",
    ) -> None:
        self.base_currency = (base_currency or config().base_currency).upper()
        self.client = client or _CoinGeckoClient()
        self.source_name = source_name
        mapping = coin_ids if coin_ids is not None else COINGECKO_IDS
        self._ids_by_code = {code.upper(): coin_id for code, coin_id in mapping.items()}
        self._codes_by_id = {coin_id: code for code, coin_id in self._ids_by_code.items()}

    def supports(self, code: str) -> bool:
        return code.upper() in self._ids_by_code

    def fetch_quotes(self, codes: Iterable[str]) -> dict[str, RateQuote]:
        requested = sorted({code.upper() for code in codes})
        unmapped = [code for code in requested if code not in self._ids_by_code]
        if unmapped:
            logger.debug("Skipping crypto codes without %s mapping: %s", SOURCE_LABEL, ", ".join(unmapped))

        coin_ids = [self._ids_by_code[code] for code in requested if code in self._ids_by_code]
        if not coin_ids:
            return {}

        vs_key = self.base_currency.lower()
        prices = self.client.get_simple_prices(coin_ids=coin_ids, vs_currency=vs_key)

        quotes: dict[str, RateQuote] = {}
        for coin_id, entry in prices.items():
            code = self._codes_by_id.get(coin_id)
            if code is None:
                continue
            price = usable_rate(entry.get(vs_key))
            if price is None:
                logger.debug("Dropping unusable %s price for %s: %r", SOURCE_LABEL, code, entry.get(vs_key))
                continue
            quotes[code] = RateQuote(code=code, rate=price, convention=self.convention, source=self.source_name)
        return quotes


__all__ = ["COINGECKO_IDS", "CryptoRateSource"]
