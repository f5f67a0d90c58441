from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from domain.errors import PersistenceError
from domain.rates import RateTable, usable_rate

from .key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

RATES_KEY = "lastRates"
FETCHED_AT_KEY = "lastUpdateTime"


@dataclass(frozen=True)
class CachedRates:
    rates: RateTable
    fetched_at: datetime | None


class RateCache:
    """Last merged rate table plus the time it was fetched, kept in a key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def save(self, rates: RateTable, fetched_at: datetime) -> None:
        try:
            self.store.set(RATES_KEY, json.dumps(dict(rates), sort_keys=True).encode("utf-8"))
            self.store.set(FETCHED_AT_KEY, fetched_at.astimezone(timezone.utc).isoformat().encode("utf-8"))
        except PersistenceError as exc:
            logger.warning("Could not persist %d cached rates: %s", len(rates), exc)

    def load(self) -> CachedRates | None:
        try:
            raw_rates = self.store.get(RATES_KEY)
            raw_fetched_at = self.store.get(FETCHED_AT_KEY)
        except PersistenceError as exc:
            logger.warning("Could not read cached rates: %s", exc)
            return None

        rates = self._decode_rates(raw_rates)
        if not rates:
            return None
        return CachedRates(rates=rates, fetched_at=self._decode_timestamp(raw_fetched_at))

    @staticmethod
    def _decode_rates(raw: bytes | None) -> RateTable:
        if raw is None:
            return {}
        try:
            decoded = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.warning("Ignoring unparsable cached rates")
            return {}
        if not isinstance(decoded, dict):
            logger.warning("Ignoring cached rates of type %s", type(decoded).__name__)
            return {}

        rates: RateTable = {}
        for code, value in decoded.items():
            rate = usable_rate(value)
            if rate is None:
                continue
            rates[str(code).upper()] = rate
        return rates

    @staticmethod
    def _decode_timestamp(raw: bytes | None) -> datetime | None:
        if raw is None:
            return None
        try:
            parsed = datetime.fromisoformat(raw.decode("utf-8").strip())
        except (UnicodeDecodeError, ValueError):
            logger.warning("Ignoring unparsable cached rate timestamp")
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)


__all__ = ["CachedRates", "FETCHED_AT_KEY", "RATES_KEY", "RateCache"]
