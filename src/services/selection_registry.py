from __future__ import annotations

import json
import logging
from threading import RLock
from typing import Iterable

from pydantic import ValidationError

from config import config
from domain.catalog import find_currency
from domain.currency import Currency
from domain.errors import LimitExceeded, PersistenceError

from .key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

SELECTION_KEY = "selectedCurrencies"


class SelectionRegistry:
    """Ordered, duplicate-free list of the currencies the user picked.

    Every successful mutation is written through to the store. Store failures
    are logged and otherwise ignored; the in-memory list stays authoritative.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_count: int | None = None,
        default_codes: Iterable[str] | None = None,
    ) -> None:
        settings = config()
        if max_count is None:
            max_count = settings.max_selected_currencies
        if default_codes is None:
            default_codes = settings.default_currency_codes
        if max_count <= 0:
            msg = "max_count must be greater than 0"
            raise ValueError(msg)
        self.store = store
        self.max_count = max_count
        self.default_codes = tuple(code.upper() for code in default_codes)
        self._currencies: list[Currency] | None = None
        self._lock = RLock()

    @property
    def currencies(self) -> tuple[Currency, ...]:
        with self._lock:
            return tuple(self._current())

    def defaults(self) -> list[Currency]:
        resolved: list[Currency] = []
        for code in self.default_codes:
            currency = find_currency(code)
            if currency is None:
                logger.warning("Default currency %s is not in the catalog, skipping", code)
                continue
            if currency not in resolved:
                resolved.append(currency)
        return resolved

    def load(self) -> list[Currency]:
        with self._lock:
            loaded = self._read() or self.defaults()
            self._currencies = loaded
            return list(loaded)

    def save(self, currencies: Iterable[Currency]) -> None:
        records = [currency.to_record() for currency in currencies]
        try:
            self.store.set(SELECTION_KEY, json.dumps(records).encode("utf-8"))
        except PersistenceError as exc:
            logger.warning("Could not persist %d selected currencies: %s", len(records), exc)

    def contains(self, code: str) -> bool:
        return self.find(code) is not None

    def find(self, code: str) -> Currency | None:
        wanted = code.strip().upper()
        with self._lock:
            for currency in self._current():
                if currency.code == wanted:
                    return currency
        return None

    def add(self, currency: Currency) -> bool:
        with self._lock:
            current = self._current()
            if currency in current:
                return False
            if len(current) >= self.max_count:
                raise LimitExceeded(f"Cannot select more than {self.max_count} currencies", limit=self.max_count)
            current.append(currency)
            self.save(current)
            return True

    def remove(self, currency: Currency) -> bool:
        with self._lock:
            current = self._current()
            if currency not in current:
                return False
            current.remove(currency)
            self.save(current)
            return True

    def move(self, from_index: int, to_index: int) -> bool:
        with self._lock:
            current = self._current()
            size = len(current)
            if not (0 <= from_index < size and 0 <= to_index < size):
                logger.debug("Ignoring move %d -> %d on a list of %d", from_index, to_index, size)
                return False
            if from_index == to_index:
                return False
            current.insert(to_index, current.pop(from_index))
            self.save(current)
            return True

    def _current(self) -> list[Currency]:
        if self._currencies is None:
            self.load()
        assert self._currencies is not None
        return self._currencies

    def _read(self) -> list[Currency]:
        try:
            raw = self.store.get(SELECTION_KEY)
        except PersistenceError as exc:
            logger.warning("Could not read selected currencies: %s", exc)
            return []
        if raw is None:
            return []

        try:
            records = json.loads(raw.decode("utf-8"))
            if not isinstance(records, list):
                raise TypeError(f"expected a list, got {type(records).__name__}")
            parsed = [Currency.model_validate(record) for record in records]
        except (UnicodeDecodeError, ValueError, TypeError, ValidationError) as exc:
            logger.warning("Ignoring unparsable selected currencies: %s", exc)
            return []

        unique: list[Currency] = []
        for currency in parsed:
            if currency not in unique:
                unique.append(currency)
        return unique


__all__ = ["SELECTION_KEY", "SelectionRegistry"]
