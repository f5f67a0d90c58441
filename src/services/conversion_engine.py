from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from threading import RLock
from types import TracebackType
from typing import Callable

from config import config
from domain.catalog import find_currency
from domain.currency import Currency, CurrencyClass
from domain.errors import FetchError, LimitExceeded, RateUnavailable
from domain.rates import RateFetchResult, RateProvider, RateTable

from .rate_cache import RateCache
from .selection_registry import SelectionRegistry

logger = logging.getLogger(__name__)

MAX_CURRENCIES_MESSAGE = "Maximum number of currencies reached"
FETCH_FAILED_MESSAGE = "Unable to fetch exchange rates"

ChangeListener = Callable[["ConversionEngine"], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversionEngine:
    """Holds one amount of money and shows it in every selected currency.

    The amount is kept in base-currency units. Fiat rates are read as
    "currency per base" and crypto rates as "base per coin", so the two classes
    convert in opposite directions. All state is guarded by a single lock;
    rate fetches run on a background executor and report back through the
    returned future and the change listeners.
    """

    def __init__(
        self,
        *,
        provider: RateProvider,
        registry: SelectionRegistry,
        cache: RateCache,
        base_currency: str | None = None,
        staleness_window: timedelta | None = None,
        clock: Callable[[], datetime] | None = None,
        executor: Executor | None = None,
        restore_cache: bool = True,
    ) -> None:
        settings = config()
        if staleness_window is None:
            staleness_window = timedelta(seconds=settings.staleness_window_seconds)
        if staleness_window <= timedelta(0):
            msg = "staleness_window must be positive"
            raise ValueError(msg)

        self._provider = provider
        self._registry = registry
        self._cache = cache
        self.base_currency = (base_currency or settings.base_currency).upper()
        self.staleness_window = staleness_window
        self._clock = clock or _utcnow
        self._owns_executor = executor is None
        self._executor: Executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="rates")

        self._lock = RLock()
        self._listeners: list[ChangeListener] = []
        self._canonical_amount = 1.0
        self._editing_code: str | None = None
        self._rates: RateTable = {}
        self._last_fetched_at: datetime | None = None
        self._is_loading = False
        self._error_message: str | None = None

        self._registry.load()
        if restore_cache:
            cached = self._cache.load()
            if cached is not None:
                self._rates = dict(cached.rates)
                self._last_fetched_at = cached.fetched_at
        self._is_first_launch = not self._rates

    @property
    def selected_currencies(self) -> tuple[Currency, ...]:
        return self._registry.currencies

    @property
    def rates(self) -> RateTable:
        with self._lock:
            return dict(self._rates)

    @property
    def canonical_amount(self) -> float:
        with self._lock:
            return self._canonical_amount

    @property
    def editing_code(self) -> str | None:
        with self._lock:
            return self._editing_code

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._is_loading

    @property
    def error_message(self) -> str | None:
        with self._lock:
            return self._error_message

    @property
    def last_fetched_at(self) -> datetime | None:
        with self._lock:
            return self._last_fetched_at

    @property
    def is_first_launch(self) -> bool:
        with self._lock:
            return self._is_first_launch

    @property
    def can_remove_more(self) -> bool:
        return len(self._registry.currencies) > 1

    def clear_error(self) -> None:
        with self._lock:
            self._error_message = None
        self._notify()

    def update_amount(self, amount: float, for_code: str) -> None:
        """Make ``amount`` of ``for_code`` the amount every other row is derived from.

        Without a usable rate for ``for_code`` the previous amount is kept; the
        UI may start typing before the first fetch completes.
        """
        code = for_code.strip().upper()
        with self._lock:
            self._editing_code = code
            canonical = self._to_canonical(amount, code)
            if canonical is None:
                logger.debug("No rate for %s yet, keeping amount %s", code, self._canonical_amount)
            else:
                self._canonical_amount = canonical
        self._notify()

    def get_display_amount(self, code: str) -> float:
        """Amount of ``code`` equal to the current amount.

        A code without a rate gets the base amount back unchanged, so callers
        that care must check :meth:`has_rate` first.
        """
        wanted = code.strip().upper()
        with self._lock:
            value = self._from_canonical(self._canonical_amount, wanted)
            return self._canonical_amount if value is None else value

    def display_amounts(self) -> list[tuple[Currency, float]]:
        with self._lock:
            return [(currency, self.get_display_amount(currency.code)) for currency in self._registry.currencies]

    def convert(self, amount: float, from_code: str, to_code: str) -> float:
        source = from_code.strip().upper()
        target = to_code.strip().upper()
        with self._lock:
            canonical = self._to_canonical(amount, source)
            if canonical is None:
                raise RateUnavailable(source)
            converted = self._from_canonical(canonical, target)
            if converted is None:
                raise RateUnavailable(target)
            return converted

    def has_rate(self, code: str) -> bool:
        wanted = code.strip().upper()
        with self._lock:
            return self._rate(wanted) is not None

    def rate_for(self, code: str) -> float:
        wanted = code.strip().upper()
        with self._lock:
            rate = self._rate(wanted)
        if rate is None:
            raise RateUnavailable(wanted)
        return rate

    def _to_canonical(self, amount: float, code: str) -> float | None:
        if code == self.base_currency:
            return amount
        rate = self._rate(code)
        if rate is None:
            return None
        if self._class_of(code) == CurrencyClass.CRYPTO:
            return amount * rate
        return amount / rate

    def _from_canonical(self, canonical: float, code: str) -> float | None:
        if code == self.base_currency:
            return canonical
        rate = self._rate(code)
        if rate is None:
            return None
        if self._class_of(code) == CurrencyClass.CRYPTO:
            return canonical / rate
        return canonical * rate

    def _rate(self, code: str) -> float | None:
        if code == self.base_currency:
            return 1.0
        rate = self._rates.get(code)
        if rate is None or rate <= 0:
            return None
        return rate

    def _class_of(self, code: str) -> CurrencyClass:
        currency = self._registry.find(code) or find_currency(code)
        if currency is None:
            return CurrencyClass.FIAT
        return currency.currency_class

    def needs_refresh(self) -> bool:
        with self._lock:
            if not self._rates or self._last_fetched_at is None:
                return True
            if self._clock() - self._last_fetched_at >= self.staleness_window:
                return True
            return any(self._rate(currency.code) is None for currency in self._registry.currencies)

    def fetch_rates_if_needed(self) -> Future[None] | None:
        if not self.needs_refresh():
            logger.debug("Rates are fresh, skipping fetch")
            return None
        return self.fetch_rates()

    def fetch_rates(self) -> Future[None] | None:
        """Start a background fetch; returns None when one is already running."""
        with self._lock:
            if self._is_loading:
                logger.debug("Rate fetch already in flight, ignoring request")
                return None
            self._is_loading = True
            self._error_message = None
            requested = self._registry.currencies
        self._notify()

        try:
            return self._executor.submit(self._run_fetch, requested)
        except RuntimeError as exc:
            logger.warning("Could not schedule rate fetch: %s", exc)
            with self._lock:
                self._is_loading = False
                self._error_message = FETCH_FAILED_MESSAGE
            self._notify()
            return None

    def _run_fetch(self, requested: tuple[Currency, ...]) -> None:
        try:
            if not requested:
                logger.info("No currencies selected, skipping rate fetch")
                return
            try:
                result = self._provider.fetch(requested)
            except FetchError as exc:
                self._fall_back_to_cache(exc)
            except Exception as exc:
                logger.exception("Rate provider failed unexpectedly")
                self._fall_back_to_cache(exc)
                raise
            else:
                self._apply_result(result)
        finally:
            with self._lock:
                self._is_loading = False
                self._is_first_launch = False
            self._notify()

    def _apply_result(self, result: RateFetchResult) -> None:
        fetched_at = self._clock()
        with self._lock:
            self._rates = {**self._rates, **result.rates}
            self._last_fetched_at = fetched_at
            self._error_message = None
            snapshot = dict(self._rates)

        if result.is_partial:
            logger.info("Merged %d fresh rates from a partial fetch", len(result.quotes))
        else:
            logger.info("Merged %d fresh rates", len(result.quotes))
        self._cache.save(snapshot, fetched_at)

    def _fall_back_to_cache(self, error: Exception) -> None:
        cached = self._cache.load()
        with self._lock:
            if cached is not None:
                self._rates = dict(cached.rates)
                self._error_message = None
            elif self._rates:
                self._error_message = None
            else:
                message = str(error) if isinstance(error, FetchError) else ""
                self._error_message = message or FETCH_FAILED_MESSAGE
            kept = len(self._rates)
        if cached is not None:
            logger.warning("Rate fetch failed, using %d cached rates: %s", kept, error)
        elif kept:
            logger.warning("Rate fetch failed, keeping %d rates already loaded: %s", kept, error)
        else:
            logger.warning("Rate fetch failed and no cached rates are available: %s", error)

    def add_currency(self, currency: Currency) -> bool:
        try:
            with self._lock:
                added = self._registry.add(currency)
        except LimitExceeded as exc:
            logger.info("Rejected %s: %s", currency.code, exc)
            with self._lock:
                self._error_message = MAX_CURRENCIES_MESSAGE
            self._notify()
            return False

        if not added:
            return False
        self._notify()
        self.fetch_rates_if_needed()
        return True

    def remove_currency(self, currency: Currency) -> bool:
        with self._lock:
            removed = self._registry.remove(currency)
        if removed:
            self._notify()
        return removed

    def move_currency(self, from_index: int, to_index: int) -> bool:
        with self._lock:
            moved = self._registry.move(from_index, to_index)
        if moved:
            self._notify()
        return moved

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("Change listener %r failed", listener)

    def close(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> ConversionEngine:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["ConversionEngine", "FETCH_FAILED_MESSAGE", "MAX_CURRENCIES_MESSAGE"]
