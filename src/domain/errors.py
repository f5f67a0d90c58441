from __future__ import annotations

from typing import Any


class ConverterError(Exception):
    """Base class for every error raised by the converter library."""


class FetchError(ConverterError):
    """Upstream rate fetch failed. Recoverable through the rate cache."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        status_code: int | None = None,
        payload: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code
        self.payload = payload


class NetworkError(FetchError):
    pass


class BadResponse(FetchError):
    pass


class FetchTimeout(FetchError):
    pass


class DecodeError(FetchError):
    pass


class LimitExceeded(ConverterError):
    def __init__(self, message: str, *, limit: int) -> None:
        super().__init__(message)
        self.limit = limit


class RateUnavailable(ConverterError):
    def __init__(self, code: str) -> None:
        super().__init__(f"No exchange rate available for {code}")
        self.code = code


class PersistenceError(ConverterError):
    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


__all__ = [
    "BadResponse",
    "ConverterError",
    "DecodeError",
    "FetchError",
    "FetchTimeout",
    "LimitExceeded",
    "NetworkError",
    "PersistenceError",
    "RateUnavailable",
]
