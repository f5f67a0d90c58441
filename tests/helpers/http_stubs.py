from __future__ import annotations

from typing import Any

import requests


class StubResponse:
    def __init__(self, payload: Any, *, status_code: int = 200, text: str | None = None) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else repr(payload)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)  # type: ignore[arg-type]

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class StubSession:
    def __init__(self, payload: Any = None, *, response: StubResponse | None = None, error: Exception | None = None):
        self._response = response or StubResponse(payload)
        self._error = error
        self.requests: list[dict[str, Any]] = []

    @property
    def last_request(self) -> dict[str, Any] | None:
        return self.requests[-1] if self.requests else None

    def mount(self, prefix: str, adapter: Any) -> None:  # pragma: no cover - test helper
        return None

    def request(
        self, method: str, url: str, params: dict[str, Any] | None = None, timeout: float | None = None
    ) -> StubResponse:
        self.requests.append({"method": method, "url": url, "params": params, "timeout": timeout})
        if self._error is not None:
            raise self._error
        return self._response
