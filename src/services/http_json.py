from __future__ import annotations

import logging
from typing import Any

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

from domain.errors import BadResponse, DecodeError, FetchTimeout, NetworkError

logger = logging.getLogger(__name__)


def build_session(
    *,
    retry_attempts: int = 0,
    retry_backoff_seconds: float = 1,
    session: requests.Session | None = None,
) -> requests.Session:
    """Session with throttling-only retries (HTTP 429 on GET); zero attempts means no retry."""
    resolved = session or requests.Session()
    retries = Retry(
        total=retry_attempts,
        backoff_factor=retry_backoff_seconds,
        status_forcelist=[429],
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retries)
    resolved.mount("https://", adapter)
    resolved.mount("http://", adapter)
    return resolved


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    source: str,
    timeout: float,
    params: dict[str, Any] | None = None,
) -> Any:
    logger.debug("%s request %s %s params=%s", source, method, url, params)
    try:
        response = session.request(method, url, params=params, timeout=timeout)
        response.raise_for_status()
    except requests.Timeout as exc:
        raise FetchTimeout(f"{source} request timed out after {timeout}s", source=source) from exc
    except requests.HTTPError as exc:
        resp = exc.response
        status_code = getattr(resp, "status_code", None)
        message, payload = _extract_error(resp, default=f"{source} request failed")
        raise BadResponse(message, source=source, status_code=status_code, payload=payload) from exc
    except requests.RequestException as exc:
        status_code = getattr(getattr(exc, "response", None), "status_code", None)
        raise NetworkError(f"{source} request failed", source=source, status_code=status_code) from exc

    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(f"{source} returned invalid JSON", source=source, payload=response.text) from exc


def _extract_error(response: Response | None, *, default: str) -> tuple[str, Any | None]:
    message = default
    payload: Any | None = None
    if response is None:
        return message, payload

    try:
        payload = response.json()
        if isinstance(payload, dict):
            detail = payload.get("error-type") or payload.get("error") or payload.get("message")
            if isinstance(detail, str) and detail:
                message = detail
    except ValueError:
        payload = response.text
    return message, payload


__all__ = ["build_session", "request_json"]
