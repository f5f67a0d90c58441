# flake8: noqa E402
# Run via uv to load project deps, e.g.:
# uv run scripts/rates_probe.py --code EUR --code BTC --amount 100 --from USD
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import config
from domain.catalog import find_currency
from domain.currency import Currency
from domain.errors import FetchError
from services.conversion_engine import ConversionEngine
from services.engine_builder import build_rate_provider
from services.key_value_store import InMemoryKeyValueStore
from services.rate_cache import RateCache
from services.selection_registry import SelectionRegistry


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch live fiat and crypto rates and convert an amount.")
    parser.add_argument(
        "--code",
        action="append",
        dest="codes",
        help="Currency code to fetch (repeatable). Defaults to the configured default selection.",
    )
    parser.add_argument("--amount", type=float, default=1.0, help="Amount to convert (default: 1).")
    parser.add_argument("--from", dest="from_code", default=None, help="Currency of --amount (default: base).")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def resolve_currencies(codes: list[str]) -> list[Currency]:
    resolved: list[Currency] = []
    for code in codes:
        currency = find_currency(code)
        if currency is None:
            raise SystemExit(f"Unknown currency code: {code}")
        resolved.append(currency)
    return resolved


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    settings = config()
    currencies = resolve_currencies(args.codes or settings.default_currency_codes)

    provider = build_rate_provider(settings)
    try:
        result = provider.fetch(currencies)
    except FetchError as exc:
        raise SystemExit(f"Rate fetch failed: {exc}") from exc

    store = InMemoryKeyValueStore()
    registry = SelectionRegistry(store, default_codes=[currency.code for currency in currencies])
    cache = RateCache(store)
    cache.save(result.rates, fetched_at=datetime.now(timezone.utc))

    with ConversionEngine(
        provider=provider,
        registry=registry,
        cache=cache,
        base_currency=settings.base_currency,
    ) as engine:
        engine.update_amount(args.amount, args.from_code or settings.base_currency)
        payload: dict[str, Any] = {
            "base": settings.base_currency,
            "partial": result.is_partial,
            "failures": [str(failure) for failure in result.failures],
            "quotes": {
                code: {"rate": quote.rate, "convention": quote.convention.value, "source": quote.source}
                for code, quote in sorted(result.quotes.items())
            },
            "amounts": {
                currency.code: (amount if engine.has_rate(currency.code) else None)
                for currency, amount in engine.display_amounts()
            },
        }
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
