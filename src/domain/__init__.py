"""Domain models and types for the currency conversion engine.

This package holds the currency value type, the built-in currency catalog,
and the rate conventions the engine relies on. Nothing here depends on
HTTP or persistence details; those live in ``services`` and ``db`` and are
injected through the protocols in ``domain.rates``.
"""

__all__ = [
    "catalog",
    "currency",
    "errors",
    "rates",
]
