from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CurrencyClass(StrEnum):
    FIAT = "FIAT"
    CRYPTO = "CRYPTO"


class Currency(BaseModel):
    """A selectable currency.

    Identity is the code alone: two currencies with the same code are equal and
    hash the same regardless of name or class.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str
    name: str
    currency_class: CurrencyClass = Field(alias="class")

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("Currency.code must be non-empty")
        return code

    @field_validator("currency_class", mode="before")
    @classmethod
    def _normalize_class(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @property
    def is_crypto(self) -> bool:
        return self.currency_class == CurrencyClass.CRYPTO

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self.code == other.code

    def __hash__(self) -> int:
        return hash(self.code)

    def to_record(self) -> dict[str, str]:
        return self.model_dump(mode="json", by_alias=True)


def fiat(code: str, name: str) -> Currency:
    return Currency(code=code, name=name, currency_class=CurrencyClass.FIAT)


def crypto(code: str, name: str) -> Currency:
    return Currency(code=code, name=name, currency_class=CurrencyClass.CRYPTO)


__all__ = ["Currency", "CurrencyClass", "crypto", "fiat"]
