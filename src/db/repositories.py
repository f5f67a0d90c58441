from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db import models
from domain.errors import PersistenceError
from services.key_value_store import KeyValueStore


class SqlKeyValueStore(KeyValueStore):
    """Key-value blobs in a single SQL table, one short-lived session per call."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> bytes | None:
        try:
            with self._session_factory() as session:
                entry = session.get(models.KeyValueEntryOrm, key)
                if entry is None:
                    return None
                return bytes(entry.value)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to read {key!r} from store", key=key) from exc

    def set(self, key: str, value: bytes) -> None:
        try:
            with self._session_factory() as session:
                entry = session.get(models.KeyValueEntryOrm, key)
                now = datetime.now(timezone.utc)
                if entry is None:
                    session.add(models.KeyValueEntryOrm(key=key, value=bytes(value), updated_at=now))
                else:
                    entry.value = bytes(value)
                    entry.updated_at = now
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to write {key!r} to store", key=key) from exc

    def keys(self) -> list[str]:
        try:
            with self._session_factory() as session:
                return [row.key for row in session.query(models.KeyValueEntryOrm).order_by(models.KeyValueEntryOrm.key)]
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to list store keys") from exc


__all__ = ["SqlKeyValueStore"]
