"""Local persistence for saved calculations and user preferences.

Everything is kept in a string key-value store. Saved calculations live under
a single key as a JSON array, newest first.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from sipcalc.core.currency import DEFAULT_CURRENCY
from sipcalc.core.projection import is_finite_result
from sipcalc.schemas.accumulation import AccumulationRequest, AccumulationResult
from sipcalc.schemas.decumulation import DecumulationRequest, DecumulationResult
from sipcalc.schemas.saved import (
    CalculationKind,
    SavedAccumulation,
    SavedCalculation,
    SavedDecumulation,
    saved_calculations_adapter,
)

logger = logging.getLogger(__name__)

CURRENCY_KEY = "selected_currency"
SAVED_CALCULATIONS_KEY = "saved_calculations"


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteKeyValueStore(KeyValueStore):
    """Key-value store backed by a single SQLite table."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                create table if not exists kv (
                    key text primary key,
                    value text not null,
                    updated_at text not null
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("select value from kv where key = ?", (key,)).fetchone()
            return None if row is None else row["value"]
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                insert into kv (key, value, updated_at)
                values (?, ?, ?)
                on conflict(key) do update set
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(timezone.utc).isoformat(timespec="seconds")),
            )
            conn.commit()
        finally:
            conn.close()

    def remove(self, key: str) -> None:
        conn = self._connect()
        try:
            conn.execute("delete from kv where key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


def new_saved_calculation(
    request: Union[AccumulationRequest, DecumulationRequest],
    result: Union[AccumulationResult, DecumulationResult],
    currency: str,
) -> SavedCalculation:
    """Build a history record for a projection that just ran."""
    fields = dict(
        id=uuid.uuid4().hex,
        created_at=datetime.now(timezone.utc),
        currency=currency,
        # re-validated as the plain engine records, dropping input-only typing
        request=request.model_dump(),
        result=result.model_dump(),
    )
    if isinstance(request, DecumulationRequest):
        return SavedDecumulation(kind=CalculationKind.DECUMULATION, **fields)
    return SavedAccumulation(kind=CalculationKind.ACCUMULATION, **fields)


class CalculationHistory:
    """Ordered list of saved calculations, newest first, capped at ``limit``."""

    def __init__(self, store: KeyValueStore, limit: int = 50) -> None:
        self.store = store
        self.limit = limit
        self._lock = threading.Lock()

    def _load(self) -> List[SavedCalculation]:
        raw = self.store.get(SAVED_CALCULATIONS_KEY)
        if not raw:
            return []
        try:
            return saved_calculations_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable saved calculations")
            return []

    def _write(self, calculations: List[SavedCalculation]) -> None:
        payload = saved_calculations_adapter.dump_json(calculations, by_alias=True)
        self.store.set(SAVED_CALCULATIONS_KEY, payload.decode("utf-8"))

    def list(self, query: Optional[str] = None) -> List[SavedCalculation]:
        calculations = self._load()
        if not query:
            return calculations

        needle = query.strip().lower()
        return [
            calc
            for calc in calculations
            if needle in calc.kind.value or needle in calc.created_at.date().isoformat()
        ]

    def get(self, calculation_id: str) -> Optional[SavedCalculation]:
        for calc in self._load():
            if calc.id == calculation_id:
                return calc
        return None

    def save(self, calculation: SavedCalculation) -> SavedCalculation:
        # stored records must round-trip through JSON, which has no inf/nan
        if not is_finite_result(calculation.result):
            raise ValueError(f"calculation {calculation.id} has a non-finite result")
        with self._lock:
            try:
                updated = [calculation, *self._load()][: self.limit]
                self._write(updated)
            except sqlite3.Error:
                logger.exception("Error saving calculation %s", calculation.id)
                raise
        logger.info("Saved %s calculation %s", calculation.kind.value, calculation.id)
        return calculation

    def delete(self, calculation_id: str) -> bool:
        with self._lock:
            try:
                calculations = self._load()
                remaining = [calc for calc in calculations if calc.id != calculation_id]
                if len(remaining) == len(calculations):
                    return False
                self._write(remaining)
            except sqlite3.Error:
                logger.exception("Error deleting calculation %s", calculation_id)
                raise
        logger.info("Deleted calculation %s", calculation_id)
        return True

    def clear(self) -> None:
        with self._lock:
            try:
                self.store.remove(SAVED_CALCULATIONS_KEY)
            except sqlite3.Error:
                logger.exception("Error clearing calculations")
                raise
        logger.info("Cleared saved calculations")


class Preferences:
    def __init__(self, store: KeyValueStore, default_currency: str = DEFAULT_CURRENCY) -> None:
        self.store = store
        self.default_currency = default_currency

    def get_currency(self) -> str:
        return self.store.get(CURRENCY_KEY) or self.default_currency

    def set_currency(self, code: str) -> None:
        try:
            self.store.set(CURRENCY_KEY, code)
        except sqlite3.Error:
            logger.exception("Error saving currency %s", code)
            raise
        logger.info("Currency changed to %s", code)
