from __future__ import annotations

import copy
from typing import Any

from base_store import BaseStore


class MemoryStore(BaseStore):
    """Хранилище в памяти процесса (тесты, режим без диска)."""

    def __init__(self, initial: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._data: dict[str, list[dict[str, Any]]] = copy.deepcopy(initial or {})
        self.saves = 0

    def load(self, namespace: str) -> list[dict[str, Any]] | None:
        if namespace not in self._data:
            return None
        return copy.deepcopy(self._data[namespace])

    def save(self, namespace: str, records: list[dict[str, Any]]) -> None:
        self._data[namespace] = copy.deepcopy(records)
        self.saves += 1
