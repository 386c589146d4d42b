# store_json.py
from __future__ import annotations

import json
import os
from typing import Any

from base_store import BaseFileStore
from errors import StoreError


class JsonFileStore(BaseFileStore):
    def derive_path(self, namespace: str) -> str:
        return os.path.join(self.directory, f"{namespace}.json")

    def _read_array(self, path: str) -> list[dict[str, Any]]:
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise StoreError(f"{path}: некорректный JSON: {exc}") from exc
        return self._ensure_array(data, path)

    def _write_array(self, path: str, records: list[dict[str, Any]]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False, indent=2)
