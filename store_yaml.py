# store_yaml.py
from __future__ import annotations

import os
from typing import Any

import yaml  # type: ignore[import-untyped]

from base_store import BaseFileStore
from errors import StoreError


class YamlFileStore(BaseFileStore):
    def derive_path(self, namespace: str) -> str:
        return os.path.join(self.directory, f"{namespace}.yaml")

    def _read_array(self, path: str) -> list[dict[str, Any]]:
        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise StoreError(f"{path}: некорректный YAML: {exc}") from exc
        return self._ensure_array(data, path)

    def _write_array(self, path: str, records: list[dict[str, Any]]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                records,
                f,
                allow_unicode=True,
                sort_keys=False,
                indent=2,
                default_flow_style=False,
            )
