# base_store.py
from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Any

from errors import StoreError


class BaseStore(ABC):
    """
    Хранилище ключ-значение: namespace -> массив записей (list[dict]).
    Один namespace на репозиторий. Конкретные реализации (JSON/YAML/БД/память)
    переопределяют load/save.

    Реализации должны:
      - вернуть None из load(), если под namespace ещё ничего не сохранено;
      - оборачивать любые ошибки источника в StoreError.
    """

    @abstractmethod
    def load(self, namespace: str) -> list[dict[str, Any]] | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, namespace: str, records: list[dict[str, Any]]) -> None:
        raise NotImplementedError

    @staticmethod
    def _ensure_array(data: Any, source: str) -> list[dict[str, Any]]:
        """Проверка формата: снимок: массив объектов."""
        if data is None:
            return []
        if not isinstance(data, list):
            raise StoreError(f"{source}: ожидался массив объектов (список).")
        # элементы не-объекты не выкидываем: restore() пометит их как ошибки
        return list(data)


class BaseFileStore(BaseStore):
    """
    Файловое хранилище: один файл на namespace в каталоге `directory`.
    Форматы (JSON/YAML) переопределяют derive_path/_read_array/_write_array.
    Запись идёт во временный файл и подменяется через os.replace,
    чтобы упавшая запись не портила прошлый снимок.
    """

    def __init__(self, directory: str) -> None:
        self.directory = directory

    # ---------- НИЗКИЙ УРОВЕНЬ: абстракции формата ----------

    @abstractmethod
    def derive_path(self, namespace: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def _read_array(self, path: str) -> list[dict[str, Any]]:
        """
        Прочитать массив записей из файла `path`.
        Кидает FileNotFoundError если файла нет, StoreError при кривом формате.
        """
        raise NotImplementedError

    @abstractmethod
    def _write_array(self, path: str, records: list[dict[str, Any]]) -> None:
        raise NotImplementedError

    # ---------------------- ключ-значение ----------------------

    def load(self, namespace: str) -> list[dict[str, Any]] | None:
        path = self.derive_path(namespace)
        try:
            return self._read_array(path)
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise StoreError(f"{path}: файл не в кодировке UTF-8: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Не удалось прочитать {path}: {exc}") from exc

    def save(self, namespace: str, records: list[dict[str, Any]]) -> None:
        path = self.derive_path(namespace)
        tmp_path = f"{path}.tmp"
        try:
            os.makedirs(self.directory, exist_ok=True)
            self._write_array(tmp_path, records)
            os.replace(tmp_path, path)
        except OSError as exc:
            raise StoreError(f"Не удалось записать {path}: {exc}") from exc
