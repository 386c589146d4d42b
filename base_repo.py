# base_repo.py
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Generic, TypeVar

from observer import Subject

T = TypeVar("T")

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class BaseEntityRepo(Subject, ABC, Generic[T]):
    """
    Базовый репозиторий в памяти: словарь id -> сущность (в порядке добавления)
    плюс общий снимок/восстановление из массива записей (list[dict]).
    Конкретные репозитории задают NAMESPACE и _to_record/_from_record.
    """

    NAMESPACE: str = ""

    def __init__(self, *, clock: Clock | None = None, id_factory: IdFactory | None = None) -> None:
        super().__init__()
        self._items: dict[str, T] = {}
        self._clock: Clock = clock or utc_now
        self._new_id: IdFactory = id_factory or new_id

    # ---------- абстракции формата ----------

    @abstractmethod
    def _to_record(self, item: T) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def _from_record(self, rec: Any) -> T:
        """Должен кидать ValidationError при некорректной записи."""
        raise NotImplementedError

    # ---------- служебные ----------

    def _detached(self, item: T) -> T:
        # отдаём наружу копию: правка возвращённого объекта не трогает хранилище
        return self._from_record(self._to_record(item))

    def now(self) -> datetime:
        return self._clock()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    # ---------- снимок / восстановление ----------

    def snapshot(self) -> list[dict[str, Any]]:
        """Массив записей для сохранения в хранилище."""
        return [self._to_record(i) for i in self._items.values()]

    def restore(
        self,
        records: list[Any] | None,
        *,
        tolerant: bool = True,
    ) -> list[dict[str, Any]]:
        """
        Заменяет содержимое репозитория записями из хранилища.
        Возвращает список ошибок по битым записям.
        Если tolerant=False: при первой ошибке кидает ValueError и ничего не меняет.
        """
        loaded: dict[str, T] = {}
        errors: list[dict[str, Any]] = []

        for idx, rec in enumerate(records or []):
            try:
                item = self._from_record(rec)
            except ValueError as exc:
                err: dict[str, Any] = {
                    "index": idx,
                    "display_index": idx + 1,
                    "id": rec.get("id", None) if isinstance(rec, dict) else None,
                    "error_type": type(exc).__name__,
                    "message": str(exc),
                }
                if not tolerant:
                    where = f"элемент #{err['display_index']}"
                    if err["id"] is not None:
                        where += f" (id={err['id']})"
                    raise ValueError(f"Ошибка чтения {self.NAMESPACE}: {where}: {exc}") from exc
                errors.append(err)
                continue

            item_id = getattr(item, "id")
            if item_id in loaded:
                errors.append(
                    {
                        "index": idx,
                        "display_index": idx + 1,
                        "id": item_id,
                        "error_type": "DuplicateId",
                        "message": f"Несколько записей с id={item_id}; оставляю первую",
                    }
                )
                continue
            loaded[item_id] = item

        self._items = loaded
        return errors
