# persistence.py
from __future__ import annotations

import logging
from typing import Any

from base_repo import BaseEntityRepo
from base_store import BaseStore
from errors import StoreError

logger = logging.getLogger(__name__)


class StorePersistence:
    """
    Наблюдатель за репозиторием: загрузка один раз при старте
    и синхронное сохранение полного снимка после каждой мутации.

    Ошибка хранилища не ломает работу: пишем warning, запоминаем
    в last_error, состояние в памяти остаётся главным до конца сессии.
    """

    def __init__(self, repo: BaseEntityRepo[Any], store: BaseStore) -> None:
        self.repo = repo
        self.store = store
        self.namespace = repo.NAMESPACE
        self.last_error: StoreError | None = None

    def load(self) -> list[dict[str, Any]]:
        """Восстанавливает репозиторий из хранилища. Возвращает ошибки по битым записям."""
        try:
            records = self.store.load(self.namespace)
        except StoreError as exc:
            self.last_error = exc
            logger.warning("Не удалось загрузить %s, стартуем с пустым набором: %s", self.namespace, exc)
            return []

        errors = self.repo.restore(records, tolerant=True)
        for err in errors:
            logger.warning(
                "%s: запись #%s (id=%s) пропущена: %s: %s",
                self.namespace,
                err["display_index"],
                err["id"],
                err["error_type"],
                err["message"],
            )
        logger.debug("%s: загружено записей: %d", self.namespace, len(self.repo))
        return errors

    def save(self) -> bool:
        try:
            self.store.save(self.namespace, self.repo.snapshot())
        except StoreError as exc:
            self.last_error = exc
            logger.warning("Не удалось сохранить %s (данные в памяти актуальны): %s", self.namespace, exc)
            return False
        self.last_error = None
        logger.debug("%s: снимок сохранён (%d записей)", self.namespace, len(self.repo))
        return True

    # Observer
    def update(self, event: str, payload: Any) -> None:
        self.save()


def bind_persistence(repo: BaseEntityRepo[Any], store: BaseStore) -> StorePersistence:
    """Загружает репозиторий из хранилища и подписывает сохранение на его события."""
    persistence = StorePersistence(repo, store)
    persistence.load()
    repo.attach(persistence)
    return persistence
