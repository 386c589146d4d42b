# errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class CoreError(Exception):
    """
    Базовая доменная ошибка ядра.
    Формат to_dict() совпадает с форматом ошибок файловых репозиториев:
    {"id", "error_type", "message"}.
    """

    error_type = "CoreError"

    def __init__(self, message: str, *, entity_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.entity_id = entity_id

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.entity_id, "error_type": self.error_type, "message": self.message}


class ValidationError(CoreError, ValueError):
    error_type = "ValidationError"


class NotFoundError(CoreError, LookupError):
    error_type = "NotFound"


class InvalidStateError(CoreError):
    """Изменение полей в статусе, где оно запрещено."""

    error_type = "InvalidState"

    def __init__(self, message: str, *, entity_id: str | None = None, status: Any = None) -> None:
        super().__init__(message, entity_id=entity_id)
        self.status = status


class InvalidTransitionError(CoreError):
    """
    Недопустимый переход статуса. Хранит текущий статус, запрошенный
    и полный набор разрешённых переходов (для сообщения в UI).
    """

    error_type = "InvalidTransition"

    def __init__(
        self,
        message: str,
        *,
        entity_id: str | None = None,
        current: Any = None,
        requested: Any = None,
        allowed: tuple[Any, ...] = (),
    ) -> None:
        super().__init__(message, entity_id=entity_id)
        self.current = current
        self.requested = requested
        self.allowed = tuple(allowed)

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["current"] = getattr(self.current, "value", self.current)
        d["requested"] = getattr(self.requested, "value", self.requested)
        d["allowed"] = [getattr(s, "value", s) for s in self.allowed]
        return d


class StoreError(Exception):
    """Ошибка хранилища (файл недоступен, БД упала, кривой формат)."""


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """
    Итог операции ядра: либо value, либо error.
    Истинен, если операция прошла: `if repo.transition_status(...): ...`
    """

    value: T | None = None
    error: CoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: CoreError) -> Result[T]:
        return cls(error=error)
