from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar

from errors import ValidationError

E = TypeVar("E", bound=Enum)


class Validator:
    """Общий класс валидации для шаблонов, договоров и их полей."""

    # Валидация

    @staticmethod
    def require_non_empty(name: str, value: Any) -> str:
        """Требуем, чтобы не было пустых полей (пробелы тоже считаем пустотой)."""
        v = "" if value is None else str(value).strip()
        if not v:
            raise ValidationError(f"Поле '{name}' обязательно и не может быть пустым.")
        return v

    @staticmethod
    def enum_value(name: str, value: Any, enum_cls: type[E]) -> E:
        """Значение перечисления по самому Enum или по его строковому значению."""
        if isinstance(value, enum_cls):
            return value
        raw = Validator.require_non_empty(name, value)
        try:
            return enum_cls(raw.upper())
        except ValueError:
            allowed = ", ".join(str(m.value) for m in enum_cls)
            raise ValidationError(
                f"Поле '{name}' имеет недопустимое значение '{raw}'. Допустимо: {allowed}."
            ) from None

    @staticmethod
    def integer(name: str, value: Any) -> int:
        # bool: тоже int, но позицией он быть не должен
        if isinstance(value, bool):
            raise ValidationError(f"Поле '{name}' должно быть целым числом.")
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value.strip())
        raise ValidationError(f"Поле '{name}' должно быть целым числом.")

    @staticmethod
    def optional_text(name: str, value: Any) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(f"Поле '{name}' должно быть строкой.")
        return value

    @staticmethod
    def timestamp(name: str, value: Any) -> datetime:
        """ISO-8601 строка или datetime. Без часового пояса: считаем UTC."""
        if isinstance(value, datetime):
            parsed = value
        else:
            raw = Validator.require_non_empty(name, value)
            try:
                parsed = datetime.fromisoformat(raw)
            except ValueError:
                raise ValidationError(
                    f"Поле '{name}' должно быть датой-временем в формате ISO-8601, получено '{raw}'."
                ) from None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def flag(name: str, value: Any, default: bool = False) -> bool:
        """Только настоящий bool (или null -> default): строка "false" не флаг."""
        if value is None:
            return default
        if not isinstance(value, bool):
            raise ValidationError(f"Поле '{name}' должно быть true/false.")
        return value

    @staticmethod
    def unique_positions(positions: list[int]) -> list[int]:
        """Позиции в пределах шаблона уникальны; непрерывность не нужна."""
        seen: set[int] = set()
        dups: list[int] = []
        for p in positions:
            if p in seen and p not in dups:
                dups.append(p)
            seen.add(p)
        if dups:
            raise ValidationError(
                f"Позиции полей должны быть уникальны, повторяются: {', '.join(map(str, dups))}."
            )
        return positions

    @staticmethod
    def email_loose(value: Any) -> str:
        """Адрес получателя: непустой и с одним '@' (доставка всё равно имитируется)."""
        v = Validator.require_non_empty("recipient_email", value)
        if v.count("@") != 1 or v.startswith("@") or v.endswith("@"):
            raise ValidationError("Поле 'recipient_email' должно содержать ровно один символ '@'.")
        return v
