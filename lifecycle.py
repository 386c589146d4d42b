# lifecycle.py
from __future__ import annotations

from enum import Enum
from typing import Any

from errors import ValidationError


class ContractStatus(str, Enum):
    CREATED = "CREATED"
    APPROVED = "APPROVED"
    SENT = "SENT"
    SIGNED = "SIGNED"
    LOCKED = "LOCKED"
    REVOKED = "REVOKED"


# Порядок внутри кортежа = порядок кнопок действий в UI.
# APPROVED -> CREATED: единственный шаг назад ("вернуть в черновик").
TRANSITIONS: dict[ContractStatus, tuple[ContractStatus, ...]] = {
    ContractStatus.CREATED: (ContractStatus.APPROVED, ContractStatus.REVOKED),
    ContractStatus.APPROVED: (
        ContractStatus.SENT,
        ContractStatus.REVOKED,
        ContractStatus.CREATED,
    ),
    ContractStatus.SENT: (ContractStatus.SIGNED, ContractStatus.REVOKED),
    ContractStatus.SIGNED: (ContractStatus.LOCKED,),
    ContractStatus.LOCKED: (),
    ContractStatus.REVOKED: (),
}

STATUS_LABELS: dict[ContractStatus, str] = {
    ContractStatus.CREATED: "Created",
    ContractStatus.APPROVED: "Approved",
    ContractStatus.SENT: "Sent",
    ContractStatus.SIGNED: "Signed",
    ContractStatus.LOCKED: "Locked",
    ContractStatus.REVOKED: "Revoked",
}

# Статусы, в которых значения полей ещё можно менять
FIELD_EDIT_STATUSES: frozenset[ContractStatus] = frozenset(
    {ContractStatus.CREATED, ContractStatus.SENT}
)

# Новый статус без строки в таблице или без подписи: ошибка на импорте
_missing = [s.value for s in ContractStatus if s not in TRANSITIONS or s not in STATUS_LABELS]
if _missing:
    raise RuntimeError(f"Статусы без правил перехода/подписи: {', '.join(_missing)}")


def parse_status(value: Any) -> ContractStatus:
    """Строка/Enum -> ContractStatus. Неизвестное значение -> ValidationError."""
    if isinstance(value, ContractStatus):
        return value
    try:
        return ContractStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Неизвестный статус '{value}'. Допустимо: "
            f"{', '.join(s.value for s in ContractStatus)}."
        ) from None


def _coerce(value: Any) -> ContractStatus | None:
    try:
        return parse_status(value)
    except ValidationError:
        return None


def get_valid_transitions(current: Any) -> tuple[ContractStatus, ...]:
    """Разрешённые переходы из `current` (пусто для терминальных и неизвестных)."""
    status = _coerce(current)
    if status is None:
        return ()
    return TRANSITIONS[status]


def can_transition(current: Any, target: Any) -> bool:
    """
    True, если переход current -> target есть в таблице.
    Не бросает исключений; переход в тот же статус всегда запрещён.
    """
    src, dst = _coerce(current), _coerce(target)
    if src is None or dst is None or src is dst:
        return False
    return dst in TRANSITIONS[src]


def is_terminal(status: Any) -> bool:
    s = parse_status(status)
    return not TRANSITIONS[s]


def is_field_edit_status(status: Any) -> bool:
    return parse_status(status) in FIELD_EDIT_STATUSES
