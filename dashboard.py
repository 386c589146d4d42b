# dashboard.py
from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from lifecycle import ContractStatus, parse_status


class DashboardFilter(str, Enum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    SIGNED = "SIGNED"
    ARCHIVED = "ARCHIVED"


_BUCKETS: dict[DashboardFilter, frozenset[ContractStatus]] = {
    DashboardFilter.ACTIVE: frozenset({ContractStatus.CREATED, ContractStatus.APPROVED}),
    DashboardFilter.PENDING: frozenset({ContractStatus.SENT}),
    DashboardFilter.SIGNED: frozenset({ContractStatus.SIGNED, ContractStatus.LOCKED}),
    DashboardFilter.ARCHIVED: frozenset({ContractStatus.REVOKED}),
}

_FILTER_BY_STATUS: dict[ContractStatus, DashboardFilter] = {
    s: flt for flt, statuses in _BUCKETS.items() for s in statuses
}

# каждый статус ровно в одной корзине
if set(_FILTER_BY_STATUS) != set(ContractStatus) or sum(map(len, _BUCKETS.values())) != len(ContractStatus):
    raise RuntimeError("Корзины дашборда должны разбивать статусы без пропусков и пересечений")

# шкала на карточке договора (REVOKED в неё не входит)
LIFECYCLE_STEPS: tuple[ContractStatus, ...] = (
    ContractStatus.CREATED,
    ContractStatus.APPROVED,
    ContractStatus.SENT,
    ContractStatus.SIGNED,
    ContractStatus.LOCKED,
)


def parse_filter(value: Any) -> DashboardFilter:
    if isinstance(value, DashboardFilter):
        return value
    return DashboardFilter(str(value).strip().upper())


def get_statuses_for_filter(flt: DashboardFilter | str) -> frozenset[ContractStatus]:
    return _BUCKETS[parse_filter(flt)]


def get_filter_for_status(status: ContractStatus | str) -> DashboardFilter:
    return _FILTER_BY_STATUS[parse_status(status)]


def summarize(statuses: Iterable[ContractStatus | str]) -> dict[str, int]:
    """Счётчики для шапки дашборда: по корзинам + total."""
    counts = {flt.value: 0 for flt in DashboardFilter}
    total = 0
    for s in statuses:
        counts[get_filter_for_status(s).value] += 1
        total += 1
    counts["total"] = total
    return counts


def lifecycle_step_states(status: ContractStatus | str) -> dict[ContractStatus, str]:
    """
    Состояние каждого шага шкалы: completed | current | pending.
    Для отозванного договора все шаги: revoked.
    """
    current = parse_status(status)
    if current is ContractStatus.REVOKED:
        return {step: "revoked" for step in LIFECYCLE_STEPS}

    cur_idx = LIFECYCLE_STEPS.index(current)
    states: dict[ContractStatus, str] = {}
    for idx, step in enumerate(LIFECYCLE_STEPS):
        if idx < cur_idx:
            states[step] = "completed"
        elif idx == cur_idx:
            states[step] = "current"
        else:
            states[step] = "pending"
    return states


def signature_status(status: ContractStatus | str) -> str:
    s = parse_status(status)
    if s is ContractStatus.SENT:
        return "pending"
    if s in (ContractStatus.SIGNED, ContractStatus.LOCKED):
        return "signed"
    return "drafting"
