from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from contracts_domain import Contract
from lifecycle import ContractStatus


@dataclass
class ContractFilter:
    # подстроковые (без учёта регистра)
    name_substr: Optional[str] = None
    # точные совпадения
    blueprint_id: Optional[str] = None
    statuses: Optional[frozenset[ContractStatus]] = None
    # диапазон updated_at (включительно)
    updated_from: Optional[datetime] = None
    updated_to: Optional[datetime] = None


@dataclass
class ContractSort:
    by: str = "updated_at"  # updated_at | created_at | name
    asc: bool = False


_ALLOWED_SORT = ("updated_at", "created_at", "name")


def _case_contains(hay: str | None, needle: str | None) -> bool:
    if not needle:
        return True
    return (hay or "").casefold().find(needle.casefold()) >= 0


def _aware(moment: datetime | None) -> datetime | None:
    # границы без пояса сравниваем как UTC, даты договоров всегда с поясом
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def matches_query(c: Contract, query: str) -> bool:
    """Строка поиска: подстрока в имени договора ИЛИ в имени шаблона."""
    q = (query or "").casefold()
    return q in c.name.casefold() or q in (c.blueprint_name or "").casefold()


def apply_filter(contracts: Iterable[Contract], flt: ContractFilter | None) -> list[Contract]:
    if not flt:
        return list(contracts)

    updated_from = _aware(flt.updated_from)
    updated_to = _aware(flt.updated_to)
    out: list[Contract] = []
    for c in contracts:
        if not _case_contains(c.name, flt.name_substr):
            continue
        if flt.blueprint_id and c.blueprint_id != flt.blueprint_id:
            continue
        if flt.statuses is not None and c.status not in flt.statuses:
            continue
        if updated_from and (not c.updated_at or c.updated_at < updated_from):
            continue
        if updated_to and (not c.updated_at or c.updated_at > updated_to):
            continue
        out.append(c)
    return out


def apply_sort(contracts: list[Contract], sort: ContractSort | None) -> list[Contract]:
    if not sort:
        sort = ContractSort()
    key = (sort.by or "").lower()
    if key not in _ALLOWED_SORT:
        key = "updated_at"

    if key == "name":
        return sorted(contracts, key=lambda c: c.name.casefold(), reverse=not sort.asc)
    # sorted() устойчив: при равных датах сохраняется порядок создания
    return sorted(
        contracts,
        key=lambda c: getattr(c, key),
        reverse=not sort.asc,
    )
