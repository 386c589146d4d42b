# contract_repo.py
from __future__ import annotations

import logging
from typing import Any, Iterable, Union

from base_repo import BaseEntityRepo, Clock, IdFactory
from blueprint_repo import BlueprintRepo
from contract_filter_sort import ContractFilter, ContractSort, apply_filter, apply_sort, matches_query
from contracts_domain import Contract, ContractField
from dashboard import DashboardFilter, get_statuses_for_filter
from errors import (
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    Result,
    ValidationError,
)
from lifecycle import ContractStatus, can_transition, get_valid_transitions, is_field_edit_status, parse_status
from validators import Validator as V

logger = logging.getLogger(__name__)

FieldInput = Union[ContractField, dict[str, Any]]


class ContractRepo(BaseEntityRepo[Contract]):
    """
    Репозиторий договоров. Все пути записи проходят через проверки:
      - поля договора: копия полей шаблона на момент создания;
      - статус меняется только по таблице переходов (lifecycle);
      - значения полей меняются только в CREATED и SENT.
    Неудача операции никогда не применяется частично.

    События:
      - "contract_created"      payload: Contract
      - "contract_updated"      payload: Contract
      - "contract_transitioned" payload: dict(id=..., from=..., to=...)
      - "contract_deleted"      payload: dict(id=...)
    """

    NAMESPACE = "EURUSYS_Contracts"

    def __init__(
        self,
        blueprints: BlueprintRepo,
        *,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        super().__init__(clock=clock, id_factory=id_factory)
        self._blueprints = blueprints

    def _to_record(self, item: Contract) -> dict[str, Any]:
        return item.to_dict()

    def _from_record(self, rec: Any) -> Contract:
        return Contract.from_dict(rec)

    def _not_found(self, contract_id: str) -> Result[Contract]:
        return Result.failure(
            NotFoundError(f"Договор с id={contract_id} не найден", entity_id=contract_id)
        )

    # -------------------------- Операции чтения ------------------------

    def get_contract(self, contract_id: str) -> Contract | None:
        c = self._items.get(contract_id)
        return self._detached(c) if c else None

    def list_contracts(self) -> list[Contract]:
        return [self._detached(c) for c in self._items.values()]

    def search_contracts(self, query: str) -> list[Contract]:
        """Без учёта регистра: подстрока в имени договора или в имени шаблона."""
        return [self._detached(c) for c in self._items.values() if matches_query(c, query)]

    def get_contracts_by_filter(self, flt: DashboardFilter | str) -> list[Contract]:
        statuses = get_statuses_for_filter(flt)
        return [self._detached(c) for c in self._items.values() if c.status in statuses]

    def get_count(self, *, flt: ContractFilter | None = None) -> int:
        return len(apply_filter(self._items.values(), flt))

    def get_k_n(
        self,
        k: int,
        n: int,
        *,
        flt: ContractFilter | None = None,
        sort: ContractSort | None = None,
    ) -> list[Contract]:
        """Страница k (с 1) по n договоров после фильтра и сортировки."""
        if not (isinstance(k, int) and isinstance(n, int) and k > 0 and n > 0):
            raise ValueError("k и n должны быть положительными целыми числами")
        rows = apply_sort(apply_filter(self._items.values(), flt), sort)
        start = (k - 1) * n
        return [self._detached(c) for c in rows[start:start + n]]

    # -------------------------- Мутации набора -------------------------

    def create_contract(self, name: str, blueprint_id: str) -> Result[Contract]:
        try:
            clean_name = V.require_non_empty("name", name)
        except ValidationError as exc:
            logger.warning("Договор не создан: %s", exc.message)
            return Result.failure(exc)

        blueprint = self._blueprints.get_blueprint(blueprint_id)
        if blueprint is None:
            logger.warning("Договор не создан: шаблон id=%s не найден", blueprint_id)
            return Result.failure(
                NotFoundError(f"Шаблон с id={blueprint_id} не найден", entity_id=blueprint_id)
            )

        now = self.now()
        contract = Contract(
            id=self._new_id(),
            name=clean_name,
            blueprint_id=blueprint.id,
            blueprint_name=blueprint.name,
            status=ContractStatus.CREATED,
            fields=[ContractField.snapshot_of(bf) for bf in blueprint.sorted_fields()],
            created_at=now,
            updated_at=now,
        )
        self._items[contract.id] = contract
        logger.info("Договор id=%s создан из шаблона id=%s", contract.id, blueprint.id)
        self.notify("contract_created", self._detached(contract))
        return Result.success(self._detached(contract))

    def update_contract_fields(self, contract_id: str, fields: Iterable[FieldInput]) -> Result[Contract]:
        """
        Полностью заменяет список полей договора.
        Разрешено только в CREATED и SENT; кто какое поле правит (editable_by)
        решает слой представления, см. field_access.
        """
        current = self._items.get(contract_id)
        if current is None:
            return self._not_found(contract_id)

        if not is_field_edit_status(current.status):
            logger.warning("Нельзя менять поля договора id=%s в статусе %s", contract_id, current.status.value)
            return Result.failure(
                InvalidStateError(
                    f"Поля договора нельзя менять в статусе {current.status.value}",
                    entity_id=contract_id,
                    status=current.status,
                )
            )

        try:
            if isinstance(fields, (str, bytes, dict)):
                raise ValidationError("Поле 'fields' должно быть списком полей.")
            new_fields = [
                ContractField.from_dict(f.to_dict() if isinstance(f, ContractField) else f)
                for f in fields
            ]
        except ValidationError as exc:
            exc.entity_id = contract_id
            return Result.failure(exc)

        updated = Contract(
            id=current.id,
            name=current.name,
            blueprint_id=current.blueprint_id,
            blueprint_name=current.blueprint_name,
            status=current.status,
            fields=new_fields,
            created_at=current.created_at,
            updated_at=self.now(),
        )
        self._items[contract_id] = updated
        self.notify("contract_updated", self._detached(updated))
        return Result.success(self._detached(updated))

    def transition_status(self, contract_id: str, new_status: ContractStatus | str) -> Result[Contract]:
        current = self._items.get(contract_id)
        if current is None:
            return self._not_found(contract_id)

        try:
            target = parse_status(new_status)
        except ValidationError as exc:
            exc.entity_id = contract_id
            return Result.failure(exc)

        if not can_transition(current.status, target):
            allowed = get_valid_transitions(current.status)
            msg = (
                f"Недопустимый переход {current.status.value} -> {target.value}. "
                f"Разрешено: {', '.join(s.value for s in allowed) or 'ничего'}"
            )
            logger.warning("Договор id=%s: %s", contract_id, msg)
            return Result.failure(
                InvalidTransitionError(
                    msg,
                    entity_id=contract_id,
                    current=current.status,
                    requested=target,
                    allowed=allowed,
                )
            )

        previous = current.status
        updated = Contract(
            id=current.id,
            name=current.name,
            blueprint_id=current.blueprint_id,
            blueprint_name=current.blueprint_name,
            status=target,
            fields=current.fields,
            created_at=current.created_at,
            updated_at=self.now(),
        )
        self._items[contract_id] = updated
        logger.info("Договор id=%s: %s -> %s", contract_id, previous.value, target.value)
        self.notify("contract_transitioned", {"id": contract_id, "from": previous, "to": target})
        return Result.success(self._detached(updated))

    def delete_contract(self, contract_id: str) -> bool:
        """
        Жёсткое удаление из любого статуса (в отличие от отзыва: это не переход).
        """
        if contract_id not in self._items:
            return False
        removed = self._items.pop(contract_id)
        logger.info("Договор id=%s удалён (статус был %s)", contract_id, removed.status.value)
        self.notify("contract_deleted", {"id": contract_id})
        return True
