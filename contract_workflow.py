# contract_workflow.py
from __future__ import annotations

import logging
from typing import Optional

from contract_repo import ContractRepo
from contracts_domain import Contract, FieldType, FieldValue
from errors import InvalidTransitionError, NotFoundError, Result, ValidationError
from lifecycle import ContractStatus, can_transition, get_valid_transitions
from validators import Validator as V

logger = logging.getLogger(__name__)


def set_field_value(
    repo: ContractRepo,
    contract_id: str,
    field_id: str,
    value: FieldValue,
) -> Result[Contract]:
    """Меняет значение одного поля и сохраняет список полей целиком."""
    contract = repo.get_contract(contract_id)
    if contract is None:
        return Result.failure(
            NotFoundError(f"Договор с id={contract_id} не найден", entity_id=contract_id)
        )
    if not any(f.id == field_id for f in contract.fields):
        return Result.failure(
            NotFoundError(f"Поле id={field_id} в договоре не найдено", entity_id=field_id)
        )

    fields = [f.to_dict() for f in contract.fields]
    for rec in fields:
        if rec["id"] == field_id:
            rec["value"] = value
    return repo.update_contract_fields(contract_id, fields)


def send_contract(repo: ContractRepo, contract_id: str, recipient_email: str) -> Result[Contract]:
    """
    Отправка клиенту: переводит договор в SENT.
    Реальной доставки нет, только запись в лог.
    """
    try:
        email = V.email_loose(recipient_email)
    except ValidationError as exc:
        exc.entity_id = contract_id
        return Result.failure(exc)

    res = repo.transition_status(contract_id, ContractStatus.SENT)
    if res:
        logger.info("Договор id=%s отправлен на %s (имитация)", contract_id, email)
    return res


def sign_contract(
    repo: ContractRepo,
    contract_id: str,
    signature: Optional[str] = None,
) -> Result[Contract]:
    """
    Подпись клиентом: подпись пишется в первое поле SIGNATURE, затем переход в SIGNED.
    Переход проверяется заранее, чтобы отказ не оставил записанную подпись.
    """
    contract = repo.get_contract(contract_id)
    if contract is None:
        return Result.failure(
            NotFoundError(f"Договор с id={contract_id} не найден", entity_id=contract_id)
        )

    if not can_transition(contract.status, ContractStatus.SIGNED):
        allowed = get_valid_transitions(contract.status)
        return Result.failure(
            InvalidTransitionError(
                f"Подписать договор в статусе {contract.status.value} нельзя",
                entity_id=contract_id,
                current=contract.status,
                requested=ContractStatus.SIGNED,
                allowed=allowed,
            )
        )

    sig_field = next(
        (f for f in sorted(contract.fields, key=lambda x: x.position) if f.type is FieldType.SIGNATURE),
        None,
    )
    if sig_field is not None and signature:
        written = set_field_value(repo, contract_id, sig_field.id, signature)
        if not written:
            return written

    return repo.transition_status(contract_id, ContractStatus.SIGNED)
