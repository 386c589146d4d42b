from __future__ import annotations

from contracts_domain import Contract, ContractField, EditableBy
from lifecycle import ContractStatus, parse_status

_MANAGER_SIDE = frozenset({EditableBy.MANAGER, EditableBy.BOTH})
_CLIENT_SIDE = frozenset({EditableBy.CLIENT, EditableBy.BOTH})


def is_field_editable(f: ContractField, status: ContractStatus | str) -> bool:
    """
    CREATED -> правит менеджер (MANAGER/BOTH), SENT -> клиент (CLIENT/BOTH).
    В остальных статусах поля только для чтения.
    """
    s = parse_status(status)
    editable_by = f.editable_by or EditableBy.MANAGER
    if s is ContractStatus.CREATED:
        return editable_by in _MANAGER_SIDE
    if s is ContractStatus.SENT:
        return editable_by in _CLIENT_SIDE
    return False


def editable_field_ids(contract: Contract) -> list[str]:
    return [
        f.id
        for f in sorted(contract.fields, key=lambda x: x.position)
        if is_field_editable(f, contract.status)
    ]
