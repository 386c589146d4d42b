from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from errors import ValidationError
from lifecycle import ContractStatus, parse_status
from validators import Validator as V


class FieldType(str, Enum):
    TEXT = "TEXT"
    DATE = "DATE"
    SIGNATURE = "SIGNATURE"
    CHECKBOX = "CHECKBOX"


class EditableBy(str, Enum):
    MANAGER = "MANAGER"
    CLIENT = "CLIENT"
    BOTH = "BOTH"


FieldValue = Union[str, bool, None]


def _record(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"{what}: ожидался объект (dict), получено {type(data).__name__}.")
    return data


@dataclass(slots=True)
class BlueprintField:
    id: str
    type: FieldType
    label: str
    position: int
    required: bool = False
    editable_by: EditableBy = EditableBy.MANAGER
    placeholder: Optional[str] = None
    default_checked: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "position": self.position,
            "required": self.required,
            "editable_by": self.editable_by.value,
            "placeholder": self.placeholder,
            "default_checked": self.default_checked,
        }

    @staticmethod
    def from_dict(data: Any) -> BlueprintField:
        """
        Собирает и валидирует поле шаблона.
        id может отсутствовать: его назначит репозиторий (здесь будет "").
        """
        d = _record(data, "Поле шаблона")
        ftype = V.enum_value("type", d.get("type"), FieldType)
        default_checked = d.get("default_checked")
        if default_checked is not None:
            if ftype is not FieldType.CHECKBOX:
                raise ValidationError("Поле 'default_checked' допустимо только для CHECKBOX.")
            default_checked = V.flag("default_checked", default_checked)
        return BlueprintField(
            id=str(d.get("id") or ""),
            type=ftype,
            label=V.require_non_empty("label", d.get("label")),
            position=V.integer("position", d.get("position")),
            required=V.flag("required", d.get("required")),
            editable_by=V.enum_value(
                "editable_by", d.get("editable_by") or EditableBy.MANAGER, EditableBy
            ),
            placeholder=V.optional_text("placeholder", d.get("placeholder")),
            default_checked=default_checked,
        )


@dataclass(slots=True)
class Blueprint:
    id: str
    name: str
    fields: list[BlueprintField] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def sorted_fields(self) -> list[BlueprintField]:
        return sorted(self.fields, key=lambda f: f.position)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @staticmethod
    def from_dict(data: Any) -> Blueprint:
        d = _record(data, "Шаблон")
        raw_fields = d.get("fields") or []
        if not isinstance(raw_fields, list):
            raise ValidationError("Поле 'fields' должно быть списком.")
        fields = [BlueprintField.from_dict(f) for f in raw_fields]
        V.unique_positions([f.position for f in fields])
        return Blueprint(
            id=V.require_non_empty("id", d.get("id")),
            name=V.require_non_empty("name", d.get("name")),
            fields=sorted(fields, key=lambda f: f.position),
            created_at=V.timestamp("created_at", d.get("created_at")),
            updated_at=V.timestamp("updated_at", d.get("updated_at")),
        )


@dataclass(slots=True)
class ContractField:
    id: str
    type: FieldType
    label: str
    position: int
    required: bool = False
    editable_by: EditableBy = EditableBy.MANAGER
    placeholder: Optional[str] = None
    value: FieldValue = None

    @staticmethod
    def snapshot_of(bf: BlueprintField) -> ContractField:
        """
        Копия поля шаблона по значению + начальное значение:
        CHECKBOX -> default_checked (или False), остальные -> None.
        """
        initial: FieldValue = None
        if bf.type is FieldType.CHECKBOX:
            initial = bool(bf.default_checked) if bf.default_checked is not None else False
        return ContractField(
            id=bf.id,
            type=bf.type,
            label=bf.label,
            position=bf.position,
            required=bf.required,
            editable_by=bf.editable_by,
            placeholder=bf.placeholder,
            value=initial,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "position": self.position,
            "required": self.required,
            "editable_by": self.editable_by.value,
            "placeholder": self.placeholder,
            "value": self.value,
        }

    @staticmethod
    def from_dict(data: Any) -> ContractField:
        d = _record(data, "Поле договора")
        ftype = V.enum_value("type", d.get("type"), FieldType)
        value = d.get("value")
        if ftype is FieldType.CHECKBOX:
            if value is not None and not isinstance(value, bool):
                raise ValidationError("Значение CHECKBOX должно быть true/false.")
        elif value is not None and not isinstance(value, str):
            raise ValidationError(f"Значение поля {ftype.value} должно быть строкой или null.")
        return ContractField(
            id=V.require_non_empty("id", d.get("id")),
            type=ftype,
            label=V.require_non_empty("label", d.get("label")),
            position=V.integer("position", d.get("position")),
            required=V.flag("required", d.get("required")),
            editable_by=V.enum_value(
                "editable_by", d.get("editable_by") or EditableBy.MANAGER, EditableBy
            ),
            placeholder=V.optional_text("placeholder", d.get("placeholder")),
            value=value,
        )


@dataclass(slots=True)
class Contract:
    id: str
    name: str
    blueprint_id: str
    blueprint_name: str
    status: ContractStatus = ContractStatus.CREATED
    fields: list[ContractField] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "blueprint_id": self.blueprint_id,
            "blueprint_name": self.blueprint_name,
            "status": self.status.value,
            "fields": [f.to_dict() for f in self.fields],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @staticmethod
    def from_dict(data: Any) -> Contract:
        d = _record(data, "Договор")
        raw_fields = d.get("fields") or []
        if not isinstance(raw_fields, list):
            raise ValidationError("Поле 'fields' должно быть списком.")
        return Contract(
            id=V.require_non_empty("id", d.get("id")),
            name=V.require_non_empty("name", d.get("name")),
            blueprint_id=V.require_non_empty("blueprint_id", d.get("blueprint_id")),
            # имя шаблона: копия на момент создания, шаблона может уже не быть
            blueprint_name=str(d.get("blueprint_name") or ""),
            status=parse_status(d.get("status")),
            fields=[ContractField.from_dict(f) for f in raw_fields],
            created_at=V.timestamp("created_at", d.get("created_at")),
            updated_at=V.timestamp("updated_at", d.get("updated_at")),
        )
