# blueprint_repo.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Union

from base_repo import BaseEntityRepo
from contracts_domain import Blueprint, BlueprintField
from errors import NotFoundError, Result, ValidationError
from validators import Validator as V

logger = logging.getLogger(__name__)

FieldInput = Union[BlueprintField, dict[str, Any]]


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class BlueprintRepo(BaseEntityRepo[Blueprint]):
    """
    Репозиторий шаблонов (blueprints).

    События:
      - "blueprint_created" payload: Blueprint
      - "blueprint_updated" payload: Blueprint
      - "blueprint_deleted" payload: dict(id=...)
    Договоры здесь не трогаются никогда: они хранят свою копию полей.
    """

    NAMESPACE = "EURUSYS_Blueprints"

    def _to_record(self, item: Blueprint) -> dict[str, Any]:
        return item.to_dict()

    def _from_record(self, rec: Any) -> Blueprint:
        return Blueprint.from_dict(rec)

    # ---------------------- подготовка полей ----------------------

    def _prepare_fields(self, fields: Iterable[FieldInput] | None) -> list[BlueprintField]:
        """
        Валидирует поля и копирует их по значению.
        Полям без id назначается новый id; позиции должны быть уникальны.
        """
        if fields is None:
            return []
        if isinstance(fields, (str, bytes, dict)):
            raise ValidationError("Поле 'fields' должно быть списком полей.")

        prepared: list[BlueprintField] = []
        for idx, f in enumerate(fields):
            rec = f.to_dict() if isinstance(f, BlueprintField) else f
            try:
                bf = BlueprintField.from_dict(rec)
            except ValidationError as exc:
                raise ValidationError(f"Поле #{idx + 1}: {exc.message}") from exc
            if not bf.id:
                bf.id = self._new_id()
            prepared.append(bf)

        ids = [f.id for f in prepared]
        if len(set(ids)) != len(ids):
            raise ValidationError("id полей шаблона должны быть уникальны.")
        V.unique_positions([f.position for f in prepared])
        return sorted(prepared, key=lambda f: f.position)

    # -------------------------- Операции чтения ------------------------

    def get_blueprint(self, blueprint_id: str) -> Blueprint | None:
        bp = self._items.get(blueprint_id)
        return self._detached(bp) if bp else None

    def list_blueprints(self) -> list[Blueprint]:
        return [self._detached(bp) for bp in self._items.values()]

    # -------------------------- Мутации набора -------------------------

    def create_blueprint(self, name: str, fields: Iterable[FieldInput] | None = None) -> Result[Blueprint]:
        try:
            clean_name = V.require_non_empty("name", name)
            prepared = self._prepare_fields(fields)
        except ValidationError as exc:
            logger.warning("Шаблон не создан: %s", exc.message)
            return Result.failure(exc)

        now = self.now()
        bp = Blueprint(
            id=self._new_id(),
            name=clean_name,
            fields=prepared,
            created_at=now,
            updated_at=now,
        )
        self._items[bp.id] = bp
        self.notify("blueprint_created", self._detached(bp))
        return Result.success(self._detached(bp))

    def update_blueprint(self, blueprint_id: str, patch: dict[str, Any]) -> Result[Blueprint]:
        """
        Патч: {"name": str, "fields": [...]}. Любой ключ можно опустить.
        fields: полная замена списка (добавление/удаление/порядок/переименование).
        """
        current = self._items.get(blueprint_id)
        if current is None:
            return Result.failure(
                NotFoundError(f"Шаблон с id={blueprint_id} не найден", entity_id=blueprint_id)
            )
        if not isinstance(patch, dict):
            return Result.failure(ValidationError("Патч шаблона должен быть объектом (dict)."))

        unknown = set(patch) - {"name", "fields"}
        try:
            if unknown:
                raise ValidationError(f"Неизвестные ключи патча: {', '.join(sorted(unknown))}.")
            name = V.require_non_empty("name", patch["name"]) if "name" in patch else current.name
            fields = (
                self._prepare_fields(patch["fields"])
                if "fields" in patch
                else list(current.fields)
            )
        except ValidationError as exc:
            exc.entity_id = blueprint_id
            logger.warning("Шаблон id=%s не обновлён: %s", blueprint_id, exc.message)
            return Result.failure(exc)

        return self._commit(current, name=name, fields=fields)

    def add_field(self, blueprint_id: str, new_field: FieldInput) -> Result[Blueprint]:
        """Добавляет поле; без позиции: ставит его последним."""
        current = self._items.get(blueprint_id)
        if current is None:
            return Result.failure(
                NotFoundError(f"Шаблон с id={blueprint_id} не найден", entity_id=blueprint_id)
            )
        rec = dict(new_field.to_dict() if isinstance(new_field, BlueprintField) else new_field)
        if rec.get("position") is None:
            rec["position"] = max((f.position for f in current.fields), default=-1) + 1
        return self.update_blueprint(
            blueprint_id, {"fields": [f.to_dict() for f in current.fields] + [rec]}
        )

    def remove_field(self, blueprint_id: str, field_id: str) -> Result[Blueprint]:
        current = self._items.get(blueprint_id)
        if current is None:
            return Result.failure(
                NotFoundError(f"Шаблон с id={blueprint_id} не найден", entity_id=blueprint_id)
            )
        if not any(f.id == field_id for f in current.fields):
            return Result.failure(
                NotFoundError(f"Поле id={field_id} в шаблоне не найдено", entity_id=field_id)
            )
        rest = [f.to_dict() for f in current.fields if f.id != field_id]
        return self.update_blueprint(blueprint_id, {"fields": rest})

    def move_field(
        self,
        blueprint_id: str,
        field_id: str,
        direction: MoveDirection | str,
    ) -> Result[Blueprint]:
        """
        Меняет позиции поля и соседнего поля в направлении direction.
        На границе (первое вверх, последнее вниз) ничего не делает.
        """
        current = self._items.get(blueprint_id)
        if current is None:
            return Result.failure(
                NotFoundError(f"Шаблон с id={blueprint_id} не найден", entity_id=blueprint_id)
            )
        try:
            move = MoveDirection(str(getattr(direction, "value", direction)).strip().lower())
        except ValueError:
            return Result.failure(
                ValidationError(f"Направление должно быть 'up' или 'down', получено '{direction}'.")
            )
        step = -1 if move is MoveDirection.UP else 1

        ordered = [BlueprintField.from_dict(f.to_dict()) for f in current.sorted_fields()]
        idx = next((i for i, f in enumerate(ordered) if f.id == field_id), None)
        if idx is None:
            return Result.failure(
                NotFoundError(f"Поле id={field_id} в шаблоне не найдено", entity_id=field_id)
            )

        neighbour = idx + step
        if neighbour < 0 or neighbour >= len(ordered):
            return Result.success(self._detached(current))

        a, b = ordered[idx], ordered[neighbour]
        a.position, b.position = b.position, a.position
        return self._commit(current, name=current.name, fields=ordered)

    def delete_blueprint(self, blueprint_id: str) -> bool:
        """Удаляет шаблон. Договоры, созданные из него, живут дальше со своей копией."""
        if blueprint_id not in self._items:
            return False
        del self._items[blueprint_id]
        self.notify("blueprint_deleted", {"id": blueprint_id})
        return True

    # ------------------------------------------------------------------

    def _commit(self, current: Blueprint, *, name: str, fields: list[BlueprintField]) -> Result[Blueprint]:
        updated = Blueprint(
            id=current.id,
            name=name,
            fields=sorted(fields, key=lambda f: f.position),
            created_at=current.created_at,
            updated_at=self.now(),
        )
        self._items[current.id] = updated
        self.notify("blueprint_updated", self._detached(updated))
        return Result.success(self._detached(updated))
