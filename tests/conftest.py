from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from blueprint_repo import BlueprintRepo
from contract_repo import ContractRepo


class FakeClock:
    """Каждый вызов: на секунду позже предыдущего."""

    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


def make_id_factory(prefix: str):
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def blueprints(clock) -> BlueprintRepo:
    return BlueprintRepo(clock=clock, id_factory=make_id_factory("bp-"))


@pytest.fixture
def contracts(blueprints, clock) -> ContractRepo:
    return ContractRepo(blueprints, clock=clock, id_factory=make_id_factory("c-"))


@pytest.fixture
def nda_blueprint(blueprints):
    res = blueprints.create_blueprint(
        "NDA Template",
        [
            {"label": "Name", "position": 0, "type": "TEXT", "editable_by": "MANAGER"},
            {"label": "Sign", "position": 1, "type": "SIGNATURE", "editable_by": "CLIENT"},
        ],
    )
    assert res.ok
    return res.value


@pytest.fixture
def new_contract(contracts, nda_blueprint):
    res = contracts.create_contract("Deal", nda_blueprint.id)
    assert res.ok
    return res.value


@pytest.fixture
def move_to(contracts):
    """Проводит договор по цепочке статусов, проверяя каждый шаг."""

    def _move(contract_id: str, *statuses: str):
        for s in statuses:
            assert contracts.transition_status(contract_id, s).ok, s
        return contracts.get_contract(contract_id)

    return _move
