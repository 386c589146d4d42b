from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from contract_filter_sort import ContractFilter, ContractSort
from contracts_domain import FieldType
from dashboard import DashboardFilter
from errors import (
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from lifecycle import ContractStatus

S = ContractStatus


def test_create_contract_snapshots_fields_in_order(contracts, nda_blueprint):
    res = contracts.create_contract("Deal", nda_blueprint.id)

    assert res.ok
    c = res.value
    assert c.status is S.CREATED
    assert c.blueprint_id == nda_blueprint.id
    assert c.blueprint_name == "NDA Template"
    assert [(f.label, f.type) for f in c.fields] == [
        ("Name", FieldType.TEXT),
        ("Sign", FieldType.SIGNATURE),
    ]
    assert [f.value for f in c.fields] == [None, None]
    assert [f.id for f in c.fields] == [f.id for f in nda_blueprint.sorted_fields()]
    assert c.created_at == c.updated_at


def test_checkbox_values_start_from_default(blueprints, contracts):
    bp = blueprints.create_blueprint(
        "Consent",
        [
            {"label": "Agree", "position": 0, "type": "CHECKBOX", "default_checked": True},
            {"label": "Newsletter", "position": 1, "type": "CHECKBOX"},
        ],
    ).value
    c = contracts.create_contract("C", bp.id).value
    assert [f.value for f in c.fields] == [True, False]


@pytest.mark.parametrize("name", ["", "  \t"])
def test_create_contract_requires_name(contracts, nda_blueprint, name):
    res = contracts.create_contract(name, nda_blueprint.id)
    assert isinstance(res.error, ValidationError)
    assert len(contracts) == 0


def test_create_contract_requires_known_blueprint(contracts):
    res = contracts.create_contract("Deal", "missing")
    assert isinstance(res.error, NotFoundError)
    assert len(contracts) == 0


def test_blueprint_edits_never_reach_existing_contracts(blueprints, contracts, nda_blueprint, new_contract):
    fields = [f.to_dict() for f in nda_blueprint.fields]
    fields[0]["label"] = "Renamed"
    blueprints.update_blueprint(nda_blueprint.id, {"name": "Other", "fields": fields[:1]})
    blueprints.move_field(nda_blueprint.id, fields[0]["id"], "down")

    c = contracts.get_contract(new_contract.id)
    assert [f.label for f in c.fields] == ["Name", "Sign"]
    assert c.blueprint_name == "NDA Template"

    fresh = contracts.create_contract("Fresh", nda_blueprint.id).value
    assert [f.label for f in fresh.fields] == ["Renamed"]
    assert fresh.blueprint_name == "Other"


def test_deleting_blueprint_keeps_contracts(blueprints, contracts, nda_blueprint, new_contract):
    blueprints.delete_blueprint(nda_blueprint.id)
    c = contracts.get_contract(new_contract.id)
    assert c == new_contract
    assert c.blueprint_name == "NDA Template"


def test_update_fields_in_created(contracts, new_contract):
    fields = [f.to_dict() for f in new_contract.fields]
    fields[0]["value"] = "Alice"

    res = contracts.update_contract_fields(new_contract.id, fields)

    assert res.ok
    assert res.value.fields[0].value == "Alice"
    assert res.value.updated_at > new_contract.updated_at


def test_update_fields_in_sent(contracts, new_contract, move_to):
    move_to(new_contract.id, "APPROVED", "SENT")
    fields = [f.to_dict() for f in new_contract.fields]
    fields[1]["value"] = "data:image/png;base64,AAA"
    assert contracts.update_contract_fields(new_contract.id, fields).ok


@pytest.mark.parametrize(
    "path",
    [("APPROVED",), ("APPROVED", "SENT", "SIGNED"), ("APPROVED", "SENT", "SIGNED", "LOCKED"), ("REVOKED",)],
)
def test_update_fields_rejected_outside_edit_statuses(contracts, new_contract, move_to, path):
    before = move_to(new_contract.id, *path)
    fields = [f.to_dict() for f in before.fields]
    fields[0]["value"] = "changed"

    res = contracts.update_contract_fields(new_contract.id, fields)

    assert not res
    assert isinstance(res.error, InvalidStateError)
    assert res.error.status is before.status
    assert contracts.get_contract(new_contract.id) == before


def test_update_fields_unknown_contract(contracts):
    res = contracts.update_contract_fields("nope", [])
    assert isinstance(res.error, NotFoundError)


def test_update_fields_rejects_malformed_values(contracts, new_contract):
    fields = [f.to_dict() for f in new_contract.fields]
    fields[0]["value"] = 42
    res = contracts.update_contract_fields(new_contract.id, fields)
    assert isinstance(res.error, ValidationError)
    assert contracts.get_contract(new_contract.id) == new_contract


def test_caller_cannot_mutate_stored_fields(contracts, new_contract):
    fields = [f.to_dict() for f in new_contract.fields]
    contracts.update_contract_fields(new_contract.id, fields)
    fields[0]["value"] = "sneaky"
    assert contracts.get_contract(new_contract.id).fields[0].value is None


def test_lock_requires_full_path(contracts, new_contract, move_to):
    approved = move_to(new_contract.id, "APPROVED")

    res = contracts.transition_status(new_contract.id, "LOCKED")

    assert not res
    err = res.error
    assert isinstance(err, InvalidTransitionError)
    assert err.current is S.APPROVED
    assert err.requested is S.LOCKED
    assert err.allowed == (S.SENT, S.REVOKED, S.CREATED)
    assert err.to_dict()["allowed"] == ["SENT", "REVOKED", "CREATED"]
    assert contracts.get_contract(new_contract.id) == approved


def test_lock_signed_contract_bumps_updated_at(contracts, new_contract, move_to):
    signed = move_to(new_contract.id, "APPROVED", "SENT", "SIGNED")

    res = contracts.transition_status(new_contract.id, S.LOCKED)

    assert res.ok
    assert res.value.status is S.LOCKED
    assert res.value.updated_at > signed.updated_at
    assert res.value.fields == signed.fields


def test_revert_to_draft(contracts, new_contract, move_to):
    move_to(new_contract.id, "APPROVED")
    assert contracts.transition_status(new_contract.id, "CREATED").ok
    assert contracts.get_contract(new_contract.id).status is S.CREATED


def test_transition_errors(contracts, new_contract):
    assert isinstance(contracts.transition_status("nope", "APPROVED").error, NotFoundError)
    assert isinstance(contracts.transition_status(new_contract.id, "DRAFT").error, ValidationError)
    assert isinstance(contracts.transition_status(new_contract.id, "SENT").error, InvalidTransitionError)
    assert isinstance(contracts.transition_status(new_contract.id, "CREATED").error, InvalidTransitionError)


@pytest.mark.parametrize("path", [(), ("APPROVED", "SENT", "SIGNED", "LOCKED"), ("REVOKED",)])
def test_delete_from_any_status(contracts, nda_blueprint, new_contract, move_to, path):
    other = contracts.create_contract("Other", nda_blueprint.id).value
    move_to(new_contract.id, *path)

    assert contracts.delete_contract(new_contract.id) is True
    assert contracts.get_contract(new_contract.id) is None
    assert [c.id for c in contracts.list_contracts()] == [other.id]


def test_delete_unknown_changes_nothing(contracts, new_contract):
    before = contracts.list_contracts()
    assert contracts.delete_contract("nope") is False
    assert contracts.list_contracts() == before


def test_search_matches_name_or_blueprint_name(blueprints, contracts, nda_blueprint):
    other_bp = blueprints.create_blueprint("Lease", []).value
    vendor = contracts.create_contract("Vendor NDA", other_bp.id).value
    from_template = contracts.create_contract("Acme deal", nda_blueprint.id).value
    contracts.create_contract("Office lease", other_bp.id)

    found = contracts.search_contracts("nda")

    assert [c.id for c in found] == [vendor.id, from_template.id]
    assert len(contracts.search_contracts("")) == 3
    assert contracts.search_contracts("zzz") == []


def test_contracts_by_dashboard_filter(contracts, nda_blueprint, move_to):
    ids = {}
    for name, path in {
        "draft": (),
        "approved": ("APPROVED",),
        "sent": ("APPROVED", "SENT"),
        "locked": ("APPROVED", "SENT", "SIGNED", "LOCKED"),
        "revoked": ("REVOKED",),
    }.items():
        ids[name] = contracts.create_contract(name, nda_blueprint.id).value.id
        move_to(ids[name], *path)

    def names(flt):
        return sorted(c.name for c in contracts.get_contracts_by_filter(flt))

    assert names(DashboardFilter.ACTIVE) == ["approved", "draft"]
    assert names("pending") == ["sent"]
    assert names(DashboardFilter.SIGNED) == ["locked"]
    assert names(DashboardFilter.ARCHIVED) == ["revoked"]


def test_paging_filter_and_sort(contracts, nda_blueprint, clock):
    for name in ["b", "a", "c"]:
        contracts.create_contract(name, nda_blueprint.id)

    newest_first = contracts.get_k_n(1, 2)
    assert [c.name for c in newest_first] == ["c", "a"]
    assert [c.name for c in contracts.get_k_n(2, 2)] == ["b"]

    by_name = contracts.get_k_n(1, 10, sort=ContractSort(by="name", asc=True))
    assert [c.name for c in by_name] == ["a", "b", "c"]

    flt = ContractFilter(name_substr="A", statuses=frozenset({S.CREATED}))
    assert contracts.get_count(flt=flt) == 1
    assert contracts.get_count() == 3

    first = contracts.get_k_n(1, 10, sort=ContractSort(by="created_at", asc=True))[0]
    window = ContractFilter(updated_to=first.updated_at + timedelta(microseconds=1))
    assert [c.name for c in contracts.get_k_n(1, 10, flt=window)] == ["b"]

    with pytest.raises(ValueError):
        contracts.get_k_n(0, 10)


def test_timestamps_without_zone_are_read_as_utc(contracts, nda_blueprint):
    stored = {
        "id": "old",
        "name": "Legacy",
        "blueprint_id": nda_blueprint.id,
        "blueprint_name": "NDA Template",
        "status": "CREATED",
        "fields": [],
        "created_at": "2025-01-01T10:00:00",
        "updated_at": "2025-01-01T10:00:00",
    }
    assert contracts.restore([stored]) == []
    contracts.create_contract("Fresh", nda_blueprint.id)

    assert contracts.get_contract("old").updated_at == datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)
    assert [c.name for c in contracts.get_k_n(1, 10)] == ["Fresh", "Legacy"]

    naive_bound = ContractFilter(updated_to=datetime(2025, 6, 1))
    assert [c.name for c in contracts.get_k_n(1, 10, flt=naive_bound)] == ["Legacy"]


def test_stored_required_flag_must_be_bool(contracts, nda_blueprint):
    stored = {
        "id": "x",
        "name": "Deal",
        "blueprint_id": nda_blueprint.id,
        "blueprint_name": "NDA Template",
        "status": "CREATED",
        "fields": [{"id": "f", "type": "TEXT", "label": "Name", "position": 0, "required": "false"}],
        "created_at": "2026-01-01T10:00:00+00:00",
        "updated_at": "2026-01-01T10:00:00+00:00",
    }
    errors = contracts.restore([stored])
    assert [e["error_type"] for e in errors] == ["ValidationError"]
    assert len(contracts) == 0
