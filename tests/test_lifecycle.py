from __future__ import annotations

import itertools

import pytest

from errors import ValidationError
from lifecycle import (
    STATUS_LABELS,
    TRANSITIONS,
    ContractStatus,
    can_transition,
    get_valid_transitions,
    is_field_edit_status,
    is_terminal,
    parse_status,
)

S = ContractStatus

EXPECTED = {
    S.CREATED: (S.APPROVED, S.REVOKED),
    S.APPROVED: (S.SENT, S.REVOKED, S.CREATED),
    S.SENT: (S.SIGNED, S.REVOKED),
    S.SIGNED: (S.LOCKED,),
    S.LOCKED: (),
    S.REVOKED: (),
}


@pytest.mark.parametrize("status", list(S))
def test_valid_transitions_match_table_in_order(status):
    assert get_valid_transitions(status) == EXPECTED[status]


def test_can_transition_is_total_over_all_pairs():
    for src, dst in itertools.product(S, S):
        assert can_transition(src, dst) == (dst in EXPECTED[src])


def test_self_transitions_are_never_allowed():
    assert not any(can_transition(s, s) for s in S)


@pytest.mark.parametrize("terminal", [S.LOCKED, S.REVOKED])
def test_terminal_states_have_no_exits(terminal):
    assert is_terminal(terminal)
    assert get_valid_transitions(terminal) == ()
    assert not any(can_transition(terminal, dst) for dst in S)


def test_only_backward_transition_is_revert_to_draft():
    order = [S.CREATED, S.APPROVED, S.SENT, S.SIGNED, S.LOCKED]
    backward = [
        (src, dst)
        for src, dst in itertools.product(order, order)
        if order.index(dst) < order.index(src) and can_transition(src, dst)
    ]
    assert backward == [(S.APPROVED, S.CREATED)]


def test_no_forward_skips():
    order = [S.CREATED, S.APPROVED, S.SENT, S.SIGNED, S.LOCKED]
    for i, src in enumerate(order):
        for dst in order[i + 2:]:
            assert not can_transition(src, dst), (src, dst)


def test_every_status_reachable_from_created():
    seen = {S.CREATED}
    frontier = [S.CREATED]
    while frontier:
        cur = frontier.pop()
        for nxt in get_valid_transitions(cur):
            if nxt not in seen:
                seen.add(nxt)
                frontier.append(nxt)
    assert seen == set(S)


def test_strings_are_accepted_and_unknown_values_do_not_raise():
    assert can_transition("SIGNED", "locked")
    assert not can_transition("SIGNED", "ARCHIVED")
    assert not can_transition(None, S.CREATED)
    assert get_valid_transitions("nonsense") == ()


def test_parse_status_rejects_unknown():
    assert parse_status(" sent ") is S.SENT
    with pytest.raises(ValidationError):
        parse_status("DRAFT")


def test_table_and_labels_cover_every_status():
    assert set(TRANSITIONS) == set(S)
    assert STATUS_LABELS[S.LOCKED] == "Locked"


def test_field_edit_statuses():
    assert [s for s in S if is_field_edit_status(s)] == [S.CREATED, S.SENT]
