"""
Tests for projecting change sets onto permission scopes
"""
from datetime import datetime

from cycle_admin.business.order_cycles import ChangeSet, ExchangeEdit, UpdateScope, filter_change_set

COORDINATOR = 1
PRODUCER = 2
OTHER_PRODUCER = 3
HUB = 4


def _change_set():
    return ChangeSet(
        fields={'name': 'Renamed', 'orders_close_at': datetime(2026, 5, 1)},
        incoming_exchanges=[
            ExchangeEdit(PRODUCER, True, frozenset({10})),
            ExchangeEdit(OTHER_PRODUCER, True, frozenset({20})),
        ],
        outgoing_exchanges=[ExchangeEdit(HUB, False, frozenset({10}))],
    )


def test_full_scope_keeps_everything():
    scope = UpdateScope(COORDINATOR, True, frozenset({(PRODUCER, COORDINATOR)}), True)
    change_set = _change_set()

    filtered = filter_change_set(scope, change_set)

    assert filtered.fields == change_set.fields
    assert filtered.incoming_exchanges == change_set.incoming_exchanges
    assert filtered.outgoing_exchanges == change_set.outgoing_exchanges
    assert filtered.scope is scope


def test_producer_scope_keeps_only_its_exchange():
    scope = UpdateScope(COORDINATOR, False, frozenset({(PRODUCER, COORDINATOR)}), False)

    filtered = filter_change_set(scope, _change_set())

    assert filtered.fields == {}, "core fields belong to the coordinator"
    assert [edit.enterprise_id for edit in filtered.incoming_exchanges] == [PRODUCER]
    assert filtered.outgoing_exchanges == []


def test_distributor_scope_keeps_only_its_outgoing_exchange():
    scope = UpdateScope(COORDINATOR, False, frozenset({(COORDINATOR, HUB)}), False)

    filtered = filter_change_set(scope, _change_set())

    assert filtered.fields == {}
    assert filtered.incoming_exchanges == []
    assert [edit.enterprise_id for edit in filtered.outgoing_exchanges] == [HUB]


def test_empty_scope_drops_everything():
    filtered = filter_change_set(UpdateScope.empty(COORDINATOR), _change_set())

    assert filtered.fields == {}
    assert filtered.incoming_exchanges == []
    assert filtered.outgoing_exchanges == []


def test_absent_exchange_lists_stay_absent():
    scope = UpdateScope(COORDINATOR, False, frozenset({(PRODUCER, COORDINATOR)}), False)

    filtered = filter_change_set(scope, ChangeSet(fields={'name': 'x'}))

    assert filtered.incoming_exchanges is None
    assert filtered.outgoing_exchanges is None


def test_input_is_not_mutated():
    change_set = _change_set()
    filter_change_set(UpdateScope.empty(COORDINATOR), change_set)

    assert 'name' in change_set.fields
    assert len(change_set.incoming_exchanges) == 2
    assert change_set.scope is None


def test_scope_flags():
    assert UpdateScope.empty().is_empty
    assert not UpdateScope.empty().is_full
    full = UpdateScope(COORDINATOR, True, frozenset(), True)
    assert full.is_full
    assert full.allows_edge((99, COORDINATOR)), "coordinators may add new edges"
    limited = UpdateScope(COORDINATOR, False, frozenset({(PRODUCER, COORDINATOR)}), False)
    assert not limited.is_empty
    assert limited.allows_edge((PRODUCER, COORDINATOR))
    assert not limited.allows_edge((OTHER_PRODUCER, COORDINATOR))
