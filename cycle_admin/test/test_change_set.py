"""
Tests for parsing order cycle request parameters into change sets
"""
from datetime import date, datetime

import pytest

from cycle_admin.business.order_cycles.change_set import ChangeSet, ExchangeEdit, parse_timestamp
from cycle_admin.business.order_cycles.errors import ValidationError


def test_parse_timestamp_formats():
    """ISO strings, Z suffixes, offsets, dates and blanks all parse to naive UTC"""
    assert parse_timestamp('2026-03-01T10:30:00') == datetime(2026, 3, 1, 10, 30)
    assert parse_timestamp('2026-03-01T10:30:00Z') == datetime(2026, 3, 1, 10, 30)
    assert parse_timestamp('2026-03-01T12:30:00+02:00') == datetime(2026, 3, 1, 10, 30)
    assert parse_timestamp(date(2026, 3, 1)) == datetime(2026, 3, 1)
    assert parse_timestamp('') is None
    assert parse_timestamp('   ') is None
    assert parse_timestamp(None) is None


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        parse_timestamp('next tuesday')


def test_from_params_collects_core_fields():
    change_set = ChangeSet.from_params({
        'name': '  Weekly  ',
        'orders_open_at': '2026-03-01T00:00:00',
        'orders_close_at': '',
        'unknown': 'ignored',
    })

    assert change_set.fields == {
        'name': 'Weekly',
        'orders_open_at': datetime(2026, 3, 1),
        'orders_close_at': None,
    }
    assert change_set.incoming_exchanges is None
    assert change_set.outgoing_exchanges is None
    assert change_set.scope is None


def test_from_params_empty():
    assert ChangeSet.from_params(None).is_empty
    assert ChangeSet.from_params({}).is_empty


def test_from_params_invalid_dates_reported_per_field():
    with pytest.raises(ValidationError) as excinfo:
        ChangeSet.from_params({'orders_open_at': 'soon', 'orders_close_at': 'later'})

    errors = excinfo.value.to_errors()
    assert set(errors) == {'orders_open_at', 'orders_close_at'}


def test_from_params_exchanges():
    """Exchange lists accept id lists, {id: selected} maps, and sender/receiver fallbacks"""
    change_set = ChangeSet.from_params({
        'incoming_exchanges': [
            {'enterprise_id': 3, 'variants': {'10': True, '11': False, '12': 'true'}, 'receival_instructions': 'Dock B'},
            {'sender_id': '4', 'variants': [13]},
        ],
        'outgoing_exchanges': [
            {'receiver_id': 5, 'pickup_time': 'Friday'},
        ],
    })

    first, second = change_set.incoming_exchanges
    assert first == ExchangeEdit(3, True, frozenset({10, 12}), {'receival_instructions': 'Dock B'})
    assert second.enterprise_id == 4
    assert second.variant_ids == frozenset({13})

    (outgoing,) = change_set.outgoing_exchanges
    assert outgoing.incoming is False
    assert outgoing.variant_ids is None, "omitted variants leave the exchange's variants alone"
    assert outgoing.attributes == {'pickup_time': 'Friday'}
    assert len(change_set.exchange_edits) == 3


def test_from_params_empty_exchange_list_is_kept():
    change_set = ChangeSet.from_params({'incoming_exchanges': []})
    assert change_set.incoming_exchanges == []
    assert change_set.outgoing_exchanges is None
    assert not change_set.is_empty


def test_from_params_invalid_exchange():
    with pytest.raises(ValidationError) as excinfo:
        ChangeSet.from_params({'outgoing_exchanges': [{'variants': [1]}, 'nonsense']})

    messages = excinfo.value.to_errors()['outgoing_exchanges']
    assert len(messages) == 2


def test_exchange_edge_orientation():
    """The coordinator is the receiver of incoming edges and the sender of outgoing ones"""
    assert ExchangeEdit(7, True).edge(1) == (7, 1)
    assert ExchangeEdit(7, False).edge(1) == (1, 7)


def test_from_params_exchanges_must_be_lists():
    with pytest.raises(ValidationError) as excinfo:
        ChangeSet.from_params({'incoming_exchanges': 5, 'outgoing_exchanges': {'enterprise_id': 3}})

    assert excinfo.value.to_errors() == {
        'incoming_exchanges': ["must be a list of exchanges"],
        'outgoing_exchanges': ["must be a list of exchanges"],
    }


def test_from_params_rejects_non_object_params():
    for params in ('name', ['name'], 42):
        with pytest.raises(ValidationError) as excinfo:
            ChangeSet.from_params(params)

        assert excinfo.value.to_errors() == {'base': ["order cycle data must be an object"]}


def test_from_params_name_must_be_text():
    with pytest.raises(ValidationError) as excinfo:
        ChangeSet.from_params({'name': ['Spring']})

    assert excinfo.value.to_errors() == {'name': ["must be text"]}
