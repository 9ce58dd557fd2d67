"""
Tests for bulk order cycle updates
"""
from datetime import timedelta

from cycle_admin import db
from cycle_admin.business.order_cycles import OrderCycleBulkUpdater, OrderCyclePermissions, UpdateScope
from cycle_admin.business.order_cycles.errors import EmptyInputError
from cycle_admin.data.models import OrderCycle


def _reload(order_cycle_id):
    db.session.expire_all()
    return db.session.get(OrderCycle, order_cycle_id)


def test_updates_every_row(build):
    user = build.user()
    coordinator = build.distributor(owner=user)
    first = build.order_cycle(coordinator=coordinator)
    second = build.order_cycle(coordinator=coordinator)
    new_close = first.orders_close_at + timedelta(days=2)

    result = OrderCycleBulkUpdater(user).apply({
        '0': {'id': first.id, 'name': 'Renamed first', 'orders_close_at': new_close.isoformat()},
        '1': {'id': str(second.id), 'name': 'Renamed second'},
    })

    assert result.success, result.errors
    assert sorted(result.updated_ids) == sorted([first.id, second.id])
    assert _reload(first.id).name == 'Renamed first'
    assert _reload(first.id).orders_close_at == new_close
    assert _reload(second.id).name == 'Renamed second'


def test_list_input_is_indexed_by_position(build):
    user = build.user()
    order_cycle = build.order_cycle(coordinator=build.distributor(owner=user))

    result = OrderCycleBulkUpdater(user).apply([{'id': order_cycle.id, 'name': 'From a list'}])

    assert result.success
    assert _reload(order_cycle.id).name == 'From a list'


def test_no_data(build):
    for empty in (None, {}, [], 5, "rows"):
        result = OrderCycleBulkUpdater(build.user()).apply(empty)

        assert not result.success
        assert result.no_data
        assert result.errors == EmptyInputError.MESSAGE
        assert result.to_dict() == {'success': False, 'errors': EmptyInputError.MESSAGE}


def test_validation_errors_are_keyed_by_row(build):
    user = build.user()
    order_cycle = build.order_cycle(coordinator=build.distributor(owner=user))
    original_name = order_cycle.name

    result = OrderCycleBulkUpdater(user).apply({
        '0': {
            'id': order_cycle.id,
            'name': 'Backwards',
            'orders_close_at': (order_cycle.orders_open_at - timedelta(hours=1)).isoformat(),
        },
    })

    assert not result.success
    assert set(result.errors) == {'0'}
    assert 'orders_close_at' in result.errors['0']
    assert _reload(order_cycle.id).name == original_name


def test_unparseable_dates_are_reported(build):
    user = build.user()
    order_cycle = build.order_cycle(coordinator=build.distributor(owner=user))

    result = OrderCycleBulkUpdater(user).apply({'3': {'id': order_cycle.id, 'orders_open_at': 'whenever'}})

    assert not result.success
    assert result.errors == {'3': {'orders_open_at': ['is not a valid date and time']}}


def test_rows_outside_the_users_reach_are_skipped(build):
    """An unmanaged order cycle in the batch is left alone without failing the batch"""
    user = build.user()
    mine = build.order_cycle(coordinator=build.distributor(owner=user))
    theirs = build.order_cycle()
    their_name = theirs.name

    result = OrderCycleBulkUpdater(user).apply({
        '0': {'id': mine.id, 'name': 'Mine'},
        '1': {'id': theirs.id, 'name': 'Not mine'},
        '2': {'id': 999999, 'name': 'Nobody'},
    })

    assert result.success
    assert result.updated_ids == [mine.id]
    assert result.skipped_indexes == ['1', '2']
    assert _reload(mine.id).name == 'Mine'
    assert _reload(theirs.id).name == their_name


def test_producer_rows_do_not_touch_core_fields(supply_chain):
    original_name = supply_chain.order_cycle.name

    result = OrderCycleBulkUpdater(supply_chain.producer.owner).apply({
        '0': {'id': supply_chain.order_cycle.id, 'name': 'Producer rename'},
    })

    assert result.success
    assert _reload(supply_chain.order_cycle.id).name == original_name


def test_failed_row_does_not_undo_earlier_rows(build):
    user = build.user()
    coordinator = build.distributor(owner=user)
    good = build.order_cycle(coordinator=coordinator)
    bad = build.order_cycle(coordinator=coordinator)

    result = OrderCycleBulkUpdater(user).apply({
        '0': {'id': good.id, 'name': 'Committed'},
        '1': {'id': bad.id, 'name': ''},
    })

    assert not result.success
    assert result.updated_ids == [good.id]
    assert result.errors == {'1': {'name': ["can't be blank"]}}
    assert _reload(good.id).name == 'Committed'


def test_rows_apply_in_index_order(build):
    """Two rows for the same cycle: the higher index wins"""
    user = build.user()
    order_cycle = build.order_cycle(coordinator=build.distributor(owner=user))

    result = OrderCycleBulkUpdater(user).apply({
        '10': {'id': order_cycle.id, 'name': 'Last'},
        '2': {'id': order_cycle.id, 'name': 'First'},
    })

    assert result.success
    assert _reload(order_cycle.id).name == 'Last'


class _RevokedAfterFirstLook(OrderCyclePermissions):
    """Reports full access on the first lookup only, as if access was revoked right after"""

    def __init__(self, user):
        super().__init__(user)
        self.lookups = 0

    def scope_for(self, order_cycle):
        self.lookups += 1
        if self.lookups == 1:
            return UpdateScope(
                coordinator_id=order_cycle.coordinator_id,
                can_edit_core_fields=True,
                can_create_exchanges=True,
            )
        return super().scope_for(order_cycle)


def test_scope_is_resolved_again_under_the_row_lock(build, supply_chain):
    stranger = build.user()
    permissions = _RevokedAfterFirstLook(stranger)
    original_name = supply_chain.order_cycle.name

    result = OrderCycleBulkUpdater(stranger, permissions).apply({
        '0': {'id': supply_chain.order_cycle.id, 'name': 'Stale access'},
    })

    assert permissions.lookups == 2
    assert result.success
    assert result.updated_ids == []
    assert result.skipped_indexes == ['0']
    assert _reload(supply_chain.order_cycle.id).name == original_name
