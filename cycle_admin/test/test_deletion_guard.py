"""
Tests for guarded order cycle deletion
"""
from cycle_admin import db
from cycle_admin.business.order_cycles import DependencyConflictError, OrderCycleDeletionGuard, OrderCyclePermissions
from cycle_admin.data.models import Exchange, OrderCycle
from cycle_admin.data.order_cycles.exchange import exchange_variants


def _exists(order_cycle_id):
    db.session.expire_all()
    return db.session.get(OrderCycle, order_cycle_id) is not None


def test_deletes_cycle_and_exchanges(supply_chain):
    order_cycle_id = supply_chain.order_cycle.id
    name = supply_chain.order_cycle.name

    result = OrderCycleDeletionGuard(order_cycle_id).destroy()

    assert result.success
    assert result.message == f"Order cycle '{name}' has been deleted."
    assert not _exists(order_cycle_id)
    assert Exchange.query.filter_by(order_cycle_id=order_cycle_id).count() == 0
    assert db.session.execute(db.select(exchange_variants)).first() is None


def test_orders_block_deletion(build, supply_chain):
    build.order(supply_chain.order_cycle)
    guard = OrderCycleDeletionGuard(supply_chain.order_cycle.id)

    assert not guard.is_deletable()
    result = guard.destroy()

    assert not result.success
    assert result.reason == DependencyConflictError.ORDERS_PRESENT
    assert "selected by a customer" in result.message
    assert _exists(supply_chain.order_cycle.id)


def test_schedule_blocks_deletion(build, supply_chain):
    build.schedule([supply_chain.order_cycle])

    result = OrderCycleDeletionGuard(supply_chain.order_cycle.id).destroy()

    assert not result.success
    assert result.reason == DependencyConflictError.SCHEDULE_PRESENT
    assert "linked to a schedule" in result.message
    assert _exists(supply_chain.order_cycle.id)


def test_orders_are_reported_before_schedules(build, supply_chain):
    build.schedule([supply_chain.order_cycle])
    build.order(supply_chain.order_cycle)

    result = OrderCycleDeletionGuard(supply_chain.order_cycle.id).destroy()

    assert result.reason == DependencyConflictError.ORDERS_PRESENT


def test_order_placed_after_load_still_blocks(build, supply_chain):
    """The check reads the database at delete time, not the state loaded earlier"""
    order_cycle = db.session.get(OrderCycle, supply_chain.order_cycle.id)
    assert order_cycle.orders.count() == 0
    guard = OrderCycleDeletionGuard(order_cycle.id)

    build.order(order_cycle)
    result = guard.destroy()

    assert not result.success
    assert result.reason == DependencyConflictError.ORDERS_PRESENT


def test_only_coordinator_may_delete(build, supply_chain):
    permissions = OrderCyclePermissions(supply_chain.producer.owner)

    result = OrderCycleDeletionGuard(supply_chain.order_cycle.id, permissions).destroy()

    assert not result.success
    assert result.error_type == 'AuthorizationError'
    assert _exists(supply_chain.order_cycle.id)


def test_missing_cycle(build):
    result = OrderCycleDeletionGuard(31337).destroy()

    assert not result.success
    assert result.error_type == 'NotFoundError'
