"""
OrderCycleDeletionGuard - destroys an order cycle only while nothing depends on it

Orders and schedules can attach to a cycle at any time after it was loaded,
so the dependency checks run inside the deleting transaction, against the
locked cycle row, and never rely on state loaded earlier.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from cycle_admin import db
from cycle_admin.business.order_cycles.errors import DependencyConflictError, OrderCycleDomainError
from cycle_admin.business.order_cycles.narrator import OrderCycleNarrator
from cycle_admin.business.order_cycles.permissions import OrderCyclePermissions
from cycle_admin.business.order_cycles.updater import load_order_cycle_for_update
from cycle_admin.data.orders.order import Order
from cycle_admin.data.orders.schedule import order_cycle_schedules
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.business.order_cycles.deletion_guard")


@dataclass
class DeletionResult:
    success: bool
    message: str
    reason: Optional[str] = None
    error_type: Optional[str] = None


class OrderCycleDeletionGuard:
    """
    Decision order:
    1. Any order references the cycle -> orders_present
    2. Any schedule references the cycle -> schedule_present
    3. Otherwise the cycle and its exchanges are deleted
    """

    def __init__(self, order_cycle_id: int, permissions: Optional[OrderCyclePermissions] = None):
        self.order_cycle_id = order_cycle_id
        self.permissions = permissions

    def check(self) -> None:
        """
        Raises:
            DependencyConflictError: If orders or schedules reference the cycle
        """
        if self._has_orders():
            raise DependencyConflictError(DependencyConflictError.ORDERS_PRESENT)
        if self._has_schedules():
            raise DependencyConflictError(DependencyConflictError.SCHEDULE_PRESENT)

    def is_deletable(self) -> bool:
        try:
            self.check()
        except DependencyConflictError:
            return False
        return True

    def destroy(self) -> DeletionResult:
        try:
            order_cycle = load_order_cycle_for_update(self.order_cycle_id)
            if self.permissions is not None:
                self.permissions.authorize_coordinator(order_cycle)
            self.check()

            name = order_cycle.name
            db.session.delete(order_cycle)
            db.session.commit()
        except OrderCycleDomainError as e:
            db.session.rollback()
            logger.info(f"Order cycle {self.order_cycle_id} not deleted: {e}")
            return DeletionResult(
                success=False,
                message=str(e),
                reason=getattr(e, 'reason', None),
                error_type=type(e).__name__,
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error deleting order cycle {self.order_cycle_id}: {e}")
            return DeletionResult(success=False, message="Order cycle could not be deleted.", error_type='DatabaseError')

        logger.info(f"Order cycle {self.order_cycle_id} deleted")
        return DeletionResult(success=True, message=OrderCycleNarrator.deleted(name))

    def _has_orders(self) -> bool:
        statement = db.select(Order.id).where(Order.order_cycle_id == self.order_cycle_id).limit(1)
        return db.session.execute(statement).first() is not None

    def _has_schedules(self) -> bool:
        statement = (
            db.select(order_cycle_schedules.c.schedule_id)
            .where(order_cycle_schedules.c.order_cycle_id == self.order_cycle_id)
            .limit(1)
        )
        return db.session.execute(statement).first() is not None
