"""
OrderCycleUpdater - applies one actor's change set to one order cycle

Pipeline: parse request parameters -> resolve the actor's scope -> filter
the change set -> validate -> apply core fields and exchanges -> commit.
The cycle row is locked for the whole request so concurrent updates of the
same cycle cannot interleave. Domain errors are returned as data, never
raised past this class.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from cycle_admin import db
from cycle_admin.business.order_cycles.change_set import ChangeSet
from cycle_admin.business.order_cycles.errors import AuthorizationError, NotFoundError, OrderCycleDomainError
from cycle_admin.business.order_cycles.exchange_manager import ExchangeManager
from cycle_admin.business.order_cycles.mutation_filter import filter_change_set
from cycle_admin.business.order_cycles.narrator import OrderCycleNarrator
from cycle_admin.business.order_cycles.permissions import OrderCyclePermissions
from cycle_admin.business.order_cycles.policies import OrderCycleDatesPolicy
from cycle_admin.data.order_cycles.order_cycle import OrderCycle
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.business.order_cycles.updater")

SAVE_FAILED_MESSAGE = "could not be saved, please try again"


@dataclass
class UpdateResult:
    """Outcome of a create or update: success flag, field errors, optional notice"""
    success: bool
    errors: Dict[str, Any] = field(default_factory=dict)
    notice: Optional[str] = None
    order_cycle_id: Optional[int] = None
    error_type: Optional[str] = None

    @classmethod
    def failure(cls, error: OrderCycleDomainError, order_cycle_id=None):
        return cls(
            success=False,
            errors=error.to_errors(),
            order_cycle_id=order_cycle_id,
            error_type=type(error).__name__,
        )

    def to_dict(self):
        data = {'success': self.success}
        if self.errors:
            data['errors'] = self.errors
        return data


def load_order_cycle_for_update(order_cycle_id) -> OrderCycle:
    """
    Load and lock an order cycle row for the current transaction.

    populate_existing refreshes an instance already in the session so checks
    run against current state, not what was loaded earlier in the request.

    Raises:
        NotFoundError: If no such order cycle exists
    """
    statement = (
        db.select(OrderCycle)
        .where(OrderCycle.id == order_cycle_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    order_cycle = db.session.execute(statement).scalar_one_or_none()
    if order_cycle is None:
        raise NotFoundError(f"Order cycle {order_cycle_id} not found")
    return order_cycle


class OrderCycleUpdater:
    """Update engine for a single order cycle"""

    def __init__(self, order_cycle_id: int, user, permissions: Optional[OrderCyclePermissions] = None):
        self.order_cycle_id = order_cycle_id
        self.user = user
        self.permissions = permissions or OrderCyclePermissions(user)

    def update(self, params: Optional[Dict[str, Any]], reloading: bool = False) -> UpdateResult:
        """
        Apply raw request parameters.

        Args:
            params: order_cycle parameters (name, dates, exchange lists)
            reloading: True when the caller redirects and wants a notice
        """
        try:
            change_set = ChangeSet.from_params(params)
        except OrderCycleDomainError as e:
            return UpdateResult.failure(e, self.order_cycle_id)
        return self.apply(change_set, reloading=reloading)

    def apply(self, change_set: ChangeSet, reloading: bool = False) -> UpdateResult:
        """
        Apply a change set. Unfiltered change sets are filtered to the
        actor's scope first; an empty scope is an authorization failure.
        """
        try:
            order_cycle = load_order_cycle_for_update(self.order_cycle_id)
            if change_set.scope is None:
                scope = self.permissions.authorize_update(order_cycle)
                change_set = filter_change_set(scope, change_set)
            elif change_set.scope.is_empty:
                raise AuthorizationError("You don't have permission to manage that order cycle")
            return self._apply(order_cycle, change_set, reloading)
        except OrderCycleDomainError as e:
            db.session.rollback()
            logger.info(f"Order cycle {self.order_cycle_id} not updated: {e}")
            return UpdateResult.failure(e, self.order_cycle_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error updating order cycle {self.order_cycle_id}: {e}")
            return UpdateResult(
                success=False,
                errors={'base': [SAVE_FAILED_MESSAGE]},
                order_cycle_id=self.order_cycle_id,
                error_type='DatabaseError',
            )

    def _apply(self, order_cycle: OrderCycle, change_set: ChangeSet, reloading: bool) -> UpdateResult:
        OrderCycleDatesPolicy.validate_merged(order_cycle, change_set.fields)

        changed = []
        for key, value in change_set.fields.items():
            if getattr(order_cycle, key) != value:
                setattr(order_cycle, key, value)
                changed.append(key)

        if ExchangeManager(order_cycle, self.user).apply(change_set):
            changed.append('exchanges')

        if changed:
            order_cycle.updated_by_id = getattr(self.user, 'id', None)
            logger.info(
                f"Order cycle {order_cycle.id} updated by user {getattr(self.user, 'id', None)}: {', '.join(changed)}"
            )
        db.session.commit()

        return UpdateResult(
            success=True,
            notice=OrderCycleNarrator.updated() if reloading else None,
            order_cycle_id=order_cycle.id,
        )
