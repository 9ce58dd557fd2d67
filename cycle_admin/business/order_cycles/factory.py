"""
OrderCycleFactory - creates and clones order cycles

Creation is the one operation without an existing cycle to derive a scope
from, so authorization goes through coordinator selection instead.
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from cycle_admin import db
from cycle_admin.business.order_cycles.change_set import ChangeSet
from cycle_admin.business.order_cycles.errors import OrderCycleDomainError, ValidationError
from cycle_admin.business.order_cycles.exchange_manager import ExchangeManager
from cycle_admin.business.order_cycles.mutation_filter import filter_change_set
from cycle_admin.business.order_cycles.narrator import OrderCycleNarrator
from cycle_admin.business.order_cycles.permissions import OrderCyclePermissions
from cycle_admin.business.order_cycles.policies import OrderCycleDatesPolicy
from cycle_admin.business.order_cycles.updater import SAVE_FAILED_MESSAGE, UpdateResult, load_order_cycle_for_update
from cycle_admin.data.order_cycles.exchange import Exchange
from cycle_admin.data.order_cycles.order_cycle import OrderCycle
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.business.order_cycles.factory")


class OrderCycleFactory:
    """Factory for new order cycles, acting on behalf of one user"""

    def __init__(self, user, permissions: Optional[OrderCyclePermissions] = None):
        self.user = user
        self.permissions = permissions or OrderCyclePermissions(user)

    @property
    def user_id(self):
        return getattr(self.user, 'id', None)

    def create(self, params: Optional[Dict[str, Any]], coordinator_id: Optional[int] = None) -> UpdateResult:
        """
        Create an order cycle coordinated by coordinator_id.

        When coordinator_id is omitted and the user manages exactly one
        eligible enterprise, that enterprise coordinates.
        """
        try:
            selection = self.permissions.select_coordinator(coordinator_id)
            if selection.needs_choice:
                raise ValidationError.on('coordinator_id', "must be chosen")

            change_set = ChangeSet.from_params(params)
            fields = change_set.fields
            OrderCycleDatesPolicy.validate(
                fields.get('name'),
                fields.get('orders_open_at'),
                fields.get('orders_close_at'),
            )

            order_cycle = OrderCycle(
                name=fields['name'],
                orders_open_at=fields.get('orders_open_at'),
                orders_close_at=fields.get('orders_close_at'),
                coordinator_id=selection.coordinator.id,
                created_by_id=self.user_id,
                updated_by_id=self.user_id,
            )
            db.session.add(order_cycle)
            db.session.flush()

            scope = self.permissions.scope_for(order_cycle)
            ExchangeManager(order_cycle, self.user).apply(filter_change_set(scope, change_set))
            db.session.commit()
        except OrderCycleDomainError as e:
            db.session.rollback()
            logger.info(f"Order cycle not created for user {self.user_id}: {e}")
            return UpdateResult.failure(e)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error creating order cycle: {e}")
            return UpdateResult(success=False, errors={'base': [SAVE_FAILED_MESSAGE]}, error_type='DatabaseError')

        logger.info(f"Order cycle {order_cycle.id} created by user {self.user_id}, coordinator {order_cycle.coordinator_id}")
        return UpdateResult(success=True, notice=OrderCycleNarrator.created(order_cycle), order_cycle_id=order_cycle.id)

    def clone(self, order_cycle_id: int) -> UpdateResult:
        """
        Copy an order cycle and its exchanges. The copy has no dates so it
        cannot open before the coordinator reviews it.
        """
        try:
            original = load_order_cycle_for_update(order_cycle_id)
            self.permissions.authorize_coordinator(original)

            copy = OrderCycle(
                name=f"COPY OF {original.name}",
                coordinator_id=original.coordinator_id,
                created_by_id=self.user_id,
                updated_by_id=self.user_id,
            )
            for exchange in original.exchanges:
                copy.exchanges.append(Exchange(
                    sender_id=exchange.sender_id,
                    receiver_id=exchange.receiver_id,
                    incoming=exchange.incoming,
                    pickup_time=exchange.pickup_time,
                    pickup_instructions=exchange.pickup_instructions,
                    receival_instructions=exchange.receival_instructions,
                    variants=list(exchange.variants),
                    created_by_id=self.user_id,
                    updated_by_id=self.user_id,
                ))
            db.session.add(copy)
            db.session.commit()
        except OrderCycleDomainError as e:
            db.session.rollback()
            logger.info(f"Order cycle {order_cycle_id} not cloned: {e}")
            return UpdateResult.failure(e, order_cycle_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error cloning order cycle {order_cycle_id}: {e}")
            return UpdateResult(success=False, errors={'base': [SAVE_FAILED_MESSAGE]}, error_type='DatabaseError')

        logger.info(f"Order cycle {order_cycle_id} cloned as {copy.id} by user {self.user_id}")
        return UpdateResult(success=True, notice=OrderCycleNarrator.cloned(original), order_cycle_id=copy.id)
