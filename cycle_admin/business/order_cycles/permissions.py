"""
Order Cycle Permissions

Works out what an actor may change on an order cycle, and which enterprises
the actor may designate as coordinator of a new one. Roles are derived from
the cycle's current exchange rows on every call and never cached.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from cycle_admin.business.enterprises.directory import EnterpriseDirectory
from cycle_admin.business.order_cycles.errors import AuthorizationError
from cycle_admin.data.core.enterprise import Enterprise
from cycle_admin import db
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.business.order_cycles.permissions")

Edge = Tuple[int, int]

FORBIDDEN_COORDINATOR_MESSAGE = "You don't have permission to create an order cycle coordinated by that enterprise"
NO_COORDINATOR_MESSAGE = "You don't manage any enterprise that can coordinate an order cycle"


@dataclass(frozen=True)
class UpdateScope:
    """
    What one actor may mutate on one order cycle.

    editable_exchange_edges holds (sender_id, receiver_id) pairs. Actors with
    can_create_exchanges may also add exchanges on edges that don't exist yet.
    """
    coordinator_id: Optional[int] = None
    can_edit_core_fields: bool = False
    editable_exchange_edges: FrozenSet[Edge] = frozenset()
    can_create_exchanges: bool = False

    @classmethod
    def empty(cls, coordinator_id=None):
        return cls(coordinator_id=coordinator_id)

    @property
    def is_empty(self):
        return not (self.can_edit_core_fields or self.editable_exchange_edges or self.can_create_exchanges)

    @property
    def is_full(self):
        return self.can_edit_core_fields and self.can_create_exchanges

    def allows_edge(self, edge: Edge) -> bool:
        return self.can_create_exchanges or edge in self.editable_exchange_edges


@dataclass
class CoordinatorSelection:
    """Outcome of picking a coordinator for a new order cycle"""
    coordinator: Optional[Enterprise] = None
    choices: List[Enterprise] = field(default_factory=list)

    @property
    def needs_choice(self):
        return self.coordinator is None


class OrderCyclePermissions:
    """Permission scope resolver for one acting user"""

    def __init__(self, user, directory: Optional[EnterpriseDirectory] = None):
        self.user = user
        self.directory = directory or EnterpriseDirectory()

    @property
    def is_admin(self):
        return bool(getattr(self.user, 'is_admin', False))

    def scope_for(self, order_cycle) -> UpdateScope:
        """
        Compute the actor's scope on an existing order cycle.

        Coordinator managers (and global admins) get everything. Managers of a
        supplier on an incoming exchange, or of a distributor on an outgoing
        one, get just those exchanges. Everyone else gets an empty scope.
        """
        coordinator_id = order_cycle.coordinator_id
        all_edges = frozenset(exchange.edge for exchange in order_cycle.exchanges)

        if self.is_admin:
            return UpdateScope(coordinator_id, True, all_edges, True)

        managed_ids = self.directory.managed_enterprise_ids(self.user)
        if coordinator_id in managed_ids:
            return UpdateScope(coordinator_id, True, all_edges, True)

        edges = frozenset(
            exchange.edge
            for exchange in order_cycle.exchanges
            if (exchange.incoming and exchange.sender_id in managed_ids)
            or (not exchange.incoming and exchange.receiver_id in managed_ids)
        )
        if edges:
            logger.debug(f"User {self.user.id} limited to {len(edges)} exchange(s) on order cycle {order_cycle.id}")
            return UpdateScope(coordinator_id, False, edges, False)

        return UpdateScope.empty(coordinator_id)

    def authorize_update(self, order_cycle) -> UpdateScope:
        """Scope for order_cycle, raising AuthorizationError when it is empty"""
        scope = self.scope_for(order_cycle)
        if scope.is_empty:
            logger.warning(f"User {getattr(self.user, 'id', None)} denied access to order cycle {order_cycle.id}")
            raise AuthorizationError("You don't have permission to manage that order cycle")
        return scope

    def authorize_coordinator(self, order_cycle) -> None:
        """Administrative actions (destroy, clone) need the coordinator"""
        if not self.scope_for(order_cycle).is_full:
            logger.warning(f"User {getattr(self.user, 'id', None)} is not a coordinator manager of order cycle {order_cycle.id}")
            raise AuthorizationError("You don't have permission to manage that order cycle")

    def visible_order_cycle_filter(self):
        """
        SQL criterion for the order cycles this actor may see.

        None means no restriction (global admins).
        """
        from cycle_admin.data.order_cycles.exchange import Exchange
        from cycle_admin.data.order_cycles.order_cycle import OrderCycle

        if self.is_admin:
            return None

        managed_ids = sorted(self.directory.managed_enterprise_ids(self.user))
        participating = db.select(Exchange.order_cycle_id).where(
            db.or_(
                db.and_(Exchange.incoming.is_(True), Exchange.sender_id.in_(managed_ids)),
                db.and_(Exchange.incoming.is_(False), Exchange.receiver_id.in_(managed_ids)),
            )
        )
        return db.or_(
            OrderCycle.coordinator_id.in_(managed_ids),
            OrderCycle.id.in_(participating),
        )

    # ========== Creation ==========

    def coordinator_choices(self) -> List[Enterprise]:
        """Managed enterprises that are eligible to coordinate"""
        return [
            enterprise
            for enterprise in self.directory.enterprises_managed_by(self.user)
            if self.directory.is_coordinator_eligible(enterprise)
        ]

    def select_coordinator(self, coordinator_id: Optional[int] = None) -> CoordinatorSelection:
        """
        Decide the coordinator for a new order cycle.

        Raises:
            AuthorizationError: If the requested coordinator can't be managed
                by the actor, or the actor manages no eligible enterprise
        """
        choices = self.coordinator_choices()

        if coordinator_id is not None:
            try:
                coordinator_id = int(coordinator_id)
            except (TypeError, ValueError):
                logger.warning(f"User {getattr(self.user, 'id', None)} sent invalid coordinator id {coordinator_id!r}")
                raise AuthorizationError(FORBIDDEN_COORDINATOR_MESSAGE)
            for enterprise in choices:
                if enterprise.id == coordinator_id:
                    return CoordinatorSelection(coordinator=enterprise, choices=choices)
            logger.warning(f"User {getattr(self.user, 'id', None)} requested forbidden coordinator {coordinator_id}")
            raise AuthorizationError(FORBIDDEN_COORDINATOR_MESSAGE)

        if not choices:
            raise AuthorizationError(NO_COORDINATOR_MESSAGE)
        if len(choices) == 1:
            return CoordinatorSelection(coordinator=choices[0], choices=choices)
        return CoordinatorSelection(coordinator=None, choices=choices)
