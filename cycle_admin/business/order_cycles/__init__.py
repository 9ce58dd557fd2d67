"""
Order cycle business layer

Scope resolution (permissions), change-set projection (mutation_filter),
and the engines that create, update, bulk-update, delete and notify.
"""

from cycle_admin.business.order_cycles.errors import (
    OrderCycleDomainError,
    AuthorizationError,
    ValidationError,
    DependencyConflictError,
    EmptyInputError,
    NotFoundError,
)
from cycle_admin.business.order_cycles.change_set import ChangeSet, ExchangeEdit
from cycle_admin.business.order_cycles.permissions import OrderCyclePermissions, UpdateScope, CoordinatorSelection
from cycle_admin.business.order_cycles.mutation_filter import filter_change_set
from cycle_admin.business.order_cycles.updater import OrderCycleUpdater, UpdateResult
from cycle_admin.business.order_cycles.factory import OrderCycleFactory
from cycle_admin.business.order_cycles.bulk_updater import OrderCycleBulkUpdater, BulkUpdateResult
from cycle_admin.business.order_cycles.deletion_guard import OrderCycleDeletionGuard, DeletionResult
from cycle_admin.business.order_cycles.notifications import (
    OrderCycleNotificationJob,
    ProducerNotificationTrigger,
    NotificationResult,
)

__all__ = [
    'OrderCycleDomainError',
    'AuthorizationError',
    'ValidationError',
    'DependencyConflictError',
    'EmptyInputError',
    'NotFoundError',
    'ChangeSet',
    'ExchangeEdit',
    'OrderCyclePermissions',
    'UpdateScope',
    'CoordinatorSelection',
    'filter_change_set',
    'OrderCycleUpdater',
    'UpdateResult',
    'OrderCycleFactory',
    'OrderCycleBulkUpdater',
    'BulkUpdateResult',
    'OrderCycleDeletionGuard',
    'DeletionResult',
    'OrderCycleNotificationJob',
    'ProducerNotificationTrigger',
    'NotificationResult',
]
