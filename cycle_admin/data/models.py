"""
Imports every model so SQLAlchemy's metadata is complete before
create_all() or a migration runs.
"""

from cycle_admin.data.core.user import User
from cycle_admin.data.core.enterprise import Enterprise, EnterpriseRole
from cycle_admin.data.core.variant import Variant
from cycle_admin.data.order_cycles import OrderCycle, Exchange, exchange_variants
from cycle_admin.data.orders import Order, Schedule, order_cycle_schedules

__all__ = [
    'User',
    'Enterprise',
    'EnterpriseRole',
    'Variant',
    'OrderCycle',
    'Exchange',
    'exchange_variants',
    'Order',
    'Schedule',
    'order_cycle_schedules',
]
