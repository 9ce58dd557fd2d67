from cycle_admin.data.orders.order import Order
from cycle_admin.data.orders.schedule import Schedule, order_cycle_schedules

__all__ = ['Order', 'Schedule', 'order_cycle_schedules']
