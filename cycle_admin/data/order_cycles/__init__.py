from cycle_admin.data.order_cycles.order_cycle import OrderCycle
from cycle_admin.data.order_cycles.exchange import Exchange, exchange_variants

__all__ = ['OrderCycle', 'Exchange', 'exchange_variants']
