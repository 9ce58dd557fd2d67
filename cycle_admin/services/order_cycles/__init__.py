from cycle_admin.services.order_cycles.order_cycle_query_service import OrderCycleQueryService

__all__ = ['OrderCycleQueryService']
