"""
Policy classes for order cycle business rules

Policies are composable validation rules that enforce invariants.
They raise ValidationError when violations are detected.
"""

from cycle_admin.business.order_cycles.policies.order_cycle_dates import OrderCycleDatesPolicy
from cycle_admin.business.order_cycles.policies.exchange_variants import ExchangeVariantPolicy

__all__ = [
    'OrderCycleDatesPolicy',
    'ExchangeVariantPolicy',
]
