"""
Order Cycle Dates Policy

Validates the name and open/close window of an order cycle.
"""

from datetime import datetime
from typing import Optional

from cycle_admin.business.order_cycles.errors import ValidationError


class OrderCycleDatesPolicy:
    """
    Enforces the core field invariants.

    Rules:
    1. The name must not be blank
    2. When both dates are set, orders_close_at must not precede orders_open_at
    """

    @classmethod
    def validate(
        cls,
        name: Optional[str],
        orders_open_at: Optional[datetime],
        orders_close_at: Optional[datetime]
    ) -> None:
        """
        Raises:
            ValidationError: One message per offending field
        """
        errors = {}

        if name is None or (isinstance(name, str) and not name.strip()):
            errors['name'] = ["can't be blank"]

        if orders_open_at is not None and orders_close_at is not None:
            if orders_close_at < orders_open_at:
                errors['orders_close_at'] = ["must be after open date"]

        if errors:
            raise ValidationError(errors)

    @classmethod
    def validate_merged(cls, order_cycle, fields) -> None:
        """Validate the values order_cycle would have once fields are applied"""
        cls.validate(
            fields.get('name', order_cycle.name),
            fields.get('orders_open_at', order_cycle.orders_open_at),
            fields.get('orders_close_at', order_cycle.orders_close_at),
        )
