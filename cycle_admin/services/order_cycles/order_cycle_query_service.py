"""
Order Cycle Query Service
Presentation service for the order cycle listing.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from cycle_admin import db
from cycle_admin.business.order_cycles.change_set import parse_timestamp
from cycle_admin.business.order_cycles.permissions import OrderCyclePermissions
from cycle_admin.data.base import utcnow
from cycle_admin.data.order_cycles.order_cycle import OrderCycle


def parse_id_list(values) -> List[int]:
    """Accept repeated args, comma-separated strings, or a list of either"""
    ids = []
    for value in values or []:
        for part in str(value).split(','):
            part = part.strip()
            if part.isdigit():
                ids.append(int(part))
    return ids


class OrderCycleQueryService:
    """
    Service for the order cycle listing.

    Without an explicit lower bound the listing shows cycles that closed
    within the last `default_days` days plus every cycle without a close date.
    """

    def __init__(self, user, default_days: int = 30, permissions: Optional[OrderCyclePermissions] = None):
        self.user = user
        self.default_days = default_days
        self.permissions = permissions or OrderCyclePermissions(user)

    def build_filtered_query(
        self,
        orders_close_at_gt: Optional[datetime] = None,
        id_not_in: Optional[Iterable[int]] = None,
        id_in: Optional[Iterable[int]] = None,
        now: Optional[datetime] = None,
    ):
        """
        Build the listing query.

        Args:
            orders_close_at_gt: Only cycles closing after this (default: now - default_days)
            id_not_in: Exclude these ids
            id_in: Restrict to these ids
            now: Reference time for the default window

        Returns:
            SQLAlchemy query object
        """
        if orders_close_at_gt is None:
            orders_close_at_gt = (now or utcnow()) - timedelta(days=self.default_days)

        query = OrderCycle.query.filter(
            db.or_(
                OrderCycle.orders_close_at > orders_close_at_gt,
                OrderCycle.orders_close_at.is_(None),
            )
        )

        visibility = self.permissions.visible_order_cycle_filter()
        if visibility is not None:
            query = query.filter(visibility)

        if id_not_in:
            query = query.filter(OrderCycle.id.notin_(list(id_not_in)))
        if id_in is not None:
            query = query.filter(OrderCycle.id.in_(list(id_in)))

        return query.order_by(OrderCycle.orders_close_at.is_(None).desc(), OrderCycle.orders_close_at.desc(), OrderCycle.id.asc())

    def list_from_args(self, args) -> List[OrderCycle]:
        """
        Run the listing from request args (orders_close_at_gt, id_not_in, id_in;
        each also accepted in ransack form, e.g. q[orders_close_at_gt]).

        Raises:
            ValueError: If orders_close_at_gt is not a valid timestamp
        """
        def values(key):
            return args.getlist(key) + args.getlist(f'q[{key}]') + args.getlist(f'q[{key}][]') + args.getlist(f'{key}[]')

        close_values = values('orders_close_at_gt')
        orders_close_at_gt = parse_timestamp(close_values[0]) if close_values else None

        id_in_values = values('id_in')
        return self.build_filtered_query(
            orders_close_at_gt=orders_close_at_gt,
            id_not_in=parse_id_list(values('id_not_in')),
            id_in=parse_id_list(id_in_values) if id_in_values else None,
        ).all()
