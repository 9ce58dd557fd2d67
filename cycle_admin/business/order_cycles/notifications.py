"""
Producer notifications

ProducerNotificationTrigger hands an OrderCycleNotificationJob to the task
queue and returns straight away. The job, run later by a worker, works out
which producers supply the cycle and what each of them supplies; delivering
the emails belongs to the mailer.
"""

from dataclasses import dataclass
from typing import List, Optional

from cycle_admin import db
from cycle_admin.business.order_cycles.errors import AuthorizationError, NotFoundError
from cycle_admin.business.order_cycles.narrator import OrderCycleNarrator
from cycle_admin.data.order_cycles.order_cycle import OrderCycle
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.business.order_cycles.notifications")


class OrderCycleNotificationJob:
    """Builds one notification per producer supplying an order cycle"""

    def __init__(self, order_cycle_id: int):
        self.order_cycle_id = order_cycle_id

    def perform(self) -> List[dict]:
        order_cycle = db.session.get(OrderCycle, self.order_cycle_id)
        if order_cycle is None:
            raise NotFoundError(f"Order cycle {self.order_cycle_id} not found")

        notifications = []
        seen = set()
        for exchange in order_cycle.incoming_exchanges:
            producer = exchange.sender
            if producer.id in seen:
                continue
            seen.add(producer.id)
            notifications.append({
                'order_cycle_id': order_cycle.id,
                'producer_id': producer.id,
                'recipient': producer.owner.email,
                'subject': OrderCycleNarrator.producer_notification(order_cycle, producer),
                'variant_ids': sorted(exchange.variant_ids),
            })

        logger.info(f"Prepared {len(notifications)} producer notification(s) for order cycle {order_cycle.id}")
        return notifications


@dataclass
class NotificationResult:
    queued: bool
    notice: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self):
        data = {'queued': self.queued}
        if self.error:
            data['errors'] = self.error
        return data


class ProducerNotificationTrigger:
    """Fire-and-forget trigger for producer notification emails"""

    def __init__(self, task_queue):
        self.task_queue = task_queue

    def trigger(self, order_cycle_id: int, user) -> NotificationResult:
        """
        Queue the notification job. Only global administrators may do this.
        """
        if not getattr(user, 'is_admin', False):
            error = AuthorizationError("Only administrators can notify producers")
            logger.warning(f"User {getattr(user, 'id', None)} tried to notify producers of order cycle {order_cycle_id}")
            return NotificationResult(queued=False, error=str(error))

        self.task_queue.enqueue(OrderCycleNotificationJob, order_cycle_id)
        logger.info(f"Producer notifications for order cycle {order_cycle_id} queued by user {user.id}")
        return NotificationResult(queued=True, notice=OrderCycleNarrator.producers_notified())
