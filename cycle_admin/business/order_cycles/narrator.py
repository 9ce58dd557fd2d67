"""
OrderCycleNarrator - user-facing notices for order cycle operations

Keeps flash wording out of the engines and routes.
"""


class OrderCycleNarrator:
    """Composes the notices shown after order cycle operations"""

    @staticmethod
    def created(order_cycle) -> str:
        return f"Order cycle '{order_cycle.name}' has been created."

    @staticmethod
    def updated() -> str:
        return "Your order cycle has been updated."

    @staticmethod
    def cloned(order_cycle) -> str:
        return f"Your order cycle {order_cycle.name} has been cloned."

    @staticmethod
    def deleted(name: str) -> str:
        return f"Order cycle '{name}' has been deleted."

    @staticmethod
    def producers_notified() -> str:
        return "Emails to be sent to producers have been queued for sending."

    @staticmethod
    def producer_notification(order_cycle, producer) -> str:
        """Subject line for one producer's notification"""
        return f"{order_cycle.coordinator.name}: order cycle report for {producer.name} ({order_cycle.name})"
