"""
Domain exceptions for order cycle business logic

These exceptions represent business rule violations. Engines raise them
internally and convert them to result objects at their boundary, so none of
them reaches the presentation layer as an uncaught fault.
"""


class OrderCycleDomainError(Exception):
    """Base exception for all order cycle domain errors"""

    def to_errors(self):
        return {'base': [str(self)]}


class AuthorizationError(OrderCycleDomainError):
    """Raised when the actor has no manageable relation to the order cycle or coordinator"""
    pass


class ValidationError(OrderCycleDomainError):
    """
    Raised when a change would break an order cycle invariant.

    Carries field-level messages: {field: [message, ...]}.
    """

    def __init__(self, errors):
        self.errors = {field: list(messages) for field, messages in errors.items()}
        super().__init__(
            "; ".join(f"{field}: {', '.join(messages)}" for field, messages in self.errors.items())
        )

    @classmethod
    def on(cls, field, message):
        return cls({field: [message]})

    def to_errors(self):
        return self.errors


class DependencyConflictError(OrderCycleDomainError):
    """Raised when an order cycle cannot be destroyed because other records depend on it"""

    ORDERS_PRESENT = 'orders_present'
    SCHEDULE_PRESENT = 'schedule_present'

    MESSAGES = {
        ORDERS_PRESENT: (
            "That order cycle has been selected by a customer and cannot be deleted. "
            "To prevent customers from accessing it, please close it instead."
        ),
        SCHEDULE_PRESENT: (
            "That order cycle is linked to a schedule and cannot be deleted. "
            "Please unlink or delete the schedule first."
        ),
    }

    def __init__(self, reason):
        self.reason = reason
        super().__init__(self.MESSAGES[reason])


class EmptyInputError(OrderCycleDomainError):
    """Raised when a bulk update carries no rows"""

    MESSAGE = "No order cycle data supplied."

    def __init__(self, message=MESSAGE):
        super().__init__(message)


class NotFoundError(OrderCycleDomainError):
    """Raised when the referenced order cycle does not exist"""
    pass
