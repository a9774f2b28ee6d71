"""
Error taxonomy for the call-plan core.

Nothing here is fatal: every failure is local and recoverable by the
operator repeating the action.
"""
from typing import Optional


class CallPlanError(Exception):
    """Base class for call-plan errors."""
    pass


class ServiceError(CallPlanError):
    """
    Backend call failed: transport error or a not-ok response.

    Always retryable by the operator; never retried automatically.
    """

    retryable = True

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None):
        self.operation = operation
        self.message = message
        self.status_code = status_code
        super().__init__(f"{operation} failed: {message}")


class ValidationError(CallPlanError):
    """Rejected locally before any request is sent."""

    retryable = False


class InvalidOutcomeError(ValidationError):
    """Outcome is not one of the closed Outcome values."""
    pass


class ContactNotFoundError(ValidationError):
    """Contact is not tracked in the queue for this logging context."""
    pass


class ReminderValidationError(ValidationError):
    """Reminder draft is missing a required field or has a bad value."""
    pass
