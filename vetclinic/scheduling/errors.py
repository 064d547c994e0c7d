"""Typed, recoverable failures raised by the scheduling engine."""


class SchedulingError(Exception):
    """Base class for every scheduling failure reported to a caller."""

    default_message = 'Scheduling request failed.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(SchedulingError):
    default_message = 'Resource not found.'


class SlotUnavailable(SchedulingError):
    default_message = 'This time slot is not available.'


class InvalidTransition(SchedulingError):
    default_message = 'This status change is not permitted.'


class InvalidStatus(SchedulingError):
    default_message = 'Invalid status.'


class CancellationWindowExpired(SchedulingError):
    default_message = 'Cannot cancel appointments less than 2 hours before the scheduled time.'


class AlreadyCompleted(SchedulingError):
    default_message = 'Cannot cancel completed appointments.'


class Unauthorized(SchedulingError):
    default_message = 'Not authorized to perform this action.'


class ValidationFailed(SchedulingError):
    default_message = 'Invalid scheduling request.'
