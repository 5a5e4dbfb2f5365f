"""Exceptions for the outbox relay and the delivery channel."""


class DeliveryChannelError(Exception):
    """Base exception for delivery channel operations."""

    pass


class DeliveryChannelUnavailableError(DeliveryChannelError):
    """Raised when the broker cannot be reached or the channel is closed.

    This is a transient infrastructure error: the relay leaves the record
    unpublished and retries it on the next poll cycle.
    """

    pass


class RelayCycleError(Exception):
    """Raised when a relay poll cycle aborts part way through.

    Records published before the failure stay published; the failing record
    and the rest of the batch stay pending for the next cycle.

    Attributes:
        published: Number of records published before the failure
    """

    def __init__(self, message: str, published: int = 0):
        super().__init__(message)
        self.published = published
