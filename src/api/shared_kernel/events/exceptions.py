"""Exceptions raised while decoding events from the wire.

Decoding errors are data errors: retrying delivery cannot fix them, so
consumers acknowledge and drop the offending message.
"""


class EventDecodingError(Exception):
    """Base exception for payloads that cannot be turned into an event."""

    def __init__(self, message: str, event_type: str | None = None):
        super().__init__(message)
        self.event_type = event_type


class UnknownEventTypeError(EventDecodingError):
    """Raised when the payload carries an eventType this service does not know."""

    pass


class MalformedEventError(EventDecodingError):
    """Raised when the payload is not valid JSON or misses required fields."""

    pass
