"""Error taxonomy shared by adapters, services and routes."""


class SignalRouterError(Exception):
    """Base class for service errors."""


class AuthenticityError(SignalRouterError):
    """Raised when a webhook signature cannot be verified."""


class PayloadValidationError(SignalRouterError, ValueError):
    """Raised when a payload is missing or has a malformed required field."""

    def __init__(self, field: str | None, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}" if field else message)


class UnsupportedEventType(PayloadValidationError):
    """Raised for vendor event types outside the recognized set."""

    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__("type", f"unsupported event type {event_type!r}")


class DeliveryError(SignalRouterError):
    """Raised by destination clients when a delivery attempt fails."""


class StatusFetchError(SignalRouterError):
    """Raised when a configured status-page document cannot be fetched."""


class UnknownSourceError(SignalRouterError, LookupError):
    """Raised when a source tag has no matching status-page variant."""
