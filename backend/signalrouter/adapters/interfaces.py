"""Adapter interface contracts."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from signalrouter.domain.errors import PayloadValidationError
from signalrouter.domain.models import NormalizedEvent, Source


@dataclass(frozen=True)
class SourceContext:
    """Metadata about where a payload came from."""

    source: Source
    display_name: str


class SourceAdapter(ABC):
    """Normalize one vendor payload entry into a canonical event.

    Returns ``None`` when the entry is filtered by policy and raises
    ``PayloadValidationError`` when a required field is missing or malformed.
    """

    @abstractmethod
    def normalize(self, payload: dict[str, Any], context: SourceContext) -> NormalizedEvent | None:
        raise NotImplementedError


class Destination(ABC):
    """Paging sink that receives routed events."""

    name: str

    @abstractmethod
    def deliver(self, event: NormalizedEvent) -> None:
        """Deliver one event; raise ``DeliveryError`` on failure."""
        raise NotImplementedError


def require_str(payload: dict[str, Any], field: str, *, path: str | None = None) -> str:
    value = payload.get(field)
    label = path or field
    if value is None:
        raise PayloadValidationError(label, "missing required field")
    if not isinstance(value, str) or not value.strip():
        raise PayloadValidationError(label, "expected a non-empty string")
    return value


def optional_str(payload: dict[str, Any], field: str) -> str | None:
    value = payload.get(field)
    if isinstance(value, str) and value.strip():
        return value
    return None
