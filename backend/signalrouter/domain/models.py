"""Domain schemas and enums."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Source(str, Enum):
    """Closed set of origin tags."""

    stripe = "stripe"
    github_status = "github_status"
    openai_status = "openai_status"


class EventKind(str, Enum):
    incident = "incident"
    status = "status"
    payment = "payment"


class Severity(str, Enum):
    """Ordered urgency classification: info < warning < critical."""

    info = "info"
    warning = "warning"
    critical = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {"info": 0, "warning": 1, "critical": 2}


class IngestOutcome(str, Enum):
    stored = "stored"
    deduped = "deduped"
    ignored = "ignored"


class NormalizedEvent(BaseModel):
    """Canonical cross-vendor event."""

    model_config = ConfigDict(frozen=True)

    event_id: str
    source: Source
    kind: EventKind
    severity: Severity
    service: str
    summary: str
    description: str | None = None
    started_at: datetime
    resolved_at: datetime | None = None
    raw: dict[str, Any]

    @field_validator("event_id", "summary")
    @classmethod
    def ensure_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class DeliveryMetadata(BaseModel):
    routed: bool = False
    delivered_to: list[str] = Field(default_factory=list)


class StoredEvent(BaseModel):
    """Event as held by the store, with its mutable delivery metadata."""

    event: NormalizedEvent
    delivery: DeliveryMetadata = Field(default_factory=DeliveryMetadata)
    first_seen_at: datetime

    @property
    def event_id(self) -> str:
        return self.event.event_id


class EventRecord(BaseModel):
    """Flat wire shape of a stored event."""

    event_id: str
    source: Source
    kind: EventKind
    severity: Severity
    service: str
    summary: str
    description: str | None = None
    started_at: datetime
    resolved_at: datetime | None = None
    raw: dict[str, Any]
    routed: bool
    delivered_to: list[str]
    first_seen_at: datetime

    @classmethod
    def from_stored(cls, stored: StoredEvent) -> "EventRecord":
        return cls(
            **stored.event.model_dump(),
            routed=stored.delivery.routed,
            delivered_to=list(stored.delivery.delivered_to),
            first_seen_at=stored.first_seen_at,
        )


class InsertResult(BaseModel):
    inserted: bool
    stored: StoredEvent


class RoutingConfig(BaseModel):
    route_warnings: bool = False


class RoutingResult(BaseModel):
    routed: bool = False
    delivered_to: list[str] = Field(default_factory=list)


class IngestResult(BaseModel):
    event_id: str | None = None
    source: Source
    outcome: IngestOutcome
    routed: bool = False
    delivered_to: list[str] = Field(default_factory=list)
    detail: str | None = None


class EntryError(BaseModel):
    """A single rejected entry inside a batch document."""

    index: int
    section: str
    field: str | None = None
    message: str


class BatchReport(BaseModel):
    source: Source
    origin: str
    fetched: int = 0
    skipped: int = 0
    rejected: int = 0
    stored: int = 0
    deduped: int = 0
    routed: int = 0
    errors: list[EntryError] = Field(default_factory=list)
    results: list[IngestResult] = Field(default_factory=list)
