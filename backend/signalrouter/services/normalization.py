"""Per-source normalization registry."""

from dataclasses import dataclass, field
from typing import Any

from signalrouter.adapters.interfaces import SourceAdapter, SourceContext
from signalrouter.adapters.statuspage import StatusPageComponentAdapter, StatusPageIncidentAdapter
from signalrouter.adapters.stripe import StripeWebhookAdapter
from signalrouter.domain.errors import PayloadValidationError, UnknownSourceError
from signalrouter.domain.models import EntryError, NormalizedEvent, Source
from signalrouter.services.severity_policy import SeverityPolicy, get_severity_policy


@dataclass(frozen=True)
class WebhookVariant:
    context: SourceContext
    adapter: SourceAdapter


@dataclass(frozen=True)
class StatusPageVariant:
    context: SourceContext
    incidents: SourceAdapter
    components: SourceAdapter


SourceVariant = WebhookVariant | StatusPageVariant


@dataclass
class NormalizedBatch:
    """Result of normalizing one status-page document."""

    events: list[NormalizedEvent] = field(default_factory=list)
    errors: list[EntryError] = field(default_factory=list)
    fetched: int = 0
    skipped: int = 0


def build_registry(policy: SeverityPolicy | None = None) -> dict[Source, SourceVariant]:
    policy = policy or get_severity_policy()
    incidents = StatusPageIncidentAdapter(policy)
    components = StatusPageComponentAdapter(policy)
    return {
        Source.stripe: WebhookVariant(
            context=SourceContext(source=Source.stripe, display_name="Stripe"),
            adapter=StripeWebhookAdapter(policy),
        ),
        Source.github_status: StatusPageVariant(
            context=SourceContext(source=Source.github_status, display_name="GitHub"),
            incidents=incidents,
            components=components,
        ),
        Source.openai_status: StatusPageVariant(
            context=SourceContext(source=Source.openai_status, display_name="OpenAI"),
            incidents=incidents,
            components=components,
        ),
    }


class Normalizer:
    """Dispatch raw payloads to the adapter variant registered for their source."""

    def __init__(self, registry: dict[Source, SourceVariant] | None = None) -> None:
        self.registry = registry or build_registry()
        missing = set(Source) - set(self.registry)
        if missing:
            raise ValueError(f"no adapter registered for {sorted(s.value for s in missing)}")

    def status_variant(self, source: Source) -> StatusPageVariant:
        variant = self.registry[source]
        if not isinstance(variant, StatusPageVariant):
            raise UnknownSourceError(f"{source.value} is not a status-page source")
        return variant

    def normalize_webhook(self, source: Source, payload: Any) -> NormalizedEvent:
        variant = self.registry[source]
        if not isinstance(variant, WebhookVariant):
            raise UnknownSourceError(f"{source.value} is not a webhook source")
        if not isinstance(payload, dict):
            raise PayloadValidationError(None, "webhook body must be a JSON object")
        event = variant.adapter.normalize(payload, variant.context)
        if event is None:
            raise PayloadValidationError(None, "payload produced no event")
        return event

    def normalize_status_document(self, source: Source, document: Any) -> NormalizedBatch:
        variant = self.status_variant(source)
        if not isinstance(document, dict):
            raise PayloadValidationError(None, "status document must be a JSON object")
        incidents = document.get("incidents", [])
        components = document.get("components", [])
        if not isinstance(incidents, list):
            raise PayloadValidationError("incidents", "expected a list")
        if not isinstance(components, list):
            raise PayloadValidationError("components", "expected a list")

        batch = NormalizedBatch(fetched=len(incidents) + len(components))
        for section, entries, adapter in (
            ("incidents", incidents, variant.incidents),
            ("components", components, variant.components),
        ):
            for index, entry in enumerate(entries):
                try:
                    if not isinstance(entry, dict):
                        raise PayloadValidationError(None, "entry must be an object")
                    event = adapter.normalize(entry, variant.context)
                except PayloadValidationError as exc:
                    batch.errors.append(
                        EntryError(index=index, section=section, field=exc.field, message=exc.message)
                    )
                    continue
                if event is None:
                    batch.skipped += 1
                    continue
                batch.events.append(event)
        return batch
