"""Ingestion orchestration: normalize, dedupe, route."""

import logging
from typing import Any

from signalrouter.adapters.statuspage import StatusPageFetcher
from signalrouter.domain.errors import UnsupportedEventType
from signalrouter.domain.models import (
    BatchReport,
    IngestOutcome,
    IngestResult,
    NormalizedEvent,
    RoutingConfig,
    Source,
)
from signalrouter.services.normalization import Normalizer
from signalrouter.services.routing import RoutingEngine
from signalrouter.storage.event_store import EventStore

log = logging.getLogger(__name__)


class IngestionPipeline:
    def __init__(
        self,
        normalizer: Normalizer,
        store: EventStore,
        router: RoutingEngine,
        config: RoutingConfig,
        fetcher: StatusPageFetcher | None = None,
    ) -> None:
        self.normalizer = normalizer
        self.store = store
        self.router = router
        self.config = config
        self.fetcher = fetcher

    def ingest_payment_webhook(self, payload: dict[str, Any], source: Source = Source.stripe) -> IngestResult:
        """Normalize one verified webhook body and store/route it.

        ``PayloadValidationError`` propagates to the caller; unsupported event
        types are reported as ``ignored`` and never touch the store.
        """

        try:
            event = self.normalizer.normalize_webhook(source, payload)
        except UnsupportedEventType as exc:
            log.info("ignoring %s event type=%s", source.value, exc.event_type)
            return IngestResult(
                event_id=payload.get("id") if isinstance(payload.get("id"), str) else None,
                source=source,
                outcome=IngestOutcome.ignored,
                detail=exc.message,
            )
        return self._ingest_event(event)

    def ingest_status_document(self, source: Source, document: dict[str, Any], origin: str = "push") -> BatchReport:
        batch = self.normalizer.normalize_status_document(source, document)
        report = BatchReport(
            source=source,
            origin=origin,
            fetched=batch.fetched,
            skipped=batch.skipped,
            rejected=len(batch.errors),
            errors=batch.errors,
        )
        for error in batch.errors:
            log.warning(
                "rejected %s %s[%d] field=%s: %s",
                source.value,
                error.section,
                error.index,
                error.field,
                error.message,
            )

        for event in batch.events:
            result = self._ingest_event(event)
            report.results.append(result)
            if result.outcome == IngestOutcome.deduped:
                report.deduped += 1
                continue
            report.stored += 1
            if result.routed:
                report.routed += 1

        log.info(
            "status ingest source=%s origin=%s fetched=%d stored=%d deduped=%d routed=%d rejected=%d",
            source.value,
            origin,
            report.fetched,
            report.stored,
            report.deduped,
            report.routed,
            report.rejected,
        )
        return report

    def poll_status_source(self, source: Source) -> BatchReport:
        if self.fetcher is None:
            raise RuntimeError("pipeline was built without a status-page fetcher")
        self.normalizer.status_variant(source)
        document, origin = self.fetcher.fetch(source)
        return self.ingest_status_document(source, document, origin=origin)

    def _ingest_event(self, event: NormalizedEvent) -> IngestResult:
        insert = self.store.insert_if_absent(event)
        if not insert.inserted:
            log.info("duplicate event_id=%s source=%s", event.event_id, event.source.value)
            stored = insert.stored
            return IngestResult(
                event_id=event.event_id,
                source=event.source,
                outcome=IngestOutcome.deduped,
                routed=stored.delivery.routed,
                delivered_to=list(stored.delivery.delivered_to),
            )

        routing = self.router.evaluate_and_deliver(insert.stored.event, self.config)
        return IngestResult(
            event_id=event.event_id,
            source=event.source,
            outcome=IngestOutcome.stored,
            routed=routing.routed,
            delivered_to=routing.delivered_to,
        )
