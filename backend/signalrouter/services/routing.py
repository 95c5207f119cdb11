"""Severity-based routing and best-effort delivery."""

import logging

from signalrouter.adapters.interfaces import Destination
from signalrouter.config import Settings
from signalrouter.domain.errors import DeliveryError
from signalrouter.domain.models import NormalizedEvent, RoutingConfig, RoutingResult, Severity
from signalrouter.storage.event_store import EventStore

log = logging.getLogger(__name__)


def should_route(severity: Severity, route_warnings: bool) -> bool:
    """critical always, warning only when enabled, info never."""

    if severity == Severity.critical:
        return True
    if severity == Severity.warning:
        return route_warnings
    return False


def routing_config_from(settings: Settings) -> RoutingConfig:
    return RoutingConfig(route_warnings=settings.route_warnings)


class RoutingEngine:
    """Decide whether an event pages, deliver it, and record the outcome."""

    def __init__(self, store: EventStore, destinations: list[Destination]) -> None:
        self.store = store
        self.destinations = destinations

    def evaluate_and_deliver(self, event: NormalizedEvent, config: RoutingConfig) -> RoutingResult:
        stored = self.store.get(event.event_id)
        if stored is not None and stored.delivery.routed:
            log.info("event_id=%s already routed, skipping", event.event_id)
            return RoutingResult(routed=True, delivered_to=list(stored.delivery.delivered_to))

        if not should_route(event.severity, config.route_warnings):
            log.debug("event_id=%s severity=%s not routed", event.event_id, event.severity.value)
            return RoutingResult()

        delivered_to: list[str] = []
        for destination in self.destinations:
            try:
                destination.deliver(event)
            except DeliveryError as exc:
                log.error(
                    "delivery failed event_id=%s destination=%s error=%s",
                    event.event_id,
                    destination.name,
                    exc,
                )
                continue
            except Exception:  # noqa: BLE001
                log.exception("delivery failed event_id=%s destination=%s", event.event_id, destination.name)
                continue
            self.store.mark_delivered(event.event_id, destination.name)
            delivered_to.append(destination.name)

        return RoutingResult(routed=bool(delivered_to), delivered_to=delivered_to)
