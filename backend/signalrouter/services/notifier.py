"""Paging destinations."""

import logging

from signalrouter.adapters.interfaces import Destination
from signalrouter.adapters.pagerduty import PagerDutyClient
from signalrouter.config import Settings
from signalrouter.domain.models import NormalizedEvent

log = logging.getLogger(__name__)


class ConsoleDestination(Destination):
    """Log-only sink used when no paging integration is configured."""

    name = "console"

    def deliver(self, event: NormalizedEvent) -> None:
        log.warning(
            "PAGE source=%s severity=%s service=%s event_id=%s summary=%s",
            event.source.value,
            event.severity.value,
            event.service,
            event.event_id,
            event.summary,
        )


def build_destinations(settings: Settings) -> list[Destination]:
    if settings.pagerduty_routing_key:
        return [
            PagerDutyClient(
                routing_key=settings.pagerduty_routing_key,
                events_url=settings.pagerduty_events_url,
                timeout_seconds=settings.delivery_timeout_seconds,
            )
        ]
    return [ConsoleDestination()]
