"""PagerDuty Events API v2 destination."""

import logging
from typing import Any

import httpx

from signalrouter.adapters.interfaces import Destination
from signalrouter.domain.errors import DeliveryError
from signalrouter.domain.models import NormalizedEvent

log = logging.getLogger(__name__)


class PagerDutyClient(Destination):
    name = "pagerduty"

    def __init__(
        self,
        routing_key: str,
        events_url: str,
        timeout_seconds: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.routing_key = routing_key
        self.events_url = events_url
        self.timeout_seconds = timeout_seconds
        self._client = client

    def build_body(self, event: NormalizedEvent) -> dict[str, Any]:
        return {
            "routing_key": self.routing_key,
            "event_action": "trigger",
            "dedup_key": event.event_id,
            "payload": {
                "summary": event.summary[:1024],
                "source": event.service,
                "severity": event.severity.value,
                "timestamp": event.started_at.isoformat(),
                "component": event.service,
                "class": event.kind.value,
                "custom_details": {
                    "origin": event.source.value,
                    "kind": event.kind.value,
                    "description": event.description,
                },
            },
        }

    def deliver(self, event: NormalizedEvent) -> None:
        body = self.build_body(event)
        try:
            if self._client is not None:
                resp = self._client.post(self.events_url, json=body, timeout=self.timeout_seconds)
            else:
                resp = httpx.post(self.events_url, json=body, timeout=self.timeout_seconds)
        except httpx.HTTPError as exc:
            raise DeliveryError(f"pagerduty request failed: {exc}") from exc
        if resp.status_code >= 300:
            raise DeliveryError(f"pagerduty responded {resp.status_code}: {resp.text[:200]}")
        log.info("paged pagerduty event_id=%s severity=%s", event.event_id, event.severity.value)
