"""Statuspage.io adapters and document fetcher."""

import json
import logging
from datetime import datetime
from typing import Any

import httpx

from signalrouter.adapters.interfaces import SourceAdapter, SourceContext, optional_str, require_str
from signalrouter.config import Settings, get_settings, package_root
from signalrouter.domain.errors import PayloadValidationError, StatusFetchError, UnknownSourceError
from signalrouter.domain.models import EventKind, NormalizedEvent, Source
from signalrouter.services.severity_policy import OPERATIONAL_STATUS, SeverityPolicy, get_severity_policy
from signalrouter.utils.timestamps import parse_iso

log = logging.getLogger(__name__)

STATUS_PAGE_SOURCES = (Source.github_status, Source.openai_status)


def _timestamp(payload: dict[str, Any], field: str, *, required: bool) -> datetime | None:
    value = payload.get(field)
    if value is None and not required:
        return None
    raw = require_str(payload, field)
    try:
        return parse_iso(raw)
    except (ValueError, OverflowError) as exc:
        raise PayloadValidationError(field, f"invalid ISO-8601 timestamp {raw!r}") from exc


class StatusPageIncidentAdapter(SourceAdapter):
    """One incident entry -> one incident event."""

    def __init__(self, policy: SeverityPolicy | None = None) -> None:
        self.policy = policy or get_severity_policy()

    def normalize(self, payload: dict[str, Any], context: SourceContext) -> NormalizedEvent:
        incident_id = require_str(payload, "id")
        name = require_str(payload, "name")
        impact = require_str(payload, "impact")
        severity = self.policy.impact_severity(impact)
        if severity is None:
            raise PayloadValidationError("impact", f"unknown impact {impact!r}")
        started_at = _timestamp(payload, "created_at", required=True)
        resolved_at = _timestamp(payload, "resolved_at", required=False)

        return NormalizedEvent(
            event_id=incident_id,
            source=context.source,
            kind=EventKind.incident,
            severity=severity,
            service=self._affected_service(payload, context),
            summary=name,
            description=self._latest_update(payload),
            started_at=started_at,
            resolved_at=resolved_at,
            raw=payload,
        )

    def _affected_service(self, payload: dict[str, Any], context: SourceContext) -> str:
        components = payload.get("components")
        if isinstance(components, list):
            names = [c["name"] for c in components if isinstance(c, dict) and isinstance(c.get("name"), str)]
            if names:
                return ", ".join(names)
        return context.display_name

    def _latest_update(self, payload: dict[str, Any]) -> str | None:
        updates = payload.get("incident_updates")
        if not isinstance(updates, list):
            return None
        # Statuspage lists updates newest first.
        for update in updates:
            if isinstance(update, dict):
                body = optional_str(update, "body")
                if body:
                    return body
        return None


class StatusPageComponentAdapter(SourceAdapter):
    """One non-operational component -> one status event."""

    def __init__(self, policy: SeverityPolicy | None = None) -> None:
        self.policy = policy or get_severity_policy()

    def normalize(self, payload: dict[str, Any], context: SourceContext) -> NormalizedEvent | None:
        component_id = require_str(payload, "id")
        name = require_str(payload, "name")
        status = require_str(payload, "status")
        if status == OPERATIONAL_STATUS:
            return None
        severity = self.policy.component_severity(status)
        if severity is None:
            raise PayloadValidationError("status", f"unknown component status {status!r}")
        updated_at = _timestamp(payload, "updated_at", required=True)

        return NormalizedEvent(
            event_id=component_event_id(component_id, status),
            source=context.source,
            kind=EventKind.status,
            severity=severity,
            service=name,
            summary=f"{name}: {status.replace('_', ' ')}",
            description=optional_str(payload, "description"),
            started_at=updated_at,
            resolved_at=None,
            raw=payload,
        )


def component_event_id(component_id: str, status: str) -> str:
    """Stable id: the same component in the same status dedupes across polls."""

    return f"{component_id}:{status}"


class StatusPageFetcher:
    """Fetch status-page documents with bundled fixture fallback."""

    def __init__(self, settings: Settings | None = None, client: httpx.Client | None = None) -> None:
        self.settings = settings or get_settings()
        self._client = client

    def url_for(self, source: Source) -> str | None:
        if source not in STATUS_PAGE_SOURCES:
            raise UnknownSourceError(f"{source.value} is not a status-page source")
        return getattr(self.settings, f"{source.value}_url")

    def fetch(self, source: Source) -> tuple[dict[str, Any], str]:
        """Return ``(document, origin)`` where origin is ``url`` or ``fixture``."""

        url = self.url_for(source)
        if not url:
            return self._load_fixture(source), "fixture"

        try:
            if self._client is not None:
                resp = self._client.get(url, timeout=self.settings.status_fetch_timeout_seconds)
            else:
                resp = httpx.get(url, timeout=self.settings.status_fetch_timeout_seconds)
            resp.raise_for_status()
            document = resp.json()
        except httpx.HTTPError as exc:
            log.warning("status fetch failed source=%s url=%s error=%s", source.value, url, exc)
            raise StatusFetchError(f"failed to fetch {source.value} status document: {exc}") from exc
        except ValueError as exc:
            raise StatusFetchError(f"{source.value} status document is not valid JSON") from exc

        if not isinstance(document, dict):
            raise StatusFetchError(f"{source.value} status document is not a JSON object")
        return document, "url"

    def _load_fixture(self, source: Source) -> dict[str, Any]:
        fixture = package_root() / "fixtures" / f"{source.value}.json"
        with fixture.open("r", encoding="utf-8") as handle:
            return json.load(handle)
