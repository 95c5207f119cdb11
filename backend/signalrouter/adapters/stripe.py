"""Stripe webhook adapter."""

import math
from typing import Any

from signalrouter.adapters.interfaces import SourceAdapter, SourceContext, optional_str, require_str
from signalrouter.domain.errors import PayloadValidationError, UnsupportedEventType
from signalrouter.domain.models import NormalizedEvent
from signalrouter.services.severity_policy import SeverityPolicy, get_severity_policy
from signalrouter.utils.timestamps import from_unix


class StripeWebhookAdapter(SourceAdapter):
    """Normalize a verified Stripe event body into a payment event."""

    def __init__(self, policy: SeverityPolicy | None = None) -> None:
        self.policy = policy or get_severity_policy()

    def normalize(self, payload: dict[str, Any], context: SourceContext) -> NormalizedEvent:
        event_id = require_str(payload, "id")
        event_type = require_str(payload, "type")
        created = payload.get("created")
        if created is None:
            raise PayloadValidationError("created", "missing required field")
        if isinstance(created, bool) or not isinstance(created, (int, float)):
            raise PayloadValidationError("created", "expected unix seconds")
        if isinstance(created, float) and not math.isfinite(created):
            raise PayloadValidationError("created", "expected finite unix seconds")
        try:
            started_at = from_unix(created)
        except (ValueError, OverflowError, OSError) as exc:
            raise PayloadValidationError("created", f"unix seconds out of range: {created!r}") from exc

        rule = self.policy.stripe_rule(event_type)
        if rule is None:
            raise UnsupportedEventType(event_type)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise PayloadValidationError("data", "missing required object")
        obj = data.get("object")
        if not isinstance(obj, dict):
            raise PayloadValidationError("data.object", "missing required object")
        object_id = require_str(obj, "id", path="data.object.id")

        return NormalizedEvent(
            event_id=event_id,
            source=context.source,
            kind=rule.kind,
            severity=rule.severity,
            service="stripe",
            summary=f"{event_type}: {object_id}",
            description=self._failure_message(obj),
            started_at=started_at,
            resolved_at=None,
            raw=payload,
        )

    def _failure_message(self, obj: dict[str, Any]) -> str | None:
        message = optional_str(obj, "failure_message")
        if message:
            return message
        last_error = obj.get("last_payment_error")
        if isinstance(last_error, dict):
            return optional_str(last_error, "message")
        return None
