"""Severity table loader."""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

from signalrouter.config import package_root
from signalrouter.domain.models import EventKind, Severity

OPERATIONAL_STATUS = "operational"


@dataclass(frozen=True)
class TypeRule:
    severity: Severity
    kind: EventKind


class SeverityPolicy:
    """Typed view over ``rules/severity_policy.yaml``."""

    def __init__(self, path: Path | None = None) -> None:
        path = path or package_root() / "rules" / "severity_policy.yaml"
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

        stripe_block = data.get("stripe", {}).get("event_types", {})
        self.stripe_event_types: dict[str, TypeRule] = {
            name: TypeRule(severity=Severity(entry["severity"]), kind=EventKind(entry["kind"]))
            for name, entry in stripe_block.items()
        }

        statuspage = data.get("statuspage", {})
        self.incident_impact: dict[str, Severity] = {
            impact: Severity(value) for impact, value in statuspage.get("incident_impact", {}).items()
        }
        self.component_status: dict[str, Severity] = {
            status: Severity(value) for status, value in statuspage.get("component_status", {}).items()
        }
        if OPERATIONAL_STATUS in self.component_status:
            raise ValueError("operational components must not map to a severity")

    def stripe_rule(self, event_type: str) -> TypeRule | None:
        return self.stripe_event_types.get(event_type)

    def impact_severity(self, impact: str) -> Severity | None:
        return self.incident_impact.get(impact)

    def component_severity(self, status: str) -> Severity | None:
        return self.component_status.get(status)


@lru_cache
def get_severity_policy() -> SeverityPolicy:
    """Cached policy accessor."""

    return SeverityPolicy()
