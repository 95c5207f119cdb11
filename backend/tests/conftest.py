import json
import os
from pathlib import Path

import pytest

os.environ.setdefault("ROUTE_WARNINGS", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from signalrouter.adapters.interfaces import Destination  # noqa: E402
from signalrouter.config import Settings, get_settings  # noqa: E402
from signalrouter.domain.errors import DeliveryError  # noqa: E402
from signalrouter.domain.models import NormalizedEvent, RoutingConfig, Source  # noqa: E402
from signalrouter.services.ingestion import IngestionPipeline  # noqa: E402
from signalrouter.services.normalization import Normalizer  # noqa: E402
from signalrouter.services.routing import RoutingEngine  # noqa: E402
from signalrouter.storage.event_store import EventStore  # noqa: E402

FIXTURES = Path(__file__).resolve().parents[2] / "fixtures"


class RecordingDestination(Destination):
    """Destination double that records attempts and can be told to fail."""

    def __init__(self, name: str = "recorder", fail: bool = False) -> None:
        self.name = name
        self.fail = fail
        self.attempts: list[NormalizedEvent] = []

    def deliver(self, event: NormalizedEvent) -> None:
        self.attempts.append(event)
        if self.fail:
            raise DeliveryError(f"{self.name} unavailable")


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def load_fixture():
    def _load(name: str) -> dict:
        return json.loads((FIXTURES / name).read_text(encoding="utf-8"))

    return _load


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, route_warnings=False, stripe_webhook_secret=None, pagerduty_routing_key=None)


@pytest.fixture
def destination() -> RecordingDestination:
    return RecordingDestination()


@pytest.fixture
def store() -> EventStore:
    return EventStore()


@pytest.fixture
def make_pipeline(store, destination):
    def _make(route_warnings: bool = False, destinations: list[Destination] | None = None) -> IngestionPipeline:
        return IngestionPipeline(
            normalizer=Normalizer(),
            store=store,
            router=RoutingEngine(store, destinations if destinations is not None else [destination]),
            config=RoutingConfig(route_warnings=route_warnings),
        )

    return _make


@pytest.fixture
def destination_factory():
    return RecordingDestination


@pytest.fixture
def normalize_stripe():
    normalizer = Normalizer()

    def _normalize(payload: dict) -> NormalizedEvent:
        return normalizer.normalize_webhook(Source.stripe, payload)

    return _normalize
