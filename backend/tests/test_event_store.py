import threading
from datetime import datetime, timezone

from signalrouter.domain.models import EventKind, NormalizedEvent, Severity, Source
from signalrouter.storage.event_store import EventStore


def _event(event_id: str, severity: Severity = Severity.critical, summary: str = "payout.failed: po_1") -> NormalizedEvent:
    return NormalizedEvent(
        event_id=event_id,
        source=Source.stripe,
        kind=EventKind.payment,
        severity=severity,
        service="stripe",
        summary=summary,
        started_at=datetime(2026, 2, 6, 12, 0, tzinfo=timezone.utc),
        raw={"id": event_id},
    )


def test_insert_if_absent_is_idempotent() -> None:
    store = EventStore()
    first = store.insert_if_absent(_event("evt_1"))
    second = store.insert_if_absent(_event("evt_1", severity=Severity.info, summary="different"))

    assert first.inserted is True
    assert second.inserted is False
    assert second.stored.event.summary == "payout.failed: po_1"
    assert second.stored.event.severity == Severity.critical
    assert second.stored.first_seen_at == first.stored.first_seen_at
    assert len(store) == 1


def test_mark_delivered_sets_routed_and_appends() -> None:
    store = EventStore()
    store.insert_if_absent(_event("evt_1"))
    store.mark_delivered("evt_1", "pagerduty")

    stored = store.get("evt_1")
    assert stored.delivery.routed is True
    assert stored.delivery.delivered_to == ["pagerduty"]


def test_mark_delivered_unknown_id_is_noop() -> None:
    store = EventStore()
    store.mark_delivered("missing", "pagerduty")
    assert len(store) == 0
    assert store.get("missing") is None


def test_new_events_start_unrouted() -> None:
    store = EventStore()
    result = store.insert_if_absent(_event("evt_1"))
    assert result.stored.delivery.routed is False
    assert result.stored.delivery.delivered_to == []


def test_returned_records_do_not_alias_store_state() -> None:
    store = EventStore()
    result = store.insert_if_absent(_event("evt_1"))
    result.stored.delivery.delivered_to.append("tampered")
    result.stored.delivery.routed = True

    stored = store.get("evt_1")
    assert stored.delivery.routed is False
    assert stored.delivery.delivered_to == []


def test_query_returns_most_recent_first_bounded_by_limit() -> None:
    store = EventStore()
    for i in range(1, 8):
        store.insert_if_absent(_event(f"evt_{i}"))

    recent = store.query(3)
    assert [s.event_id for s in recent] == ["evt_7", "evt_6", "evt_5"]
    assert len(store) == 7


def test_query_defaults_to_fifty() -> None:
    store = EventStore()
    for i in range(60):
        store.insert_if_absent(_event(f"evt_{i}"))

    recent = store.query()
    assert len(recent) == 50
    assert recent[0].event_id == "evt_59"
    assert recent[-1].event_id == "evt_10"


def test_query_default_comes_from_constructor() -> None:
    store = EventStore(default_limit=2)
    for i in range(4):
        store.insert_if_absent(_event(f"evt_{i}"))

    assert [s.event_id for s in store.query()] == ["evt_3", "evt_2"]
    assert len(store.query(10)) == 4


def test_query_with_non_positive_limit_is_empty() -> None:
    store = EventStore()
    store.insert_if_absent(_event("evt_1"))
    assert store.query(0) == []


def test_duplicate_insert_does_not_change_recency_order() -> None:
    store = EventStore()
    store.insert_if_absent(_event("evt_a"))
    store.insert_if_absent(_event("evt_b"))
    store.insert_if_absent(_event("evt_a"))
    assert [s.event_id for s in store.query(10)] == ["evt_b", "evt_a"]


def test_concurrent_duplicate_inserts_store_exactly_once() -> None:
    store = EventStore()
    results = []
    barrier = threading.Barrier(16)

    def worker() -> None:
        barrier.wait()
        results.append(store.insert_if_absent(_event("evt_race")).inserted)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert results.count(False) == 15
    assert len(store) == 1
