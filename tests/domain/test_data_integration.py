from __future__ import annotations

from datetime import timedelta

import pytest

from codewatch.domain.data_integration import PropertySyncer, resolve_authorities
from codewatch.domain.model import (
    ActivityType,
    Authority,
    ChangeType,
    CriticalOrder,
    SourceDataset,
    ViolationStatus,
)
from codewatch.domain.notifications import NotificationDispatcher
from codewatch.domain.ports.persistence import PersistenceError
from codewatch.domain.reconciliation import build_rules
from tests.helpers.fakes import FakeGateway, FakeSource, InMemoryStore, sources_for
from tests.helpers.records import (
    SYNC_TIME,
    fixed_clock,
    make_application_record,
    make_property,
    make_violation_record,
)


def _syncer(
    store: InMemoryStore,
    sources: list[FakeSource[object]],
    gateway: FakeGateway | None = None,
    **kwargs: object,
) -> PropertySyncer:
    return PropertySyncer(
        violation_sources=sources,  # type: ignore[arg-type]
        unit_of_work_factory=store.unit_of_work,
        dispatcher=NotificationDispatcher(gateway),
        clock=fixed_clock(),
        **kwargs,  # type: ignore[arg-type]
    )


def _store_with(*props: object) -> InMemoryStore:
    store = InMemoryStore()
    for prop in props:
        store.properties[prop.id] = prop  # type: ignore[attr-defined]
    return store


def test_resolve_authorities_prefers_explicit_request() -> None:
    prop = make_property(authorities=(Authority.DOB, Authority.ECB, Authority.HPD))

    assert resolve_authorities(prop) == (Authority.DOB, Authority.ECB, Authority.HPD)
    assert resolve_authorities(prop, [Authority.HPD]) == (Authority.HPD,)


def test_resolve_authorities_defaults_when_property_lists_none() -> None:
    prop = make_property(authorities=())

    assert resolve_authorities(prop) == (Authority.DOB, Authority.ECB)


@pytest.mark.asyncio
async def test_sync_inserts_new_violations_and_notifies() -> None:
    prop = make_property()
    store = _store_with(prop)
    gateway = FakeGateway()
    sources = sources_for(
        dob_now=[
            make_violation_record("V1", orders=[CriticalOrder.STOP_WORK]),
            make_violation_record("V2", description="Failure to maintain"),
        ],
        ecb=[make_violation_record("E1", authority=Authority.ECB)],
    )

    result = await _syncer(store, sources, gateway).sync(prop)

    assert result.authorities_synced == (Authority.DOB, Authority.ECB)
    assert result.total_found == 3
    assert result.new_violations == 3
    assert result.critical_count == 1
    assert result.changes_detected == 3
    assert result.notification_sent is True
    assert {v.violation_number for v in store.violations_for(prop.id)} == {"V1", "V2", "E1"}
    assert all(entry.change_type is ChangeType.NEW for entry in store.change_log)
    assert prop.last_synced_at == SYNC_TIME

    assert len(gateway.requests) == 1
    body = gateway.requests[0].body
    assert body.startswith("3 new violations found at 123 Main St, New York, NY")
    assert " - 1 CRITICAL (Stop Work/Vacate)" in body
    assert body.endswith(". Authorities: DOB, ECB. Log in to review.")

    types = [entry.activity_type for entry in store.activity_log]
    assert types.count(ActivityType.SYNC) == 1
    assert types.count(ActivityType.VIOLATION_ADDED) == 3
    assert types.count(ActivityType.NOTIFICATION_SENT) == 1


@pytest.mark.asyncio
async def test_sync_is_idempotent() -> None:
    prop = make_property()
    store = _store_with(prop)
    gateway = FakeGateway()
    sources = sources_for(dob_now=[make_violation_record("V1"), make_violation_record("V2")])
    syncer = _syncer(store, sources, gateway)

    await syncer.sync(prop)
    second = await syncer.sync(prop)

    assert second.new_violations == 0
    assert second.changes_detected == 0
    assert second.notification_sent is False
    assert len(store.violations_for(prop.id)) == 2
    assert len(store.change_log) == 2
    assert len(gateway.requests) == 1


@pytest.mark.asyncio
async def test_sync_keeps_the_higher_precedence_dataset_for_a_shared_number() -> None:
    prop = make_property(authorities=(Authority.DOB,))
    store = _store_with(prop)
    sources = sources_for(
        dob_now=[make_violation_record("34883000N", description="from DOB NOW")],
        dob_legacy=[
            make_violation_record(
                "34883000N", source=SourceDataset.DOB_LEGACY, description="from BIS"
            )
        ],
    )

    result = await _syncer(store, sources).sync(prop)

    stored = store.violations_for(prop.id)
    assert result.total_found == 1
    assert len(stored) == 1
    assert stored[0].source is SourceDataset.DOB_NOW
    assert stored[0].description == "from DOB NOW"


@pytest.mark.asyncio
async def test_sync_records_upstream_status_change() -> None:
    prop = make_property(authorities=(Authority.DOB,))
    store = _store_with(prop)
    source = FakeSource(
        authority=Authority.DOB,
        dataset=SourceDataset.DOB_NOW,
        records=[make_violation_record("111")],
    )
    syncer = _syncer(store, [source])  # type: ignore[list-item]
    await syncer.sync(prop)

    source.records = [make_violation_record("111", status=ViolationStatus.CLOSED)]
    result = await syncer.sync(prop)

    assert result.new_violations == 0
    assert result.changes_detected == 1
    change = store.change_log[-1]
    assert change.change_type is ChangeType.STATUS_CHANGE
    assert change.previous_value == "open"
    assert change.new_value == "closed"
    assert change.entity_label == "DOB #111"
    assert change.description == "DOB violation 111 status changed: open → closed"
    assert store.violations_for(prop.id)[0].status is ViolationStatus.CLOSED


@pytest.mark.asyncio
async def test_sync_suppresses_stale_open_violations() -> None:
    prop = make_property(authorities=(Authority.DOB,))
    store = _store_with(prop)
    stale_issue = (SYNC_TIME - timedelta(days=1460)).date()
    recent_issue = (SYNC_TIME - timedelta(days=100)).date()
    sources = sources_for(
        dob_now=[
            make_violation_record("OLD", issued=stale_issue),
            make_violation_record("NEW", issued=recent_issue),
        ]
    )

    result = await _syncer(
        store, sources, suppression_rules=build_rules({"DOB": 1095})
    ).sync(prop)

    by_number = {v.violation_number: v for v in store.violations_for(prop.id)}
    assert result.suppressed == 1
    assert by_number["OLD"].is_suppressed
    assert by_number["OLD"].status is ViolationStatus.OPEN
    assert "(4 years old)" in (by_number["OLD"]._suppression_reason or "")  # noqa: SLF001
    assert not by_number["NEW"].is_suppressed


@pytest.mark.asyncio
async def test_sync_survives_a_rejected_change_log_commit() -> None:
    prop = make_property(authorities=(Authority.DOB,))
    store = _store_with(prop)
    store.failing_commits = {2}
    sources = sources_for(dob_now=[make_violation_record("V1")])

    result = await _syncer(store, sources, FakeGateway()).sync(prop)

    assert result.new_violations == 1
    assert store.change_log == []
    assert result.changes_detected == 0
    assert len(store.violations_for(prop.id)) == 1
    sync_entry = next(e for e in store.activity_log if e.activity_type is ActivityType.SYNC)
    assert sync_entry.details["changes_detected"] == 0


@pytest.mark.asyncio
async def test_sync_propagates_a_rejected_record_commit() -> None:
    prop = make_property(authorities=(Authority.DOB,))
    store = _store_with(prop)
    store.failing_commits = {1}
    gateway = FakeGateway()
    sources = sources_for(dob_now=[make_violation_record("V1")])

    with pytest.raises(PersistenceError):
        await _syncer(store, sources, gateway).sync(prop)

    assert store.violations_for(prop.id) == []
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_failing_source_does_not_abort_siblings() -> None:
    prop = make_property()
    store = _store_with(prop)
    broken = FakeSource(
        authority=Authority.DOB,
        dataset=SourceDataset.DOB_NOW,
        error=RuntimeError("boom"),
    )
    healthy = FakeSource(
        authority=Authority.ECB,
        dataset=SourceDataset.ECB,
        records=[make_violation_record("E1", authority=Authority.ECB)],
    )

    result = await _syncer(store, [broken, healthy]).sync(prop)  # type: ignore[list-item]

    assert result.new_violations == 1
    assert broken.calls
    assert healthy.calls


@pytest.mark.asyncio
async def test_sync_only_queries_selected_authorities() -> None:
    prop = make_property(authorities=(Authority.DOB,))
    store = _store_with(prop)
    dob = FakeSource(authority=Authority.DOB, dataset=SourceDataset.DOB_NOW)
    hpd = FakeSource(authority=Authority.HPD, dataset=SourceDataset.HPD)

    result = await _syncer(store, [dob, hpd]).sync(prop)  # type: ignore[list-item]

    assert result.authorities_synced == (Authority.DOB,)
    assert len(dob.calls) == 1
    assert hpd.calls == []


@pytest.mark.asyncio
async def test_notification_can_be_disabled_per_trigger() -> None:
    prop = make_property(authorities=(Authority.DOB,))
    store = _store_with(prop)
    gateway = FakeGateway()
    sources = sources_for(dob_now=[make_violation_record("V1")])

    result = await _syncer(store, sources, gateway).sync(prop, notify_on_new_critical=False)

    assert result.notification_sent is False
    assert gateway.requests == []
    assert not any(
        e.activity_type in {ActivityType.NOTIFICATION_SENT, ActivityType.NOTIFICATION_FAILED}
        for e in store.activity_log
    )


@pytest.mark.asyncio
async def test_violation_activity_entries_are_bounded() -> None:
    prop = make_property(authorities=(Authority.DOB,))
    store = _store_with(prop)
    sources = sources_for(dob_now=[make_violation_record(f"V{i}") for i in range(7)])

    result = await _syncer(store, sources, activity_violation_limit=5).sync(prop)

    added = [e for e in store.activity_log if e.activity_type is ActivityType.VIOLATION_ADDED]
    assert result.new_violations == 7
    assert len(added) == 5
    assert added[0].title == "New DOB Violation"


@pytest.mark.asyncio
async def test_application_changes_are_logged() -> None:
    prop = make_property(authorities=(Authority.DOB,))
    store = _store_with(prop)
    applications = FakeSource(
        authority=Authority.DOB,
        dataset=SourceDataset.DOB_BIS_JOBS,
        records=[make_application_record("121234567")],
    )
    syncer = PropertySyncer(
        violation_sources=[],
        application_sources=[applications],  # type: ignore[list-item]
        unit_of_work_factory=store.unit_of_work,
        dispatcher=NotificationDispatcher(None),
        clock=fixed_clock(),
    )

    first = await syncer.sync(prop)
    applications.records = [make_application_record("121234567", status="Permit Issued")]
    second = await syncer.sync(prop)

    assert first.new_applications == 1
    assert second.changes_detected == 1
    descriptions = [entry.description for entry in store.change_log]
    assert descriptions == [
        "New DOB application 121234567: A2",
        "DOB application 121234567 status: Filed → Permit Issued",
    ]
