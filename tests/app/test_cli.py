from __future__ import annotations

import json
from uuid import uuid4

import pytest

from codewatch.app import SyncPropertyRequest, SyncPropertyResponse
from codewatch.config import ConfigurationError
from codewatch.domain.model import Authority, ScheduleType
from codewatch.domain.orchestrator import RunSummary
from codewatch.ui import cli as cli_module


def test_sync_command_runs_requested_schedule(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: list[ScheduleType] = []

    async def fake_run(schedule_type: ScheduleType) -> RunSummary:
        captured.append(schedule_type)
        return RunSummary(schedule_type=schedule_type, total_properties=2, synced=2)

    monkeypatch.setattr(cli_module, "run_scheduled_sync", fake_run)

    cli_module.main(["sync", "--schedule", "dob_quick"])

    assert captured == [ScheduleType.DOB_QUICK]
    output = json.loads(capsys.readouterr().out)
    assert output["schedule_type"] == "dob_quick"
    assert output["synced"] == 2


def test_sync_property_command_builds_request(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: list[SyncPropertyRequest] = []
    property_id = uuid4()

    async def fake_sync(request: SyncPropertyRequest) -> SyncPropertyResponse:
        captured.append(request)
        return SyncPropertyResponse(
            success=True,
            total_found=4,
            new_violations=1,
            authorities_synced=(Authority.DOB, Authority.HPD),
        )

    monkeypatch.setattr(cli_module, "sync_property", fake_sync)

    cli_module.main(
        [
            "sync-property",
            "--property-id",
            str(property_id),
            "--authority",
            "DOB",
            "--authority",
            "HPD",
            "--no-notify",
        ]
    )

    assert captured == [
        SyncPropertyRequest(
            property_id=property_id,
            applicable_authorities=(Authority.DOB, Authority.HPD),
            notify_on_new_critical=False,
        )
    ]
    output = json.loads(capsys.readouterr().out)
    assert output["success"] is True
    assert output["authorities_synced"] == ["DOB", "HPD"]


def test_failed_property_sync_exits_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_sync(request: SyncPropertyRequest) -> SyncPropertyResponse:
        return SyncPropertyResponse.failure(f"Property {request.property_id} not found")

    monkeypatch.setattr(cli_module, "sync_property", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync-property", "--property-id", str(uuid4())])

    assert excinfo.value.code == 1


def test_invalid_property_id_exits_with_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_sync(request: SyncPropertyRequest) -> SyncPropertyResponse:
        raise AssertionError(f"should not sync {request}")

    monkeypatch.setattr(cli_module, "sync_property", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync-property", "--property-id", "not-a-uuid"])

    assert excinfo.value.code == 2


def test_unknown_authority_is_rejected_by_the_parser() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync-property", "--property-id", str(uuid4()), "--authority", "DOT"])

    assert excinfo.value.code == 2


def test_configuration_error_during_sync_exits_with_code_two(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_sync(request: SyncPropertyRequest) -> SyncPropertyResponse:
        raise ConfigurationError("NYC_OPEN_DATA_TIMEOUT_SECONDS must be a number, got 'soon'")

    monkeypatch.setattr(cli_module, "sync_property", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync-property", "--property-id", str(uuid4())])

    assert excinfo.value.code == 2
