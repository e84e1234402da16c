"""Change detection between two stored snapshots of one property."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from codewatch.domain.model import ChangeLogEntry, ChangeType, EntityKind

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime
    from uuid import UUID

    from codewatch.domain.model import Application, Violation

type StatusSnapshot = Mapping[str, str]

_DESCRIPTION_PREVIEW = 100


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    kind: EntityKind
    number: str
    change_type: ChangeType
    previous_value: str | None = None
    new_value: str | None = None


def diff_snapshots(
    before: StatusSnapshot,
    after: StatusSnapshot,
    *,
    kind: EntityKind,
) -> list[ChangeEvent]:
    """Classify every number in ``after`` against ``before``.

    Any status difference is a ``status_change``, including regressions such as
    ``closed`` back to ``open``. Numbers that vanished are not reported.
    """

    events: list[ChangeEvent] = []
    for number, status in after.items():
        if number not in before:
            events.append(
                ChangeEvent(kind=kind, number=number, change_type=ChangeType.NEW, new_value=status)
            )
            continue
        previous = before[number]
        if previous != status:
            events.append(
                ChangeEvent(
                    kind=kind,
                    number=number,
                    change_type=ChangeType.STATUS_CHANGE,
                    previous_value=previous,
                    new_value=status,
                )
            )
    return events


def _describe_violation(event: ChangeEvent, violation: Violation | None) -> tuple[str, str]:
    authority = violation.authority.value if violation else "Unknown"
    label = f"{authority} #{event.number}"
    if event.change_type is ChangeType.NEW:
        description = f"New {authority} violation {event.number}"
        if violation and violation.description:
            description += f": {violation.description[:_DESCRIPTION_PREVIEW]}"
        return label, description
    return label, (
        f"{authority} violation {event.number} status changed: "
        f"{event.previous_value} → {event.new_value}"
    )


def _describe_application(event: ChangeEvent, application: Application | None) -> tuple[str, str]:
    authority = application.authority.value if application else "Unknown"
    label = f"{authority} #{event.number}"
    if event.change_type is ChangeType.NEW:
        description = f"New {authority} application {event.number}"
        if application and application.application_type:
            description += f": {application.application_type}"
        return label, description
    return label, (
        f"{authority} application {event.number} status: "
        f"{event.previous_value} → {event.new_value}"
    )


def build_change_log_entries(
    events: Sequence[ChangeEvent],
    *,
    property_id: UUID,
    user_id: UUID | None,
    violations: Mapping[str, Violation],
    applications: Mapping[str, Application],
    created_at: datetime,
) -> list[ChangeLogEntry]:
    entries: list[ChangeLogEntry] = []
    for event in events:
        entity_id: UUID | None = None
        if event.kind is EntityKind.VIOLATION:
            violation = violations.get(event.number)
            entity_id = violation.id if violation else None
            label, description = _describe_violation(event, violation)
        else:
            application = applications.get(event.number)
            entity_id = application.id if application else None
            label, description = _describe_application(event, application)
        entries.append(
            ChangeLogEntry(
                property_id=property_id,
                user_id=user_id,
                entity_type=event.kind,
                entity_id=entity_id,
                change_type=event.change_type,
                previous_value=event.previous_value,
                new_value=event.new_value,
                entity_label=label,
                description=description,
                created_at=created_at,
            )
        )
    return entries
