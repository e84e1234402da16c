"""Append-only facts emitted by a sync: change log and activity log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from codewatch.domain.model.base import Entity, utcnow

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from codewatch.domain.model.enums import ActivityType, ChangeType, EntityKind


@dataclass(eq=False, kw_only=True)
class ChangeLogEntry(Entity):
    property_id: UUID
    entity_type: EntityKind
    entity_id: UUID | None
    change_type: ChangeType
    previous_value: str | None = None
    new_value: str | None = None
    entity_label: str
    description: str
    user_id: UUID | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class ActivityLogEntry(Entity):
    property_id: UUID
    activity_type: ActivityType
    title: str
    description: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
