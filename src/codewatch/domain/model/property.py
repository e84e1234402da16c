"""Registered parcels the engine keeps in sync."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from codewatch.domain.model.base import Entity

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from codewatch.domain.model.enums import Authority


@dataclass(frozen=True)
class NotificationSettings:
    alerts_enabled: bool = False
    contact: str | None = None

    @property
    def can_notify(self) -> bool:
        return self.alerts_enabled and bool(self.contact and self.contact.strip())

    def __composite_values__(self) -> tuple[bool, str | None]:
        """For SQLAlchemy composite columns (adapter-side convenience)."""
        return (self.alerts_enabled, self.contact)


@dataclass(eq=False, kw_only=True)
class Property(Entity):
    """A parcel owned by the surrounding application.

    The engine reads identifiers and settings and only ever writes ``last_synced_at``.
    """

    address: str
    jurisdiction: str = "NYC"
    building_id: str | None = None
    parcel_id: str | None = None
    applicable_authorities: set[Authority] = field(default_factory=set)
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    owner_id: UUID | None = None
    last_synced_at: datetime | None = None

    def is_syncable(self, jurisdiction: str) -> bool:
        return self.jurisdiction == jurisdiction and bool(
            self.building_id and self.building_id.strip()
        )
