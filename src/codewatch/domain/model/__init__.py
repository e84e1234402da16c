"""Domain model for the violation sync engine."""

from __future__ import annotations

from .application import Application
from .base import Entity, new_id, utcnow
from .enums import (
    ActivityType,
    Authority,
    ChangeType,
    CriticalOrder,
    DeliveryStatus,
    EntityKind,
    ScheduleType,
    SourceDataset,
    ViolationStatus,
)
from .logs import ActivityLogEntry, ChangeLogEntry
from .notification import DeliveryOutcome, NotificationRequest
from .property import NotificationSettings, Property
from .records import ApplicationRecord, PropertyIdentifiers, ViolationRecord
from .violation import (
    ACTIVE,
    Active,
    SuppressedStale,
    SuppressionError,
    SuppressionState,
    Violation,
)

__all__ = [
    "ACTIVE",
    "ActivityLogEntry",
    "ActivityType",
    "Active",
    "Application",
    "ApplicationRecord",
    "Authority",
    "ChangeLogEntry",
    "ChangeType",
    "CriticalOrder",
    "DeliveryOutcome",
    "DeliveryStatus",
    "Entity",
    "EntityKind",
    "NotificationRequest",
    "NotificationSettings",
    "Property",
    "PropertyIdentifiers",
    "ScheduleType",
    "SourceDataset",
    "SuppressedStale",
    "SuppressionError",
    "SuppressionState",
    "Violation",
    "ViolationRecord",
    "ViolationStatus",
    "new_id",
    "utcnow",
]
