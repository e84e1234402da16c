"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Authority(StrEnum):
    DOB = "DOB"
    ECB = "ECB"
    HPD = "HPD"
    FDNY = "FDNY"


class SourceDataset(StrEnum):
    """Upstream open-data datasets, one adapter each."""

    DOB_LEGACY = "dob_legacy"
    DOB_NOW = "dob_now"
    ECB = "ecb"
    HPD = "hpd"
    FDNY = "fdny"

    # Permit / job filings:
    DOB_BIS_JOBS = "dob_bis_jobs"
    DOB_NOW_BUILD = "dob_now_build"


class ViolationStatus(StrEnum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


class CriticalOrder(StrEnum):
    STOP_WORK = "stop_work"
    VACATE = "vacate"


class EntityKind(StrEnum):
    VIOLATION = "violation"
    APPLICATION = "application"


class ChangeType(StrEnum):
    NEW = "new"
    STATUS_CHANGE = "status_change"


class ActivityType(StrEnum):
    SYNC = "sync"
    VIOLATION_ADDED = "violation_added"
    NOTIFICATION_SENT = "notification_sent"
    NOTIFICATION_FAILED = "notification_failed"


class DeliveryStatus(StrEnum):
    SENT = "sent"
    FAILED = "failed"


class ScheduleType(StrEnum):
    NIGHTLY = "nightly"
    DOB_QUICK = "dob_quick"
