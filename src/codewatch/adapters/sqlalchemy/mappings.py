"""SQLAlchemy mapping metadata for the codewatch domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import composite, configure_mappers

from codewatch.domain.model import (
    ActivityLogEntry,
    ActivityType,
    Application,
    Authority,
    ChangeLogEntry,
    ChangeType,
    EntityKind,
    NotificationSettings,
    Property,
    SourceDataset,
    Violation,
    ViolationStatus,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


_AUTHORITY_VALUES = frozenset(authority.value for authority in Authority)


class AuthoritySetType(TypeDecorator[set[Authority]]):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: set[Authority] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = sorted(authority.value for authority in value)
        return json.dumps(payload)

    def process_result_value(self, value: str | None, dialect: Dialect) -> set[Authority]:
        _ = dialect
        if value is None:
            return set()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return set()
        items = cast(list[Any], loaded)
        authorities: set[Authority] = set()
        for item in items:
            if isinstance(item, str) and item in _AUTHORITY_VALUES:
                authorities.add(Authority(item))
        return authorities


def _enum(enum_cls: type[StrEnum], length: int = 32) -> Enum:
    return Enum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [member.value for member in members],
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Registry (owned by the surrounding application) ------------------------------

property_table = Table(
    "property",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("address", String, nullable=False),
    Column("jurisdiction", String(16), nullable=False, default="NYC"),
    Column("building_id", String(16), nullable=True),
    Column("parcel_id", String(16), nullable=True),
    Column("applicable_authorities", AuthoritySetType, nullable=False),
    Column("alerts_enabled", Boolean, nullable=False, default=False),
    Column("alert_contact", String, nullable=True),
    Column("owner_id", UUIDColumnType, nullable=True),
    Column("last_synced_at", UTCDateTime, nullable=True),
)

# Canonical records -------------------------------------------------------------

violation_table = Table(
    "violation",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("property_id", UUIDColumnType, ForeignKey("property.id"), nullable=False),
    Column("authority", _enum(Authority), nullable=False),
    Column("source", _enum(SourceDataset), nullable=False),
    Column("violation_number", String, nullable=False),
    Column("issued_date", Date, nullable=True),
    Column("hearing_date", Date, nullable=True),
    Column("cure_by_date", Date, nullable=True),
    Column("description", Text, nullable=True),
    Column("severity", String, nullable=True),
    Column("violation_class", String, nullable=True),
    Column("is_stop_work_order", Boolean, nullable=False, default=False),
    Column("is_vacate_order", Boolean, nullable=False, default=False),
    Column("penalty_amount", Float, nullable=True),
    Column("respondent_name", String, nullable=True),
    Column("status", _enum(ViolationStatus), nullable=False),
    Column("suppressed", Boolean, key="_suppressed", nullable=False, default=False),
    Column("suppression_reason", Text, key="_suppression_reason", nullable=True),
    Column("notes", Text, nullable=True),
    Column("synced_at", UTCDateTime, nullable=True),
    UniqueConstraint("property_id", "authority", "violation_number"),
    Index("ix_violation_property_status", "property_id", "status"),
)

application_table = Table(
    "application",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("property_id", UUIDColumnType, ForeignKey("property.id"), nullable=False),
    Column("authority", _enum(Authority), nullable=False),
    Column("source", _enum(SourceDataset), nullable=False),
    Column("application_number", String, nullable=False),
    Column("application_type", String, nullable=True),
    Column("work_type", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("status", String, nullable=True),
    Column("filing_date", Date, nullable=True),
    Column("approval_date", Date, nullable=True),
    Column("expiration_date", Date, nullable=True),
    Column("estimated_cost", Float, nullable=True),
    Column("synced_at", UTCDateTime, nullable=True),
    UniqueConstraint("property_id", "application_number"),
)

# Append-only logs --------------------------------------------------------------

change_log_table = Table(
    "change_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("property_id", UUIDColumnType, ForeignKey("property.id"), nullable=False),
    Column("user_id", UUIDColumnType, nullable=True),
    Column("entity_type", _enum(EntityKind), nullable=False),
    Column("entity_id", UUIDColumnType, nullable=True),
    Column("change_type", _enum(ChangeType), nullable=False),
    Column("previous_value", String, nullable=True),
    Column("new_value", String, nullable=True),
    Column("entity_label", String, nullable=False),
    Column("description", Text, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
    Index("ix_change_log_property_created", "property_id", "created_at"),
)

activity_log_table = Table(
    "property_activity_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("property_id", UUIDColumnType, ForeignKey("property.id"), nullable=False),
    Column("activity_type", _enum(ActivityType), nullable=False),
    Column("title", String, nullable=False),
    Column("description", Text, nullable=True),
    Column("metadata", JSON, key="details", nullable=False, default=dict),
    Column("created_at", UTCDateTime, nullable=False),
    Index("ix_property_activity_log_property_created", "property_id", "created_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        Property,
        property_table,
        properties={
            "notifications": composite(
                NotificationSettings,
                property_table.c.alerts_enabled,
                property_table.c.alert_contact,
            ),
        },
    )
    mapper_registry.map_imperatively(Violation, violation_table)
    mapper_registry.map_imperatively(Application, application_table)
    mapper_registry.map_imperatively(ChangeLogEntry, change_log_table)
    mapper_registry.map_imperatively(ActivityLogEntry, activity_log_table)

    configure_mappers()
    return mapper_registry

