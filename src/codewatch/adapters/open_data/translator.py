"""Translate Open Data rows into canonical violation and application records."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from codewatch.domain.model import (
    ApplicationRecord,
    Authority,
    CriticalOrder,
    SourceDataset,
    ViolationRecord,
    ViolationStatus,
)

from .schema import (
    BisJobPayload,
    DobLegacyViolationPayload,
    DobNowFilingPayload,
    DobNowViolationPayload,
    EcbViolationPayload,
    FdnyViolationPayload,
    HpdViolationPayload,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .schema import RawRow

log = getLogger(__name__)

# Upstream status words that mean the authority considers the matter closed.
RESOLVED_STATUS_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(written off|closed?|dismissed|paid|resolved?|complied|withdrawn|stipulation)\b",
    re.IGNORECASE,
)

# DOB NOW ships a categorical violation type; use it before falling back to free text.
DOB_NOW_ORDER_CODES: Final[Mapping[str, frozenset[CriticalOrder]]] = {
    "STOP WORK ORDER": frozenset({CriticalOrder.STOP_WORK}),
    "FULL STOP WORK ORDER": frozenset({CriticalOrder.STOP_WORK}),
    "PARTIAL STOP WORK ORDER": frozenset({CriticalOrder.STOP_WORK}),
    "VACATE ORDER": frozenset({CriticalOrder.VACATE}),
    "FULL VACATE ORDER": frozenset({CriticalOrder.VACATE}),
    "PARTIAL VACATE ORDER": frozenset({CriticalOrder.VACATE}),
}


def orders_from_text(*texts: str | None) -> frozenset[CriticalOrder]:
    """Heuristic fallback for datasets without a structured order field."""

    orders: set[CriticalOrder] = set()
    for text in texts:
        if not text:
            continue
        lowered = text.lower()
        if "stop work" in lowered:
            orders.add(CriticalOrder.STOP_WORK)
        if "vacate" in lowered:
            orders.add(CriticalOrder.VACATE)
    return frozenset(orders)


def is_resolved_status(value: str | None) -> bool:
    if not value:
        return False
    return RESOLVED_STATUS_PATTERN.search(value) is not None


def _first(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def parse_dob_legacy(row: RawRow) -> ViolationRecord | None:
    payload = DobLegacyViolationPayload.model_validate(row)
    number = _first(payload.violation_number, payload.ecb_violation_number, payload.number)
    if number is None or payload.issue_date is None:
        return None
    if payload.violation_category:
        closed = is_resolved_status(payload.violation_category)
    else:
        closed = payload.disposition_date is not None
    return ViolationRecord(
        authority=Authority.DOB,
        source=SourceDataset.DOB_LEGACY,
        violation_number=number,
        issued_date=payload.issue_date,
        description=_first(
            payload.description, payload.violation_category, payload.violation_type
        ),
        severity=_first(payload.violation_type, payload.severity),
        violation_class=_first(payload.violation_category, payload.violation_class),
        penalty_amount=payload.penality_imposed,
        respondent_name=_first(payload.respondent_name, payload.owner),
        status=ViolationStatus.CLOSED if closed else ViolationStatus.OPEN,
        critical_orders=orders_from_text(payload.disposition_comments),
    )


def parse_dob_now(row: RawRow) -> ViolationRecord | None:
    payload = DobNowViolationPayload.model_validate(row)
    number = _first(payload.violation_number, payload.number)
    if number is None or payload.issue_date is None:
        return None
    violation_type = (payload.violation_type or "").strip().upper()
    orders = DOB_NOW_ORDER_CODES.get(violation_type)
    if orders is None:
        orders = orders_from_text(payload.violation_remarks, payload.description)
    return ViolationRecord(
        authority=Authority.DOB,
        source=SourceDataset.DOB_NOW,
        violation_number=number,
        issued_date=payload.issue_date,
        description=_first(
            payload.description, payload.violation_remarks, payload.violation_type
        ),
        severity=_first(payload.severity, payload.violation_type),
        violation_class=payload.device_type,
        penalty_amount=payload.penalty_amount,
        respondent_name=payload.respondent_name,
        status=(
            ViolationStatus.CLOSED
            if is_resolved_status(payload.violation_status)
            else ViolationStatus.OPEN
        ),
        critical_orders=orders,
    )


def parse_ecb(row: RawRow) -> ViolationRecord | None:
    payload = EcbViolationPayload.model_validate(row)
    if payload.ecb_violation_number is None or payload.issue_date is None:
        return None
    return ViolationRecord(
        authority=Authority.ECB,
        source=SourceDataset.ECB,
        violation_number=payload.ecb_violation_number,
        issued_date=payload.issue_date,
        hearing_date=payload.scheduled_hearing_date,
        description=_first(payload.violation_description, payload.infraction_code1),
        severity=_first(payload.severity, payload.aggravated_level),
        penalty_amount=payload.penality_imposed,
        respondent_name=payload.respondent_name,
        status=(
            ViolationStatus.CLOSED
            if (payload.ecb_violation_status or "").upper() == "RESOLVE"
            else ViolationStatus.OPEN
        ),
    )


def _hpd_status(payload: HpdViolationPayload) -> ViolationStatus:
    if (payload.violationstatus or "").strip().lower() == "close":
        return ViolationStatus.CLOSED
    # owner has certified the correction; HPD has not closed it yet
    if "certif" in (payload.currentstatus or "").lower():
        return ViolationStatus.IN_PROGRESS
    return ViolationStatus.OPEN


def parse_hpd(row: RawRow) -> ViolationRecord | None:
    payload = HpdViolationPayload.model_validate(row)
    issued = payload.inspectiondate or payload.novissueddate
    if payload.violationid is None or issued is None:
        return None
    return ViolationRecord(
        authority=Authority.HPD,
        source=SourceDataset.HPD,
        violation_number=payload.violationid,
        issued_date=issued,
        cure_by_date=payload.originalcertifybydate,
        description=payload.novdescription,
        severity=payload.violation_class,
        violation_class=payload.violation_class,
        status=_hpd_status(payload),
    )


def parse_fdny(row: RawRow) -> ViolationRecord | None:
    payload = FdnyViolationPayload.model_validate(row)
    number = _first(payload.violation_number, payload.summons_number)
    issued = payload.issue_date or payload.inspection_date
    if number is None or issued is None:
        return None
    return ViolationRecord(
        authority=Authority.FDNY,
        source=SourceDataset.FDNY,
        violation_number=number,
        issued_date=issued,
        description=_first(payload.violation_type, payload.description),
        severity="critical",
        penalty_amount=payload.penalty_amount,
        critical_orders=orders_from_text(payload.violation_type) & {CriticalOrder.VACATE},
    )


def parse_bis_job(row: RawRow) -> ApplicationRecord | None:
    payload = BisJobPayload.model_validate(row)
    if payload.job_number is None:
        return None
    return ApplicationRecord(
        authority=Authority.DOB,
        source=SourceDataset.DOB_BIS_JOBS,
        application_number=payload.job_number,
        application_type=payload.job_type,
        work_type=_first(payload.work_type, payload.job_doc_type),
        description=payload.job_description,
        status=_first(payload.job_status, payload.job_status_descrp),
        filing_date=payload.pre_filing_date or payload.filing_date,
        approval_date=payload.approved_date,
        expiration_date=payload.permit_expiration_date,
        estimated_cost=payload.initial_cost,
    )


def parse_dob_now_filing(row: RawRow) -> ApplicationRecord | None:
    payload = DobNowFilingPayload.model_validate(row)
    number = _first(payload.job_filing_number, payload.filing_number)
    if number is None:
        return None
    return ApplicationRecord(
        authority=Authority.DOB,
        source=SourceDataset.DOB_NOW_BUILD,
        application_number=number,
        application_type=_first(payload.job_type, payload.filing_type),
        work_type=payload.work_type,
        description=_first(payload.job_description, payload.work_on_floor),
        status=_first(payload.filing_status, payload.current_status),
        filing_date=payload.filing_date,
        approval_date=payload.approved_date,
        expiration_date=payload.permit_expiration_date,
        estimated_cost=payload.estimated_job_cost,
    )


VIOLATION_TRANSLATORS: Final[
    Mapping[SourceDataset, Callable[[RawRow], ViolationRecord | None]]
] = {
    SourceDataset.DOB_LEGACY: parse_dob_legacy,
    SourceDataset.DOB_NOW: parse_dob_now,
    SourceDataset.ECB: parse_ecb,
    SourceDataset.HPD: parse_hpd,
    SourceDataset.FDNY: parse_fdny,
}
APPLICATION_TRANSLATORS: Final[
    Mapping[SourceDataset, Callable[[RawRow], ApplicationRecord | None]]
] = {
    SourceDataset.DOB_BIS_JOBS: parse_bis_job,
    SourceDataset.DOB_NOW_BUILD: parse_dob_now_filing,
}


def translate_rows[TRecord](
    rows: list[RawRow],
    parse: Callable[[RawRow], TRecord | None],
    *,
    dataset: SourceDataset,
) -> list[TRecord]:
    """Translate rows, skipping any that fail validation or lack an identifier."""

    records: list[TRecord] = []
    skipped = 0
    for row in rows:
        try:
            record = parse(row)
        except ValidationError as exc:
            log.debug(f"Skipping invalid {dataset} row: {exc.error_count()} error(s)")
            record = None
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        log.debug(f"Skipped {skipped} {dataset} row(s) without a usable number or date")
    return records
