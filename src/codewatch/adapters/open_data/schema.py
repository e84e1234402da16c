"""Pydantic models describing the NYC Open Data row payloads.

Socrata serialises every column as a string and omits null columns entirely, so
every field is optional and coerced here rather than in the translators.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_DATE_FORMATS = ("%Y%m%d", "%m/%d/%Y", "%Y-%m-%d")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _to_text(value: object) -> object:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return _blank_to_none(value)


def parse_socrata_date(value: object) -> date | None:
    """Parse the handful of date spellings used across the city datasets."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if "T" in text:
        try:
            return datetime.fromisoformat(text.rstrip("Z")).date()
        except ValueError:
            return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None


def parse_amount(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if not isinstance(value, str):
        return None
    cleaned = value.replace("$", "").replace(",", "").strip()
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


class OpenDataBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DobLegacyViolationPayload(OpenDataBaseModel):
    violation_number: str | None = None
    ecb_violation_number: str | None = None
    number: str | None = None
    issue_date: date | None = None
    description: str | None = None
    violation_category: str | None = None
    violation_type: str | None = None
    violation_type_code: str | None = None
    severity: str | None = None
    violation_class: str | None = Field(default=None, alias="class")
    disposition_date: date | None = None
    disposition_comments: str | None = None
    penality_imposed: float | None = None
    respondent_name: str | None = None
    owner: str | None = None

    _text = field_validator(
        "violation_number",
        "ecb_violation_number",
        "number",
        "description",
        "violation_category",
        "violation_type",
        "violation_type_code",
        "severity",
        "violation_class",
        "disposition_comments",
        "respondent_name",
        "owner",
        mode="before",
    )(_to_text)
    _dates = field_validator("issue_date", "disposition_date", mode="before")(parse_socrata_date)
    _amounts = field_validator("penality_imposed", mode="before")(parse_amount)


class DobNowViolationPayload(OpenDataBaseModel):
    violation_number: str | None = None
    number: str | None = None
    issue_date: date | None = None
    violation_type: str | None = None
    violation_status: str | None = None
    violation_remarks: str | None = None
    description: str | None = None
    severity: str | None = None
    device_type: str | None = None
    penalty_amount: float | None = None
    respondent_name: str | None = None

    _text = field_validator(
        "violation_number",
        "number",
        "violation_type",
        "violation_status",
        "violation_remarks",
        "description",
        "severity",
        "device_type",
        "respondent_name",
        mode="before",
    )(_to_text)
    _dates = field_validator("issue_date", mode="before")(parse_socrata_date)
    _amounts = field_validator("penalty_amount", mode="before")(parse_amount)


class EcbViolationPayload(OpenDataBaseModel):
    ecb_violation_number: str | None = None
    issue_date: date | None = None
    scheduled_hearing_date: date | None = None
    hearing_status: str | None = None
    violation_description: str | None = None
    infraction_code1: str | None = None
    severity: str | None = None
    aggravated_level: str | None = None
    penality_imposed: float | None = None
    respondent_name: str | None = None
    ecb_violation_status: str | None = None

    _text = field_validator(
        "ecb_violation_number",
        "hearing_status",
        "violation_description",
        "infraction_code1",
        "severity",
        "aggravated_level",
        "respondent_name",
        "ecb_violation_status",
        mode="before",
    )(_to_text)
    _dates = field_validator("issue_date", "scheduled_hearing_date", mode="before")(
        parse_socrata_date
    )
    _amounts = field_validator("penality_imposed", mode="before")(parse_amount)


class HpdViolationPayload(OpenDataBaseModel):
    violationid: str | None = None
    novdescription: str | None = None
    violation_class: str | None = Field(default=None, alias="class")
    inspectiondate: date | None = None
    novissueddate: date | None = None
    originalcertifybydate: date | None = None
    violationstatus: str | None = None
    currentstatus: str | None = None

    _text = field_validator(
        "violationid",
        "novdescription",
        "violation_class",
        "violationstatus",
        "currentstatus",
        mode="before",
    )(_to_text)
    _dates = field_validator(
        "inspectiondate", "novissueddate", "originalcertifybydate", mode="before"
    )(parse_socrata_date)


class FdnyViolationPayload(OpenDataBaseModel):
    violation_number: str | None = None
    summons_number: str | None = None
    issue_date: date | None = None
    inspection_date: date | None = None
    violation_type: str | None = None
    description: str | None = None
    penalty_amount: float | None = None

    _text = field_validator(
        "violation_number",
        "summons_number",
        "violation_type",
        "description",
        mode="before",
    )(_to_text)
    _dates = field_validator("issue_date", "inspection_date", mode="before")(parse_socrata_date)
    _amounts = field_validator("penalty_amount", mode="before")(parse_amount)


class BisJobPayload(OpenDataBaseModel):
    job_number: str | None = Field(default=None, alias="job__")
    job_type: str | None = None
    job_doc_type: str | None = None
    work_type: str | None = None
    job_description: str | None = None
    job_status: str | None = None
    job_status_descrp: str | None = None
    pre_filing_date: date | None = Field(default=None, alias="pre__filing_date")
    filing_date: date | None = None
    approved_date: date | None = None
    permit_expiration_date: date | None = None
    initial_cost: float | None = None

    _text = field_validator(
        "job_number",
        "job_type",
        "job_doc_type",
        "work_type",
        "job_description",
        "job_status",
        "job_status_descrp",
        mode="before",
    )(_to_text)
    _dates = field_validator(
        "pre_filing_date",
        "filing_date",
        "approved_date",
        "permit_expiration_date",
        mode="before",
    )(parse_socrata_date)
    _amounts = field_validator("initial_cost", mode="before")(parse_amount)


class DobNowFilingPayload(OpenDataBaseModel):
    job_filing_number: str | None = None
    filing_number: str | None = None
    job_type: str | None = None
    filing_type: str | None = None
    work_type: str | None = None
    job_description: str | None = None
    work_on_floor: str | None = None
    filing_status: str | None = None
    current_status: str | None = None
    filing_date: date | None = None
    approved_date: date | None = None
    permit_expiration_date: date | None = None
    estimated_job_cost: float | None = None

    _text = field_validator(
        "job_filing_number",
        "filing_number",
        "job_type",
        "filing_type",
        "work_type",
        "job_description",
        "work_on_floor",
        "filing_status",
        "current_status",
        mode="before",
    )(_to_text)
    _dates = field_validator(
        "filing_date", "approved_date", "permit_expiration_date", mode="before"
    )(parse_socrata_date)
    _amounts = field_validator("estimated_job_cost", mode="before")(parse_amount)


type RawRow = dict[str, Any]
