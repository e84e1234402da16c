"""Query descriptors for the NYC Open Data (Socrata) datasets the engine reads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from codewatch.domain.model import Authority, SourceDataset

if TYPE_CHECKING:
    from collections.abc import Callable

    from codewatch.domain.model import PropertyIdentifiers

DEFAULT_PAGE_SIZE: Final[int] = 100

type KeyBuilder = Callable[[PropertyIdentifiers], dict[str, str] | None]


def building_key(field_name: str) -> KeyBuilder:
    def build(identifiers: PropertyIdentifiers) -> dict[str, str] | None:
        building_id = (identifiers.building_id or "").strip()
        if not building_id:
            return None
        return {field_name: building_id}

    return build


@dataclass(frozen=True, slots=True)
class ParcelKey:
    borough: str
    block: str
    lot: str


def parse_parcel_id(parcel_id: str | None) -> ParcelKey | None:
    """Split a 10-digit BBL into borough (1), block (5) and lot (4).

    Leading zeros are dropped from block and lot, matching how the HPD dataset
    stores them.
    """

    if parcel_id is None:
        return None
    digits = parcel_id.strip().replace("-", "")
    if len(digits) != 10 or not digits.isdigit() or digits[0] not in "12345":
        return None
    block = digits[1:6].lstrip("0") or "0"
    lot = digits[6:10].lstrip("0") or "0"
    return ParcelKey(borough=digits[0], block=block, lot=lot)


def parcel_key(identifiers: PropertyIdentifiers) -> dict[str, str] | None:
    parsed = parse_parcel_id(identifiers.parcel_id)
    if parsed is None:
        return None
    return {"boroid": parsed.borough, "block": parsed.block, "lot": parsed.lot}


@dataclass(frozen=True, slots=True)
class DatasetQuery:
    dataset: SourceDataset
    authority: Authority
    resource_id: str
    key: KeyBuilder
    key_description: str
    order_field: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def path(self) -> str:
        return f"/resource/{self.resource_id}.json"

    def params(self, identifiers: PropertyIdentifiers) -> dict[str, str] | None:
        """Return query parameters, or ``None`` when the key cannot be derived."""

        key = self.key(identifiers)
        if key is None:
            return None
        params = dict(key)
        params["$limit"] = str(self.page_size)
        if self.order_field:
            params["$order"] = f"{self.order_field} DESC"
        return params


DOB_LEGACY_VIOLATIONS = DatasetQuery(
    dataset=SourceDataset.DOB_LEGACY,
    authority=Authority.DOB,
    resource_id="3h2n-5cm9",
    key=building_key("bin"),
    key_description="building id (BIN)",
    order_field="issue_date",
)
DOB_NOW_VIOLATIONS = DatasetQuery(
    dataset=SourceDataset.DOB_NOW,
    authority=Authority.DOB,
    resource_id="855j-jady",
    key=building_key("bin"),
    key_description="building id (BIN)",
    order_field="issue_date",
)
ECB_VIOLATIONS = DatasetQuery(
    dataset=SourceDataset.ECB,
    authority=Authority.ECB,
    resource_id="6bgk-3dad",
    key=building_key("bin"),
    key_description="building id (BIN)",
    order_field="issue_date",
)
HPD_VIOLATIONS = DatasetQuery(
    dataset=SourceDataset.HPD,
    authority=Authority.HPD,
    resource_id="wvxf-dwi5",
    key=parcel_key,
    key_description="borough/block/lot parsed from the parcel id (BBL)",
    order_field="inspectiondate",
)
FDNY_VIOLATIONS = DatasetQuery(
    dataset=SourceDataset.FDNY,
    authority=Authority.FDNY,
    resource_id="ktas-47y7",
    key=building_key("bin"),
    key_description="building id (BIN)",
)
DOB_BIS_JOBS = DatasetQuery(
    dataset=SourceDataset.DOB_BIS_JOBS,
    authority=Authority.DOB,
    resource_id="ic3t-wcy2",
    key=building_key("bin__"),
    key_description="building id (BIN)",
    order_field="latest_action_date",
)
# filing_date is not a sortable column on this dataset
DOB_NOW_BUILD_FILINGS = DatasetQuery(
    dataset=SourceDataset.DOB_NOW_BUILD,
    authority=Authority.DOB,
    resource_id="rbx6-tga4",
    key=building_key("bin"),
    key_description="building id (BIN)",
)

VIOLATION_DATASETS: Final[tuple[DatasetQuery, ...]] = (
    DOB_LEGACY_VIOLATIONS,
    DOB_NOW_VIOLATIONS,
    ECB_VIOLATIONS,
    HPD_VIOLATIONS,
    FDNY_VIOLATIONS,
)
APPLICATION_DATASETS: Final[tuple[DatasetQuery, ...]] = (
    DOB_BIS_JOBS,
    DOB_NOW_BUILD_FILINGS,
)
