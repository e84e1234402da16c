"""Socrata catalog client and the record sources built on it."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx

from .translator import translate_rows

if TYPE_CHECKING:
    from collections.abc import Callable

    from codewatch.adapters.http_resilience import ResilientClient
    from codewatch.domain.model import Authority, PropertyIdentifiers, SourceDataset

    from .datasets import DatasetQuery
    from .schema import RawRow

log = getLogger(__name__)


class OpenDataAPIError(RuntimeError):
    """Raised when the catalog answers with an error object or an unexpected body."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


async def query_rows(
    client: ResilientClient,
    query: DatasetQuery,
    params: dict[str, str],
) -> list[RawRow]:
    response = await client.get(query.path, params=params)
    response.raise_for_status()

    payload = response.json()
    if isinstance(payload, dict) and payload.get("error"):
        error_payload = cast("dict[str, object]", payload)
        message = str(error_payload.get("message") or "unknown error")
        code = error_payload.get("code")
        raise OpenDataAPIError(message, code=str(code) if code is not None else None)
    if not isinstance(payload, list):
        raise OpenDataAPIError(f"Unexpected {query.resource_id} payload: expected a JSON array")

    rows = cast("list[object]", payload)
    return [cast("RawRow", row) for row in rows if isinstance(row, dict)]


@dataclass(slots=True)
class SocrataSource[TRecord]:
    """One dataset, queried for one property, translated into canonical records.

    Every failure mode ends in an empty list so sibling sources keep working.
    """

    client: ResilientClient
    query: DatasetQuery
    parse: Callable[[RawRow], TRecord | None]

    @property
    def authority(self) -> Authority:
        return self.query.authority

    @property
    def dataset(self) -> SourceDataset:
        return self.query.dataset

    async def fetch(self, identifiers: PropertyIdentifiers) -> list[TRecord]:
        params = self.query.params(identifiers)
        if params is None:
            log.info(f"Skipping {self.dataset}: no {self.query.key_description} available")
            return []

        try:
            rows = await query_rows(self.client, self.query, params)
        except httpx.HTTPStatusError as exc:
            log.warning(f"{self.dataset} API error {exc.response.status_code}")
            return []
        except httpx.HTTPError as exc:
            log.warning(f"{self.dataset} request failed: {exc!r}")
            return []
        except OpenDataAPIError as exc:
            log.warning(f"{self.dataset} returned an error: {exc}")
            return []
        except ValueError as exc:
            log.warning(f"{self.dataset} returned a non-JSON body: {exc}")
            return []

        records = translate_rows(rows, self.parse, dataset=self.dataset)
        log.debug(f"{self.dataset}: {len(rows)} row(s), {len(records)} record(s)")
        return records


if TYPE_CHECKING:
    from codewatch.domain.model import ViolationRecord
    from codewatch.domain.ports.fetching import RecordSource

    def _check_source(source: SocrataSource[ViolationRecord]) -> RecordSource[ViolationRecord]:
        return source
