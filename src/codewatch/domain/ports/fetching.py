"""Ports for fetching regulatory records from external catalogs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from codewatch.domain.model import (
        ApplicationRecord,
        Authority,
        PropertyIdentifiers,
        SourceDataset,
        ViolationRecord,
    )


@runtime_checkable
class RecordSource[TRecord](Protocol):
    """One upstream dataset behind one issuing authority.

    Implementations must never raise for transport or payload problems: they log
    and return an empty list so sibling sources keep working.
    """

    @property
    def authority(self) -> Authority: ...

    @property
    def dataset(self) -> SourceDataset: ...

    async def fetch(self, identifiers: PropertyIdentifiers) -> list[TRecord]: ...


type ViolationSource = RecordSource[ViolationRecord]
type ApplicationSource = RecordSource[ApplicationRecord]


__all__ = ["ApplicationSource", "RecordSource", "ViolationSource"]
