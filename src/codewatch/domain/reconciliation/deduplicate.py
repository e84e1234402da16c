"""Collapse records reported by more than one dataset into one per natural number.

Precedence is declared, not implied by call order: batches are reduced in
``SOURCE_PRECEDENCE`` order and a later dataset replaces an earlier one in full.
"""

from __future__ import annotations

from functools import reduce
from itertools import chain
from typing import TYPE_CHECKING, Final, Protocol

from codewatch.domain.model import SourceDataset

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


class SourcedRecord(Protocol):
    @property
    def source(self) -> SourceDataset: ...

    @property
    def number(self) -> str: ...


VIOLATION_PRECEDENCE: Final[tuple[SourceDataset, ...]] = (
    SourceDataset.DOB_LEGACY,
    SourceDataset.DOB_NOW,  # current DOB system of record overrides the legacy one
    SourceDataset.ECB,
    SourceDataset.HPD,
    SourceDataset.FDNY,
)
APPLICATION_PRECEDENCE: Final[tuple[SourceDataset, ...]] = (
    SourceDataset.DOB_BIS_JOBS,
    SourceDataset.DOB_NOW_BUILD,
)
SOURCE_PRECEDENCE: Final[tuple[SourceDataset, ...]] = (
    VIOLATION_PRECEDENCE + APPLICATION_PRECEDENCE
)

_RANK: Final[dict[SourceDataset, int]] = {
    dataset: index for index, dataset in enumerate(SOURCE_PRECEDENCE)
}


def precedence_rank(dataset: SourceDataset) -> int:
    return _RANK.get(dataset, len(SOURCE_PRECEDENCE))


def order_by_precedence[T: SourcedRecord](records: Iterable[T]) -> list[T]:
    """Stable sort, so records from the same dataset keep their reported order."""

    return sorted(records, key=lambda record: precedence_rank(record.source))


def _keep_latest[T: SourcedRecord](acc: dict[str, T], record: T) -> dict[str, T]:
    acc[record.number] = record
    return acc


def deduplicate[T: SourcedRecord](batches: Iterable[Sequence[T]]) -> list[T]:
    """Return records with unique numbers; the highest-precedence dataset wins.

    Key order follows the first time each number was seen.
    """

    ordered = order_by_precedence(chain.from_iterable(batches))
    merged: dict[str, T] = reduce(_keep_latest, ordered, {})
    return list(merged.values())
