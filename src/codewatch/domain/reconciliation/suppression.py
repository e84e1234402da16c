"""Heuristic ageing of open violations that were likely resolved but never closed upstream."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from codewatch.domain.model import Authority

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from datetime import date

    from codewatch.domain.model import Violation

log = getLogger(__name__)

DAYS_PER_YEAR = 365


@dataclass(frozen=True, slots=True)
class SuppressionRule:
    authority: Authority
    threshold_days: int

    @property
    def threshold_years(self) -> int:
        return self.threshold_days // DAYS_PER_YEAR

    def reason(self, elapsed_days: int) -> str:
        age = elapsed_days // DAYS_PER_YEAR
        plural = "s" if age != 1 else ""
        return (
            f"{self.authority.value} violation open more than {self.threshold_years} years "
            f"is likely resolved but not updated upstream ({age} year{plural} old)"
        )


def build_rules(thresholds: Mapping[str, int]) -> dict[Authority, SuppressionRule]:
    return {
        Authority(name): SuppressionRule(authority=Authority(name), threshold_days=days)
        for name, days in thresholds.items()
    }


def apply_suppression(
    violations: Iterable[Violation],
    rules: Mapping[Authority, SuppressionRule],
    *,
    today: date,
) -> Sequence[Violation]:
    """Suppress open, active violations older than their authority's threshold.

    Returns the violations that were newly suppressed. Authorities without a rule
    and violations without an issue date are left untouched.
    """

    suppressed: list[Violation] = []
    for violation in violations:
        if not violation.is_open_and_active or violation.issued_date is None:
            continue
        rule = rules.get(violation.authority)
        if rule is None:
            continue
        elapsed_days = (today - violation.issued_date).days
        if elapsed_days <= rule.threshold_days:
            continue
        violation.suppress_stale(rule.reason(elapsed_days))
        suppressed.append(violation)

    if suppressed:
        log.info(f"Suppressed {len(suppressed)} stale violation(s)")
    return suppressed
