"""Deduplication, change detection and stale-record suppression."""

from __future__ import annotations

from .deduplicate import SOURCE_PRECEDENCE, deduplicate, precedence_rank
from .snapshot import ChangeEvent, build_change_log_entries, diff_snapshots
from .suppression import SuppressionRule, apply_suppression, build_rules

__all__ = [
    "SOURCE_PRECEDENCE",
    "ChangeEvent",
    "SuppressionRule",
    "apply_suppression",
    "build_change_log_entries",
    "build_rules",
    "deduplicate",
    "diff_snapshots",
    "precedence_rank",
]
