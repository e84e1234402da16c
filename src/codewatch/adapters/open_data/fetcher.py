"""Assemble the Open Data record sources for the sync pipeline."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from codewatch.adapters.http_resilience import ResilientClient

from .client import SocrataSource
from .datasets import APPLICATION_DATASETS, DEFAULT_PAGE_SIZE, VIOLATION_DATASETS
from .translator import APPLICATION_TRANSLATORS, VIOLATION_TRANSLATORS

if TYPE_CHECKING:
    from collections.abc import Callable

    from codewatch.config.http_resilience import ResilienceConfig
    from codewatch.config.open_data import OpenDataConfig
    from codewatch.domain.model import ApplicationRecord, ViolationRecord


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def build_open_data_client(
    config: OpenDataConfig,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
) -> ResilientClient:
    return client_factory(config.resilience)


def build_violation_sources(
    client: ResilientClient,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[SocrataSource[ViolationRecord]]:
    return [
        SocrataSource(
            client=client,
            query=replace(query, page_size=page_size),
            parse=VIOLATION_TRANSLATORS[query.dataset],
        )
        for query in VIOLATION_DATASETS
    ]


def build_application_sources(
    client: ResilientClient,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[SocrataSource[ApplicationRecord]]:
    return [
        SocrataSource(
            client=client,
            query=replace(query, page_size=page_size),
            parse=APPLICATION_TRANSLATORS[query.dataset],
        )
        for query in APPLICATION_DATASETS
    ]
