"""Shared outbound HTTP client used by the open data and SMS adapters.

Every request passes through three layers, outermost first:

* an ``aiolimiter`` token bucket, shared by all callers of one client instance
* an optional ``hishel`` response cache
* an ``httpx-retries`` transport that replays idempotent requests on transient failures
"""

from __future__ import annotations

import json
import logging
from contextlib import nullcontext
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from codewatch.config.storage import get_http_cache_path

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import AuthTypes, HeaderTypes, QueryParamTypes, RequestData, URLTypes

    from codewatch.config.http_resilience import (
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
        ShouldCacheHook,
    )

log = logging.getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    data: RequestData | None
    headers: HeaderTypes | None
    auth: AuthTypes | None
    timeout: float


class _ClientOptions(TypedDict, total=False):
    base_url: str
    timeout: float
    headers: dict[str, str]
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    """``httpx.AsyncClient`` wrapped with the rate limit, cache and retries of one upstream.

    Share one instance across concurrent property syncs so the limiter caps the
    aggregate request rate against that upstream.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = _open_client(config)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        async with self._limiter or nullcontext():
            response = await self._client.request(method, url, **kwargs)
        log.debug(
            "%s %s %s -> %s", self.config.name, method, response.request.url, response.status_code
        )
        return response

    async def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("POST", url, **kwargs)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        backoff_jitter=policy.backoff_jitter,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=sorted(policy.allowed_methods),
        status_forcelist=sorted(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


def _open_client(config: ResilienceConfig) -> httpx.AsyncClient:
    transport = RetryTransport(retry=build_retry(config.retry))
    common: _ClientOptions = {
        "timeout": config.timeout_seconds,
        "headers": config.headers(),
        "transport": transport,
    }
    if config.base_url is not None:
        common["base_url"] = config.base_url

    if config.cache is None:
        return httpx.AsyncClient(**common)
    return AsyncCacheClient(
        **common,
        storage=_cache_storage(config.cache),
        policy=_cache_policy(config.cache),
    )


def _cache_storage(cache: CacheConfig) -> AsyncSqliteStorage:
    # hishel keeps even the in-memory cache in sqlite
    path = str(get_http_cache_path()) if cache.backend == "sqlite" else ":memory:"
    return AsyncSqliteStorage(database_path=path, default_ttl=cache.ttl_seconds)


def _cache_policy(cache: CacheConfig) -> FilterPolicy | None:
    if cache.should_cache is None:
        return None
    return FilterPolicy(response_filters=[_PayloadFilter(cache.should_cache)])


class _PayloadFilter(BaseFilter[HishelCacheResponse]):
    """Only store responses whose decoded JSON body satisfies ``predicate``."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if not body:
            return False
        try:
            payload = json.loads(body)
        except ValueError:
            return False
        return bool(self._predicate(payload))
