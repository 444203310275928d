from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import time
from typing import Any

import httpx

from .base import BaseSizeProvider
from ..cache import SizeCache, SizeRecord, cache_key, save_cache
from ..dependencies.types import PackageNode


BUNDLEPHOBIA_ENDPOINT = "https://bundlephobia.com/api/size"


@dataclass
class BundlephobiaSettings:
    endpoint: str
    min_interval_seconds: float
    timeout_seconds: int
    user_agent: str


class BundlephobiaSizeProvider(BaseSizeProvider):
    """
    Looks up gzip sizes from bundlephobia.

    Concurrent lookups for the same ``name@version`` share one request, and
    requests are spaced at least ``min_interval_seconds`` apart.
    """

    def __init__(self, settings: BundlephobiaSettings, cache: SizeCache | None = None) -> None:
        self._settings = settings
        self._cache = cache
        self._logger = logging.getLogger(__name__)
        self._in_flight: dict[str, asyncio.Task[int]] = {}
        self._throttle_lock = asyncio.Lock()
        self._last_request = 0.0
        self._dirty = False

    async def get_size(self, node: PackageNode) -> int:
        if self._cache is not None:
            record = self._cache.get(node.name, node.version)
            if record is not None:
                return record.best_size

        key = cache_key(node.name, node.version)
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(node.name, node.version))
            self._in_flight[key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        return await asyncio.shield(task)

    async def close(self) -> None:
        if self._cache is not None and self._dirty:
            save_cache(self._cache)
            self._dirty = False

    async def _fetch(self, name: str, version: str) -> int:
        params = {"package": f"{name}@{version}", "record": "true"}
        headers = {"User-Agent": self._settings.user_agent, "Accept": "application/json"}

        await self._throttle()
        try:
            async with httpx.AsyncClient(timeout=self._settings.timeout_seconds) as client:
                response = await client.get(self._settings.endpoint, params=params, headers=headers)
        except httpx.HTTPError as exc:
            self._logger.warning("Error fetching size for %s@%s: %s", name, version, exc)
            return 0

        if not 200 <= response.status_code < 300:
            self._logger.warning(
                "Failed to fetch size for %s@%s: %s", name, version, response.status_code
            )
            return 0

        try:
            data = response.json()
        except ValueError as exc:
            self._logger.warning("Invalid size response for %s@%s: %s", name, version, exc)
            return 0

        record = _parse_record(data, name, version)
        if self._cache is not None:
            self._cache.put(record)
            self._dirty = True
        return record.best_size

    async def _throttle(self) -> None:
        async with self._throttle_lock:
            wait = self._last_request + self._settings.min_interval_seconds - time.monotonic()
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request = time.monotonic()


def _parse_record(data: Any, name: str, version: str) -> SizeRecord:
    if not isinstance(data, dict):
        data = {}
    return SizeRecord(
        name=name,
        version=version,
        gzip=_as_int(data.get("gzip")),
        size=_as_int(data.get("size")),
        dependency_count=_as_int(data.get("dependencyCount")),
        fetched_at=datetime.now(timezone.utc),
    )


def _as_int(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0
