from __future__ import annotations

import asyncio
import logging

from .base import BaseSizeProvider
from .bundlephobia import BundlephobiaSettings, BundlephobiaSizeProvider
from .local import LocalSizeProvider
from ..cache import load_cache
from ..config import Config
from ..dependencies.types import DependencyGraph


def build_size_provider(config: Config, backend: str | None = None) -> BaseSizeProvider:
    normalized = (backend or config.analysis.size_backend).lower()
    if normalized == "local":
        return LocalSizeProvider()
    if normalized == "bundlephobia":
        settings = config.bundlephobia
        cache = load_cache(settings.cache_file, ttl_days=settings.cache_ttl_days)
        return BundlephobiaSizeProvider(
            BundlephobiaSettings(
                endpoint=settings.endpoint,
                min_interval_seconds=settings.min_interval_seconds,
                timeout_seconds=config.settings.request_timeout_seconds,
                user_agent=config.settings.user_agent,
            ),
            cache=cache,
        )
    raise ValueError(f"Unknown size backend: {backend or config.analysis.size_backend}")


async def attach_sizes(graph: DependencyGraph, provider: BaseSizeProvider, concurrency: int = 3) -> None:
    logger = logging.getLogger(__name__)
    semaphore = asyncio.Semaphore(max(concurrency, 1))
    nodes = list(graph.nodes.values())

    async def _size_of(node) -> int:
        async with semaphore:
            return await provider.get_size(node)

    results = await asyncio.gather(*(_size_of(node) for node in nodes), return_exceptions=True)
    for node, result in zip(nodes, results):
        if isinstance(result, Exception):
            logger.warning("Size lookup failed for %s@%s: %s", node.name, node.version, result)
            node.size = 0
            continue
        node.size = max(int(result), 0)
