from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
import json
from pathlib import Path
import tempfile
import time
import unittest
from unittest.mock import AsyncMock, patch

import httpx

from dep_hunter.cache import SizeCache, SizeRecord, load_cache, save_cache
from dep_hunter.config import Config
from dep_hunter.dependencies.types import DependencyGraph, PackageNode
from dep_hunter.sizes.base import BaseSizeProvider
from dep_hunter.sizes.bundlephobia import BundlephobiaSettings, BundlephobiaSizeProvider
from dep_hunter.sizes.factory import attach_sizes, build_size_provider
from dep_hunter.sizes.local import LocalSizeProvider, directory_size


def _settings(min_interval: float = 0.0) -> BundlephobiaSettings:
    return BundlephobiaSettings(
        endpoint="https://bundlephobia.com/api/size",
        min_interval_seconds=min_interval,
        timeout_seconds=5,
        user_agent="dep-hunter/test",
    )


class _StaticProvider(BaseSizeProvider):
    def __init__(self, sizes: dict[str, int]) -> None:
        self.sizes = sizes

    async def get_size(self, node: PackageNode) -> int:
        if node.name == "explodes":
            raise RuntimeError("lookup failed")
        return self.sizes.get(node.name, 0)


class LocalSizeTests(unittest.IsolatedAsyncioTestCase):
    async def test_sums_nested_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "lib" / "deep").mkdir(parents=True)
            (root / "index.js").write_bytes(b"x" * 100)
            (root / "lib" / "a.js").write_bytes(b"x" * 20)
            (root / "lib" / "deep" / "b.js").write_bytes(b"x" * 3)

            self.assertEqual(directory_size(str(root)), 123)
            size = await LocalSizeProvider().get_size(PackageNode(name="pkg", version="1.0.0", path=str(root)))
            self.assertEqual(size, 123)

    async def test_missing_directory_is_zero(self) -> None:
        provider = LocalSizeProvider()
        self.assertEqual(await provider.get_size(PackageNode(name="pkg", version="1.0.0")), 0)
        with self.assertLogs("dep_hunter.sizes.local", level="ERROR"):
            self.assertEqual(directory_size("/nonexistent/dep-hunter/pkg"), 0)


class AttachSizesTests(unittest.IsolatedAsyncioTestCase):
    async def test_assigns_sizes_and_zeroes_failures(self) -> None:
        graph = DependencyGraph()
        for name in ("a", "b", "explodes"):
            graph.add_node(PackageNode(name=name, version="1.0.0"))

        await attach_sizes(graph, _StaticProvider({"a": 10, "b": 5, "explodes": 99}), concurrency=2)

        self.assertEqual(graph.nodes["a"].size, 10)
        self.assertEqual(graph.nodes["b"].size, 5)
        self.assertEqual(graph.nodes["explodes"].size, 0)


class BundlephobiaTests(unittest.IsolatedAsyncioTestCase):
    async def test_uses_gzip_size_and_fills_cache(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = SizeCache(path=str(Path(tmpdir) / "cache.json"))
            provider = BundlephobiaSizeProvider(_settings(), cache=cache)
            node = PackageNode(name="react", version="18.2.0")

            with patch("httpx.AsyncClient") as mock_client:
                instance = mock_client.return_value.__aenter__.return_value
                instance.get = AsyncMock(
                    return_value=httpx.Response(200, json={"gzip": 2500, "size": 6400, "dependencyCount": 1})
                )
                size = await provider.get_size(node)
                cached = await provider.get_size(node)

            self.assertEqual(size, 2500)
            self.assertEqual(cached, 2500)
            instance.get.assert_awaited_once()
            params = instance.get.call_args.kwargs.get("params")
            self.assertEqual(params["package"], "react@18.2.0")

            await provider.close()
            reloaded = load_cache(cache.path)
            record = reloaded.get("react", "18.2.0")
            self.assertIsNotNone(record)
            self.assertEqual(record.size, 6400)
            self.assertEqual(record.dependency_count, 1)

    async def test_concurrent_lookups_share_one_request(self) -> None:
        provider = BundlephobiaSizeProvider(_settings())
        node = PackageNode(name="lodash", version="4.17.21")

        async def slow_get(*args, **kwargs):
            await asyncio.sleep(0.01)
            return httpx.Response(200, json={"gzip": 0, "size": 7000})

        with patch("httpx.AsyncClient") as mock_client:
            instance = mock_client.return_value.__aenter__.return_value
            instance.get = AsyncMock(side_effect=slow_get)
            sizes = await asyncio.gather(*(provider.get_size(node) for _ in range(3)))

        self.assertEqual(sizes, [7000, 7000, 7000])
        self.assertEqual(instance.get.await_count, 1)

    async def test_failures_yield_zero(self) -> None:
        provider = BundlephobiaSizeProvider(_settings())
        with patch("httpx.AsyncClient") as mock_client:
            instance = mock_client.return_value.__aenter__.return_value
            instance.get = AsyncMock(return_value=httpx.Response(404))
            with self.assertLogs("dep_hunter.sizes.bundlephobia", level="WARNING"):
                missing = await provider.get_size(PackageNode(name="nope", version="0.0.1"))

            instance.get = AsyncMock(side_effect=httpx.ConnectError("offline"))
            with self.assertLogs("dep_hunter.sizes.bundlephobia", level="WARNING"):
                offline = await provider.get_size(PackageNode(name="offline", version="1.0.0"))

        self.assertEqual(missing, 0)
        self.assertEqual(offline, 0)

    async def test_requests_respect_minimum_interval(self) -> None:
        provider = BundlephobiaSizeProvider(_settings(min_interval=0.05))
        with patch("httpx.AsyncClient") as mock_client:
            instance = mock_client.return_value.__aenter__.return_value
            instance.get = AsyncMock(return_value=httpx.Response(200, json={"gzip": 1}))
            started = time.monotonic()
            await asyncio.gather(
                provider.get_size(PackageNode(name="a", version="1.0.0")),
                provider.get_size(PackageNode(name="b", version="1.0.0")),
                provider.get_size(PackageNode(name="c", version="1.0.0")),
            )
            elapsed = time.monotonic() - started

        self.assertEqual(instance.get.await_count, 3)
        self.assertGreaterEqual(elapsed, 0.09)


class SizeCacheTests(unittest.TestCase):
    def test_round_trip_and_ttl(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = str(Path(tmpdir) / "nested" / "cache.json")
            cache = SizeCache(path=path)
            now = datetime.now(timezone.utc)
            cache.put(SizeRecord("fresh", "1.0.0", gzip=10, size=30, dependency_count=0, fetched_at=now))
            cache.put(
                SizeRecord(
                    "stale", "1.0.0", gzip=0, size=40, dependency_count=2, fetched_at=now - timedelta(days=90)
                )
            )
            save_cache(cache)

            reloaded = load_cache(path, ttl_days=30)
            self.assertEqual(reloaded.get("fresh", "1.0.0").best_size, 10)
            self.assertIsNone(reloaded.get("stale", "1.0.0"))
            self.assertEqual(load_cache(path).get("stale", "1.0.0").best_size, 40)

    def test_corrupt_cache_loads_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "cache.json"
            path.write_text("{broken", encoding="utf-8")
            with self.assertLogs("dep_hunter.cache", level="WARNING"):
                cache = load_cache(str(path))
            self.assertEqual(cache.entries, {})

            path.write_text(json.dumps({"entries": {"x@1": {"name": "x"}}}), encoding="utf-8")
            self.assertEqual(load_cache(str(path)).entries, {})


class FactoryTests(unittest.TestCase):
    def test_builds_configured_backend(self) -> None:
        config = Config()
        self.assertIsInstance(build_size_provider(config), LocalSizeProvider)
        with tempfile.TemporaryDirectory() as tmpdir:
            config.bundlephobia.cache_file = str(Path(tmpdir) / "cache.json")
            self.assertIsInstance(build_size_provider(config, backend="bundlephobia"), BundlephobiaSizeProvider)
        with self.assertRaises(ValueError):
            build_size_provider(config, backend="s3")
