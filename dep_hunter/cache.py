from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import json
import logging
import os
from pathlib import Path
from typing import Any


CACHE_VERSION = 1


@dataclass
class SizeRecord:
    name: str
    version: str
    gzip: int
    size: int
    dependency_count: int
    fetched_at: datetime

    @property
    def best_size(self) -> int:
        return self.gzip or self.size or 0


@dataclass
class SizeCache:
    path: str
    entries: dict[str, SizeRecord] = field(default_factory=dict)
    ttl_days: int | None = None
    version: int = CACHE_VERSION

    def get(self, name: str, version: str) -> SizeRecord | None:
        record = self.entries.get(cache_key(name, version))
        if record is None:
            return None
        if self.ttl_days is not None and self.ttl_days > 0:
            cutoff = datetime.now(timezone.utc) - timedelta(days=self.ttl_days)
            if record.fetched_at < cutoff:
                return None
        return record

    def put(self, record: SizeRecord) -> None:
        self.entries[cache_key(record.name, record.version)] = record


def cache_key(name: str, version: str) -> str:
    return f"{name}@{version}"


def _parse_datetime(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def load_cache(path: str, ttl_days: int | None = None) -> SizeCache:
    resolved = os.path.expanduser(path)
    if not os.path.exists(resolved):
        return SizeCache(path=resolved, ttl_days=ttl_days)

    try:
        with open(resolved, "r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        logging.getLogger(__name__).warning("Ignoring unreadable size cache %s: %s", resolved, exc)
        return SizeCache(path=resolved, ttl_days=ttl_days)

    if not isinstance(raw, dict):
        return SizeCache(path=resolved, ttl_days=ttl_days)

    return SizeCache(
        path=resolved,
        entries=_parse_entries(raw.get("entries")),
        ttl_days=ttl_days,
        version=int(raw.get("version", CACHE_VERSION)),
    )


def save_cache(cache: SizeCache) -> None:
    payload = {
        "version": cache.version,
        "entries": {
            key: {
                "name": record.name,
                "version": record.version,
                "gzip": record.gzip,
                "size": record.size,
                "dependency_count": record.dependency_count,
                "fetched_at": _to_iso(record.fetched_at),
            }
            for key, record in cache.entries.items()
        },
    }
    Path(cache.path).parent.mkdir(parents=True, exist_ok=True)
    with open(cache.path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)


def _parse_entries(value: Any) -> dict[str, SizeRecord]:
    if not isinstance(value, dict):
        return {}
    parsed: dict[str, SizeRecord] = {}
    for key, entry in value.items():
        if not isinstance(entry, dict):
            continue
        try:
            fetched_at = _parse_datetime(str(entry["fetched_at"]))
            record = SizeRecord(
                name=str(entry["name"]),
                version=str(entry["version"]),
                gzip=int(entry.get("gzip") or 0),
                size=int(entry.get("size") or 0),
                dependency_count=int(entry.get("dependency_count") or 0),
                fetched_at=fetched_at,
            )
        except (KeyError, TypeError, ValueError):
            continue
        parsed[str(key)] = record
    return parsed
