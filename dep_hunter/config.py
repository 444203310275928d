from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any

import yaml


SIZE_BACKENDS = {"local", "bundlephobia"}

DEFAULT_EXTENSIONS = [".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"]
DEFAULT_IGNORE_DIRS = ["node_modules", "dist", "build", ".git"]


@dataclass
class AnalysisConfig:
    include_dev: bool = False
    size_backend: str = "local"
    concurrency: int = 3


@dataclass
class ScanConfig:
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    ignore_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_DIRS))


@dataclass
class BundlephobiaConfig:
    endpoint: str = "https://bundlephobia.com/api/size"
    min_interval_seconds: float = 0.35
    cache_file: str = "~/.dep-hunter/cache.json"
    cache_ttl_days: int = 30


@dataclass
class Settings:
    request_timeout_seconds: int = 20
    user_agent: str = "dep-hunter/0.1"


@dataclass
class Config:
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    bundlephobia: BundlephobiaConfig = field(default_factory=BundlephobiaConfig)
    settings: Settings = field(default_factory=Settings)


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_env(val) for key, val in value.items()}
    return value


def _require_dict(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a mapping")
    return value


def _require_list(value: Any, name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{name} must be a list")
    return [str(item) for item in value]


def load_config(path: str | None = None) -> Config:
    """Load a YAML config file. A missing file yields the defaults."""
    if path is None or not Path(path).exists():
        return Config()

    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    data = _expand_env(raw)
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")

    return Config(
        analysis=_load_analysis(_require_dict(data.get("analysis"), "analysis")),
        scan=_load_scan(_require_dict(data.get("scan"), "scan")),
        bundlephobia=_load_bundlephobia(_require_dict(data.get("bundlephobia"), "bundlephobia")),
        settings=_load_settings(_require_dict(data.get("settings"), "settings")),
    )


def _load_analysis(raw: dict[str, Any]) -> AnalysisConfig:
    backend = str(raw.get("size_backend", "local")).lower()
    if backend not in SIZE_BACKENDS:
        raise ValueError("analysis.size_backend must be 'local' or 'bundlephobia'")
    concurrency = _parse_int(raw.get("concurrency", 3), "analysis.concurrency")
    if concurrency < 1:
        raise ValueError("analysis.concurrency must be >= 1")
    return AnalysisConfig(
        include_dev=bool(raw.get("include_dev", False)),
        size_backend=backend,
        concurrency=concurrency,
    )


def _load_scan(raw: dict[str, Any]) -> ScanConfig:
    extensions = _require_list(raw.get("extensions"), "scan.extensions") or list(DEFAULT_EXTENSIONS)
    ignore_dirs = raw.get("ignore_dirs")
    return ScanConfig(
        extensions=[ext if ext.startswith(".") else f".{ext}" for ext in extensions],
        ignore_dirs=(
            list(DEFAULT_IGNORE_DIRS)
            if ignore_dirs is None
            else _require_list(ignore_dirs, "scan.ignore_dirs")
        ),
    )


def _load_bundlephobia(raw: dict[str, Any]) -> BundlephobiaConfig:
    endpoint = str(raw.get("endpoint", BundlephobiaConfig.endpoint))
    if not (endpoint.startswith("http://") or endpoint.startswith("https://")):
        raise ValueError("bundlephobia.endpoint must be an http(s) URL")
    min_interval = _parse_float(raw.get("min_interval_seconds", 0.35), "bundlephobia.min_interval_seconds")
    if min_interval < 0:
        raise ValueError("bundlephobia.min_interval_seconds must be >= 0")
    return BundlephobiaConfig(
        endpoint=endpoint,
        min_interval_seconds=min_interval,
        cache_file=str(raw.get("cache_file", BundlephobiaConfig.cache_file)),
        cache_ttl_days=_parse_int(raw.get("cache_ttl_days", 30), "bundlephobia.cache_ttl_days"),
    )


def _load_settings(raw: dict[str, Any]) -> Settings:
    return Settings(
        request_timeout_seconds=_parse_int(
            raw.get("request_timeout_seconds", 20), "settings.request_timeout_seconds"
        ),
        user_agent=str(raw.get("user_agent", "dep-hunter/0.1")),
    )


def _parse_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer")


def _parse_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number")
