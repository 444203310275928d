from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from typing import Any

from .normalize import normalize_package_name
from .types import ResolvedPackage


MANIFEST_NAME = "package.json"
PACKAGE_STORE = "node_modules"


@dataclass
class ProjectDependencies:
    direct: list[str]
    dev: list[str] = field(default_factory=list)
    path: str = ""

    def roots(self, include_dev: bool = False) -> list[str]:
        names = self.direct + self.dev if include_dev else self.direct
        return list(dict.fromkeys(names))


def discover_dependencies(project_path: Path) -> ProjectDependencies:
    manifest = Path(project_path) / MANIFEST_NAME
    if not manifest.exists():
        raise FileNotFoundError(f"No {MANIFEST_NAME} found at {manifest}")

    data = json.loads(manifest.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{manifest} must contain a JSON object")

    return ProjectDependencies(
        direct=_extract_package_names(data.get("dependencies")),
        dev=_extract_package_names(data.get("devDependencies")),
        path=str(project_path),
    )


class ManifestResolver:
    """Resolves package names against an installed ``node_modules`` tree."""

    def __init__(self, project_path: Path) -> None:
        self._store = Path(project_path) / PACKAGE_STORE
        self._logger = logging.getLogger(__name__)

    def __call__(self, name: str) -> ResolvedPackage | None:
        return self.resolve(name)

    def resolve(self, name: str) -> ResolvedPackage | None:
        package_dir = self._store / name
        manifest = package_dir / MANIFEST_NAME
        if not package_dir.is_dir() or not manifest.is_file():
            return None

        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self._logger.error("Error processing %s: %s", name, exc)
            return None
        if not isinstance(data, dict):
            self._logger.error("Error processing %s: manifest is not an object", name)
            return None

        version = data.get("version")
        return ResolvedPackage(
            version=str(version) if version else "unknown",
            dependencies=_extract_package_names(data.get("dependencies")),
            path=str(package_dir),
        )


def _extract_package_names(data: Any) -> list[str]:
    if not isinstance(data, dict):
        return []
    names = (normalize_package_name(str(name)) for name in data.keys())
    return [name for name in dict.fromkeys(names) if name]
