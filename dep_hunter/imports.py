from __future__ import annotations

import logging
import os
from pathlib import Path
import re
from typing import Iterable, Iterator

from .config import DEFAULT_EXTENSIONS, DEFAULT_IGNORE_DIRS


IMPORT_PATTERNS = (
    # import x from 'y', import { x } from 'y', import 'y'
    re.compile(r"""import\s+(?:[\w{},\s*]+\s+from\s+)?['"]([^'"]+)['"]"""),
    # require('y')
    re.compile(r"""require\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
    # import('y')
    re.compile(r"""import\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
)


def parse_imports(content: str) -> list[str]:
    found: dict[str, None] = {}
    for pattern in IMPORT_PATTERNS:
        for match in pattern.finditer(content):
            if match.group(1):
                found[match.group(1)] = None
    return list(found)


def extract_dependency_name(import_path: str) -> str | None:
    if not import_path or import_path.startswith(".") or import_path.startswith("/"):
        return None
    parts = import_path.split("/")
    if import_path.startswith("@"):
        if len(parts) < 2 or not parts[1]:
            return None
        return f"{parts[0]}/{parts[1]}"
    return parts[0] or None


def count_imports(
    project_path: Path,
    dependencies: Iterable[str],
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
) -> dict[str, int]:
    """
    Count import sites per tracked dependency across the project's sources.

    Every matched statement counts once, so a file importing the same
    package twice contributes two.
    """
    logger = logging.getLogger(__name__)
    counts = {name: 0 for name in dependencies}
    for source in iter_source_files(Path(project_path), extensions, ignore_dirs):
        try:
            content = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Error reading file %s: %s", source, exc)
            continue
        for pattern in IMPORT_PATTERNS:
            for match in pattern.finditer(content):
                dependency = extract_dependency_name(match.group(1))
                if dependency is not None and dependency in counts:
                    counts[dependency] += 1
    return counts


def iter_source_files(
    root: Path,
    extensions: Iterable[str],
    ignore_dirs: Iterable[str],
) -> Iterator[Path]:
    suffixes = {ext.lower() for ext in extensions}
    ignored = set(ignore_dirs)
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in ignored)
        for filename in sorted(filenames):
            path = Path(current) / filename
            if path.suffix.lower() in suffixes:
                yield path
