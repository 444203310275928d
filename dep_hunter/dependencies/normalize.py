from __future__ import annotations


def normalize_package_name(name: str) -> str:
    # npm names are case-sensitive on disk; only surrounding whitespace and
    # trailing path separators are dropped
    return name.strip().rstrip("/")
