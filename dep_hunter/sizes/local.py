from __future__ import annotations

import asyncio
import logging
import os

from .base import BaseSizeProvider
from ..dependencies.types import PackageNode


class LocalSizeProvider(BaseSizeProvider):
    """Sizes packages by summing the files under their install directory."""

    async def get_size(self, node: PackageNode) -> int:
        if not node.path:
            return 0
        return await asyncio.to_thread(directory_size, node.path)


def directory_size(path: str) -> int:
    logger = logging.getLogger(__name__)
    total = 0
    pending = [path]
    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
        except OSError as exc:
            logger.error("Error calculating size for %s: %s", current, exc)
    return total
