from __future__ import annotations

from abc import ABC, abstractmethod

from ..dependencies.types import PackageNode


class BaseSizeProvider(ABC):
    @abstractmethod
    async def get_size(self, node: PackageNode) -> int:
        """Return the footprint of one installed package in bytes. Failures yield 0."""
        raise NotImplementedError

    async def close(self) -> None:
        return None
