from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class PackageNode:
    name: str
    version: str
    dependencies: list[str] = field(default_factory=list)
    size: int = 0
    path: str = ""


@dataclass
class ResolvedPackage:
    version: str
    dependencies: list[str] = field(default_factory=list)
    path: str = ""


@dataclass
class DependencyGraph:
    nodes: dict[str, PackageNode] = field(default_factory=dict)
    edges: dict[str, set[str]] = field(default_factory=dict)
    reverse_edges: dict[str, set[str]] = field(default_factory=dict)

    def add_node(self, node: PackageNode) -> bool:
        """Register a node; the first writer wins and later duplicates are no-ops."""
        if node.name in self.nodes:
            return False
        self.nodes[node.name] = node
        self.edges.setdefault(node.name, set())
        return True

    def add_edge(self, source: str, target: str) -> None:
        self.edges.setdefault(source, set()).add(target)
        self.reverse_edges.setdefault(target, set()).add(source)

    def has_node(self, name: str) -> bool:
        return name in self.nodes

    def dependencies_of(self, name: str) -> set[str]:
        return self.edges.get(name, set())

    def dependents_of(self, name: str) -> set[str]:
        return self.reverse_edges.get(name, set())


@dataclass(frozen=True)
class ExclusivityResult:
    name: str
    direct_size: int = 0
    exclusive_size: int = 0
    exclusive_members: frozenset[str] = frozenset()

    @property
    def total_size(self) -> int:
        return self.direct_size + self.exclusive_size

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "directSize": self.direct_size,
            "exclusiveSize": self.exclusive_size,
            "totalSize": self.total_size,
            "exclusiveDependencyNames": sorted(self.exclusive_members),
        }
