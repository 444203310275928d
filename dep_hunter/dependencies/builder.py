from __future__ import annotations

from collections import deque
import logging
from typing import Callable, Iterable, Optional

from .types import DependencyGraph, PackageNode, ResolvedPackage


Resolver = Callable[[str], Optional[ResolvedPackage]]


def build_dependency_graph(roots: Iterable[str], resolve: Resolver) -> DependencyGraph:
    """
    Walk the installed package tree breadth-first from ``roots``.

    Every name is resolved at most once. Names that cannot be resolved stay
    in the graph as edge targets but never become nodes.
    """
    root_list = [str(name) for name in roots]
    if not root_list:
        raise ValueError("At least one root package is required")

    logger = logging.getLogger(__name__)
    graph = DependencyGraph()
    visited: set[str] = set()
    queue: deque[str] = deque()

    for name in root_list:
        if name not in visited:
            visited.add(name)
            queue.append(name)

    while queue:
        name = queue.popleft()
        resolved = _resolve_safely(resolve, name, logger)
        if resolved is None:
            continue

        node = PackageNode(
            name=name,
            version=resolved.version,
            dependencies=list(resolved.dependencies),
            path=resolved.path,
        )
        if not graph.add_node(node):
            continue

        for dependency in node.dependencies:
            graph.add_edge(name, dependency)
            if dependency in visited:
                continue
            visited.add(dependency)
            queue.append(dependency)

    logger.debug(
        "Built dependency graph: %s nodes from %s roots", len(graph.nodes), len(set(root_list))
    )
    return graph


def _resolve_safely(resolve: Resolver, name: str, logger: logging.Logger) -> ResolvedPackage | None:
    try:
        resolved = resolve(name)
    except Exception as exc:
        logger.error("Error resolving %s: %s", name, exc)
        return None
    if resolved is None:
        logger.debug("Package %s is not installed", name)
    return resolved
