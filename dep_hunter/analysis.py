from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any

from .config import Config
from .dependencies import (
    ManifestResolver,
    ProjectDependencies,
    attribute_all,
    build_dependency_graph,
    discover_dependencies,
)
from .dependencies.types import DependencyGraph, ExclusivityResult
from .imports import count_imports
from .sizes.base import BaseSizeProvider
from .sizes.factory import attach_sizes


@dataclass
class AnalysisResult:
    name: str
    usage: int
    direct_size: int
    exclusive_size: int
    total_size: int
    exclusive_dependencies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "usage": self.usage,
            "directSize": self.direct_size,
            "exclusiveSize": self.exclusive_size,
            "totalSize": self.total_size,
            "exclusiveDeps": len(self.exclusive_dependencies),
            "exclusiveDependencyNames": list(self.exclusive_dependencies),
        }


@dataclass
class AnalysisReport:
    project_path: str
    roots: list[str]
    results: list[AnalysisResult] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)


def combine_results(
    roots: list[str],
    attributions: dict[str, ExclusivityResult],
    import_counts: dict[str, int],
    graph: DependencyGraph,
) -> tuple[list[AnalysisResult], list[str]]:
    results: list[AnalysisResult] = []
    unresolved: list[str] = []
    for root in roots:
        if not graph.has_node(root):
            unresolved.append(root)
            continue
        attribution = attributions[root]
        results.append(
            AnalysisResult(
                name=root,
                usage=import_counts.get(root, 0),
                direct_size=attribution.direct_size,
                exclusive_size=attribution.exclusive_size,
                total_size=attribution.total_size,
                exclusive_dependencies=sorted(attribution.exclusive_members),
            )
        )
    return results, unresolved


async def analyze_project(
    project_path: Path,
    config: Config,
    provider: BaseSizeProvider,
    include_dev: bool | None = None,
    dependencies: ProjectDependencies | None = None,
) -> AnalysisReport:
    logger = logging.getLogger(__name__)
    project_path = Path(project_path)
    if dependencies is None:
        dependencies = discover_dependencies(project_path)
    use_dev = config.analysis.include_dev if include_dev is None else include_dev
    roots = dependencies.roots(include_dev=use_dev)
    if not roots:
        return AnalysisReport(project_path=str(project_path), roots=[])

    logger.info("Counting imports...")
    import_counts = count_imports(
        project_path,
        roots,
        extensions=config.scan.extensions,
        ignore_dirs=config.scan.ignore_dirs,
    )

    logger.info("Building dependency graph...")
    graph = build_dependency_graph(roots, ManifestResolver(project_path))

    logger.info("Calculating sizes for %s packages...", len(graph.nodes))
    try:
        await attach_sizes(graph, provider, concurrency=config.analysis.concurrency)
    finally:
        await provider.close()

    attributions = attribute_all(graph, roots)
    results, unresolved = combine_results(roots, attributions, import_counts, graph)
    for name in unresolved:
        logger.warning("Dependency %s is not installed; skipping", name)

    return AnalysisReport(
        project_path=str(project_path),
        roots=roots,
        results=results,
        unresolved=unresolved,
    )
