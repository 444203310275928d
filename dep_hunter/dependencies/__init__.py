from .builder import build_dependency_graph
from .exclusivity import attribute_all, compute_exclusive, reachable, summarize
from .loader import ManifestResolver, ProjectDependencies, discover_dependencies
from .types import DependencyGraph, ExclusivityResult, PackageNode, ResolvedPackage

__all__ = [
    "DependencyGraph",
    "ExclusivityResult",
    "ManifestResolver",
    "PackageNode",
    "ProjectDependencies",
    "ResolvedPackage",
    "attribute_all",
    "build_dependency_graph",
    "compute_exclusive",
    "discover_dependencies",
    "reachable",
    "summarize",
]
