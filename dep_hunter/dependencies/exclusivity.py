from __future__ import annotations

from collections import deque
from typing import Callable, Iterable

from .types import DependencyGraph, ExclusivityResult


Closure = Callable[[str], set[str]]


def reachable(name: str, graph: DependencyGraph) -> set[str]:
    """Transitive closure of ``name`` over forward edges, never including ``name`` itself."""
    result: set[str] = set()
    visited = {name}
    queue: deque[str] = deque([name])
    while queue:
        current = queue.popleft()
        for child in graph.dependencies_of(current):
            if child == name:
                continue
            result.add(child)
            if child not in visited:
                visited.add(child)
                queue.append(child)
    return result


def compute_exclusive(root: str, graph: DependencyGraph, all_roots: Iterable[str]) -> set[str]:
    """
    Returns the packages reachable from ``root`` that no other root pulls in.

    A candidate loses exclusivity when one of its direct dependents (other
    than ``root``) is itself a root, or when such a dependent's own closure
    reaches another root without passing through ``root``.

    ``all_roots`` is ordered. A package that passes the dependent check for
    several roots at once is only reachable through shared intermediates;
    it is attributed to the earliest of those roots so that no package is
    ever exclusive to two roots.
    """
    if not graph.has_node(root):
        return set()

    ordered = list(dict.fromkeys(all_roots))
    roots = set(ordered) | {root}
    closures: dict[str, set[str]] = {}

    def closure(name: str) -> set[str]:
        if name not in closures:
            closures[name] = reachable(name, graph)
        return closures[name]

    exclusive = _candidates(root, graph, roots, closure)
    earlier_roots = ordered[: ordered.index(root)] if root in ordered else []
    for earlier in earlier_roots:
        if not exclusive:
            break
        if graph.has_node(earlier):
            exclusive -= _candidates(earlier, graph, roots, closure)
    return exclusive


def _candidates(root: str, graph: DependencyGraph, roots: set[str], closure: Closure) -> set[str]:
    other_roots = roots - {root}
    found: set[str] = set()
    for candidate in closure(root):
        # unresolvable names have no node and other roots are required on their own
        if not graph.has_node(candidate) or candidate in other_roots:
            continue
        if _is_exclusive_to(candidate, root, graph, roots, other_roots, closure):
            found.add(candidate)
    return found


def _is_exclusive_to(
    candidate: str,
    root: str,
    graph: DependencyGraph,
    roots: set[str],
    other_roots: set[str],
    closure: Closure,
) -> bool:
    for dependent in graph.dependents_of(candidate):
        if dependent == root:
            continue
        if dependent in roots:
            return False
        dependent_closure = closure(dependent)
        if root in dependent_closure:
            continue
        if not other_roots.isdisjoint(dependent_closure):
            return False
    return True


def summarize(root: str, graph: DependencyGraph, all_roots: Iterable[str]) -> ExclusivityResult:
    node = graph.nodes.get(root)
    if node is None:
        return ExclusivityResult(name=root)

    members = compute_exclusive(root, graph, all_roots)
    exclusive_size = sum(graph.nodes[member].size for member in members)
    return ExclusivityResult(
        name=root,
        direct_size=node.size,
        exclusive_size=exclusive_size,
        exclusive_members=frozenset(members),
    )


def attribute_all(graph: DependencyGraph, roots: Iterable[str]) -> dict[str, ExclusivityResult]:
    ordered = list(dict.fromkeys(roots))
    return {root: summarize(root, graph, ordered) for root in ordered}
