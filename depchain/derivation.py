"""
Explain why a package was selected: find a chain of requirers from the root.

Two independent producers of DerivationChain:

- derivation_chain_from_graph: shortest ancestry in a finished resolution
  graph (BFS over incoming edges).
- derivation_chain_from_state: an ancestry recorded in the live solver state
  (depth-first backtracking over FromDependencyOf incompatibilities on an
  explicit stack, so ancestry depth is not bound by the recursion limit).
  The first path to reach the root wins, so the result is valid but not
  necessarily minimal.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterator, List, Optional, Set, Tuple

from packaging.version import Version

from depchain.graph import ROOT, AnnotatedDist, Dist, ResolutionGraph
from depchain.state import FromDependencyOf, Package, State, range_contains
from depchain.structures import DerivationChain, DerivationStep

logger = logging.getLogger("depchain.derivation")


class MissingDistributionError(RuntimeError):
    """The queried distribution is not an installable node of the graph."""


def _find_target(graph: ResolutionGraph, target: Dist) -> int:
    for index in graph.node_indices():
        node = graph.node(index)
        if not isinstance(node, AnnotatedDist):
            continue
        if not node.dist.is_installable:
            continue
        if node.dist.dist == target:
            return index
    raise MissingDistributionError(
        f"every distribution in the resolution graph should be present, missing {target}"
    )


def derivation_chain_from_graph(graph: ResolutionGraph, target: Dist) -> Optional[DerivationChain]:
    """
    Shortest chain from the root to the requirer of target.

    Returns None if target cannot reach the root. Raises
    MissingDistributionError if target is not in the graph at all.
    """
    start = _find_target(graph, target)

    queue: deque[Tuple[int, List[DerivationStep]]] = deque([(start, [])])
    seen: Set[int] = set()
    while queue:
        index, path = queue.popleft()
        if index in seen:
            continue
        seen.add(index)

        node = graph.node(index)
        if node is ROOT:
            # path runs target -> root; flip it and drop the target itself
            path.reverse()
            path.pop()
            logger.debug("graph chain for %s: %d step(s)", target, len(path))
            return DerivationChain.from_iter(path)

        path.append(DerivationStep(node.name, node.version))
        for dependent in graph.dependents(index):
            queue.append((dependent, list(path)))

    logger.debug("no path from %s to the root after visiting %d node(s)", target, len(seen))
    return None


def derivation_chain_from_state(package: Package, version: Version, state: State) -> Optional[DerivationChain]:
    """
    A chain from the root to the requirer of package==version, as recorded in
    the solver's incompatibilities, or None if none reaches the root.

    Candidate requirers are tried in the order of state.incompatibilities;
    requirers without a decided version are skipped.
    """
    solution = state.partial_solution.extract_solution()

    # (requirer, requirer version) pairs, target-ward first
    path: List[Tuple[Package, Version]] = []
    on_path: Set[Package] = {package}

    def requirers(current: Package, current_version: Version) -> Iterator[Tuple[Package, Version]]:
        """Selected packages recorded as depending on current within a range holding current_version."""
        for incompat_id in state.incompatibilities.get(current, ()):
            kind = state.incompatibility_store[incompat_id].kind
            if not isinstance(kind, FromDependencyOf):
                continue
            if kind.dependency != current or not range_contains(kind.dependency_range, current_version):
                continue
            requirer_version = solution.get(kind.package)
            if requirer_version is not None:
                yield kind.package, requirer_version

    def fill_complete_path() -> bool:
        if state.is_root(package):
            return True

        # One frame per package on the path; the top frame holds the
        # remaining candidate requirers of path[-1] (or of package).
        stack = [requirers(package, version)]
        while stack:
            for requirer, requirer_version in stack[-1]:
                if requirer in on_path:
                    continue
                path.append((requirer, requirer_version))
                on_path.add(requirer)
                if state.is_root(requirer):
                    return True
                stack.append(requirers(requirer, requirer_version))
                break
            else:
                stack.pop()
                if stack:
                    requirer, requirer_version = path.pop()
                    on_path.discard(requirer)
                    logger.debug("backtracking from %s==%s", requirer, requirer_version)
        return False

    if not fill_complete_path():
        logger.debug("no recorded derivation connects %s==%s to the root", package, version)
        return None

    steps = []
    for requirer, requirer_version in reversed(path):
        if state.is_root(requirer) or requirer.name is None:
            continue
        steps.append(DerivationStep(requirer.name, requirer_version))
    return DerivationChain.from_iter(steps)
