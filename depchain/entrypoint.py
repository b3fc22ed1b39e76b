"""
Entrypoint: initialize once (with a package index), then resolve(requirements)
and explain(graph, name) for any resolved package.
Uses resolvelib's Resolver; explanations come from the resolution graph.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from packaging.utils import canonicalize_name
from resolvelib import BaseReporter, Resolver

from depchain.derivation import derivation_chain_from_graph
from depchain.graph import AnnotatedDist, ResolutionGraph
from depchain.loader import PackageIndex
from depchain.provider import IndexProvider, root_requirements
from depchain.structures import DerivationChain

logger = logging.getLogger("depchain.entrypoint")


def find_dist(graph: ResolutionGraph, name: str) -> Optional[AnnotatedDist]:
    """The installable distribution for name in the graph, if any."""
    name = canonicalize_name(name)
    for dist in graph.dists():
        if dist.name == name and dist.dist.is_installable:
            return dist
    return None


class ExplainRunner:
    """
    Holds a PackageIndex. Call resolve() with top-level requirement strings to
    get a ResolutionGraph, then explain() to ask why a package is in it.
    """

    def __init__(self, index: PackageIndex):
        self._index = index

    def resolve(self, requirements: Iterable[str], max_rounds: int = 100) -> ResolutionGraph:
        """
        Resolve requirements against the index.

        :raises resolvelib.ResolutionImpossible: no consistent set of versions.
        :raises resolvelib.ResolutionTooDeep: max_rounds exhausted.
        """
        provider = IndexProvider(self._index)
        resolver = Resolver(provider, BaseReporter())
        result = resolver.resolve(root_requirements(requirements), max_rounds=max_rounds)
        graph = ResolutionGraph.from_result(result)
        logger.debug("resolved %d distribution(s)", len(graph) - 1)
        return graph

    def explain(self, graph: ResolutionGraph, name: str) -> Optional[DerivationChain]:
        """Chain for the resolved version of name; None if name was not resolved."""
        dist = find_dist(graph, name)
        if dist is None:
            return None
        return derivation_chain_from_graph(graph, dist.dist.dist)


def explain_one(
    index: PackageIndex,
    requirements: Iterable[str],
    name: str,
) -> Optional[DerivationChain]:
    """
    One-shot resolve and explain.
    """
    runner = ExplainRunner(index)
    return runner.explain(runner.resolve(requirements), name)
