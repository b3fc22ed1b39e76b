"""
Human-readable explanations built from derivation chains.
"""

from __future__ import annotations

from typing import Iterator, Optional, Tuple

from packaging.version import Version

from depchain.derivation import derivation_chain_from_graph
from depchain.graph import AnnotatedDist, ResolutionGraph
from depchain.structures import DerivationChain


def format_derivation_chain(name: str, version: Version, chain: DerivationChain) -> str:
    """
    "`c==3.0` was included because `a==1.0` depends on `b==2.0` which depends on `c`"
    """
    head = f"`{name}=={version}` was included because"
    if chain.is_empty():
        return f"{head} it is a direct requirement"

    items = [str(step) for step in chain] + [name]
    parts = [f"`{items[0]}`"]
    for idx, item in enumerate(items[1:]):
        verb = "depends on" if idx == 0 else "which depends on"
        parts.append(f"{verb} `{item}`")
    return f"{head} {' '.join(parts)}"


def explain_resolution(graph: ResolutionGraph) -> Iterator[Tuple[AnnotatedDist, Optional[DerivationChain]]]:
    """Chain for every installable distribution in the graph, in node order."""
    for dist in graph.dists():
        if not dist.dist.is_installable:
            continue
        yield dist, derivation_chain_from_graph(graph, dist.dist.dist)
