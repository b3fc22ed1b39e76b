"""
Resolution graph: the finished dependency graph produced after solving.

Nodes live in a table indexed by integer handle (handle 0 is the root); the
edges are kept in a resolvelib DirectedGraph over those handles, running
from a dependent to each of its dependencies. Handles give node identity, so
the same (name, version) may appear on two nodes and they stay distinct.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from packaging.utils import NormalizedName, canonicalize_name
from packaging.version import Version
from resolvelib.structs import DirectedGraph

ROOT_INDEX = 0


class _Root:
    __slots__ = ()

    def __repr__(self) -> str:
        return "ROOT"


ROOT = _Root()


@dataclass(frozen=True)
class Dist:
    """A concrete distribution: name, version and where it was resolved from."""

    name: NormalizedName
    version: Version
    location: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}=={self.version}"


@dataclass(frozen=True)
class ResolvedDist:
    dist: Dist
    installed: bool = False  # already present in the environment

    @property
    def is_installable(self) -> bool:
        return not self.installed


@dataclass(frozen=True)
class AnnotatedDist:
    dist: ResolvedDist
    name: NormalizedName
    version: Version
    extra: Optional[str] = None

    @classmethod
    def of(cls, dist: Dist, installed: bool = False, extra: Optional[str] = None) -> "AnnotatedDist":
        return cls(ResolvedDist(dist, installed), dist.name, dist.version, extra)


GraphNode = Union[_Root, AnnotatedDist]


class ResolutionGraph:
    def __init__(self) -> None:
        self._nodes: List[GraphNode] = [ROOT]
        self._edges = DirectedGraph()
        self._edges.add(ROOT_INDEX)

    def __len__(self) -> int:
        return len(self._nodes)

    def add_dist(self, annotated: AnnotatedDist) -> int:
        index = len(self._nodes)
        self._nodes.append(annotated)
        self._edges.add(index)
        return index

    def add_edge(self, dependent: int, dependency: int) -> None:
        self._edges.connect(dependent, dependency)

    def node(self, index: int) -> GraphNode:
        return self._nodes[index]

    def node_indices(self) -> Iterator[int]:
        return iter(range(len(self._nodes)))

    def dependents(self, index: int) -> Iterator[int]:
        """Nodes with an edge into index, i.e. the packages that depend on it."""
        return iter(sorted(self._edges.iter_parents(index)))

    def dependencies(self, index: int) -> Iterator[int]:
        return iter(sorted(self._edges.iter_children(index)))

    def dists(self) -> Iterator[AnnotatedDist]:
        for node in self._nodes:
            if isinstance(node, AnnotatedDist):
                yield node

    @classmethod
    def from_result(cls, result: Any, locations: Optional[Dict[NormalizedName, str]] = None) -> "ResolutionGraph":
        """
        Build from a resolvelib Result.

        result.mapping is identifier -> Candidate; result.graph is a
        DirectedGraph over identifiers where the None vertex is the root.
        """
        locations = locations or {}
        graph = cls()
        index_of: Dict[Any, int] = {None: ROOT_INDEX}
        for identifier in sorted(result.mapping):
            cand = result.mapping[identifier]
            name = canonicalize_name(cand.name)
            dist = Dist(name, cand.version, locations.get(name))
            index_of[identifier] = graph.add_dist(AnnotatedDist.of(dist))

        for parent, child in sorted(result.graph.iter_edges(), key=_edge_key):
            if parent not in index_of or child not in index_of:
                continue
            graph.add_edge(index_of[parent], index_of[child])
        return graph


def _edge_key(edge: Iterable[Any]):
    return tuple("" if key is None else str(key) for key in edge)
