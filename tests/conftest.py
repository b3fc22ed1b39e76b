from __future__ import annotations

import pytest
from packaging.version import Version

from depchain.graph import ROOT_INDEX, AnnotatedDist, Dist, ResolutionGraph


def make_dist(name: str, version: str, location: str | None = None) -> Dist:
    """Helper to create a Dist for testing."""
    return Dist(name, Version(version), location)


def add(graph: ResolutionGraph, name: str, version: str, installed: bool = False) -> int:
    """Add a distribution node and return its handle."""
    return graph.add_dist(AnnotatedDist.of(make_dist(name, version), installed=installed))


@pytest.fixture
def linear_graph():
    """Root -> a==1.0 -> b==2.0 -> c==3.0"""
    graph = ResolutionGraph()
    a = add(graph, "a", "1.0")
    b = add(graph, "b", "2.0")
    c = add(graph, "c", "3.0")
    graph.add_edge(ROOT_INDEX, a)
    graph.add_edge(a, b)
    graph.add_edge(b, c)
    return graph
