"""Tests for the resolution-graph chain finder (shortest ancestry by BFS)"""

import pytest
from packaging.version import Version

from conftest import add, make_dist
from depchain.derivation import MissingDistributionError, derivation_chain_from_graph
from depchain.graph import ROOT_INDEX, ResolutionGraph
from depchain.structures import DerivationChain, DerivationStep


def names(chain: DerivationChain) -> list[str]:
    return [str(s) for s in chain]


class TestLinearGraph:
    """Root -> a==1.0 -> b==2.0 -> c==3.0"""

    def test_deepest_package(self, linear_graph):
        chain = derivation_chain_from_graph(linear_graph, make_dist("c", "3.0"))
        assert chain == DerivationChain.from_iter(
            [DerivationStep("a", Version("1.0")), DerivationStep("b", Version("2.0"))]
        )

    def test_middle_package(self, linear_graph):
        chain = derivation_chain_from_graph(linear_graph, make_dist("b", "2.0"))
        assert names(chain) == ["a==1.0"]

    def test_direct_requirement_gives_empty_chain(self, linear_graph):
        chain = derivation_chain_from_graph(linear_graph, make_dist("a", "1.0"))
        assert chain is not None
        assert chain.is_empty()

    def test_classmethod_alias(self, linear_graph):
        chain = DerivationChain.from_graph(linear_graph, make_dist("c", "3.0"))
        assert str(chain) == "a==1.0 -> b==2.0"


class TestShortestPath:
    def test_prefers_fewer_hops(self):
        """Root -> a -> b -> d and Root -> c -> d: d is explained through c"""
        graph = ResolutionGraph()
        a = add(graph, "a", "1.0")
        b = add(graph, "b", "1.0")
        c = add(graph, "c", "1.0")
        d = add(graph, "d", "1.0")
        graph.add_edge(ROOT_INDEX, a)
        graph.add_edge(a, b)
        graph.add_edge(b, d)
        graph.add_edge(ROOT_INDEX, c)
        graph.add_edge(c, d)

        chain = derivation_chain_from_graph(graph, make_dist("d", "1.0"))
        assert names(chain) == ["c==1.0"]

    def test_length_is_path_length_minus_two(self):
        """A chain of n packages below root explains the last with n - 1 steps"""
        graph = ResolutionGraph()
        previous = ROOT_INDEX
        for i in range(6):
            node = add(graph, f"p{i}", "1.0")
            graph.add_edge(previous, node)
            previous = node

        chain = derivation_chain_from_graph(graph, make_dist("p5", "1.0"))
        # root, p0..p5 = 7 nodes on the path
        assert len(chain) == 7 - 2
        assert names(chain) == [f"p{i}==1.0" for i in range(5)]

    def test_equal_length_paths_return_a_valid_chain(self):
        graph = ResolutionGraph()
        a = add(graph, "a", "1.0")
        b = add(graph, "b", "1.0")
        c = add(graph, "c", "1.0")
        graph.add_edge(ROOT_INDEX, a)
        graph.add_edge(ROOT_INDEX, b)
        graph.add_edge(a, c)
        graph.add_edge(b, c)

        chain = derivation_chain_from_graph(graph, make_dist("c", "1.0"))
        assert len(chain) == 1
        assert names(chain)[0] in ("a==1.0", "b==1.0")


class TestTermination:
    def test_cycle_reachable_from_root(self):
        """Root -> a <-> b"""
        graph = ResolutionGraph()
        a = add(graph, "a", "1.0")
        b = add(graph, "b", "1.0")
        graph.add_edge(ROOT_INDEX, a)
        graph.add_edge(a, b)
        graph.add_edge(b, a)

        chain = derivation_chain_from_graph(graph, make_dist("b", "1.0"))
        assert names(chain) == ["a==1.0"]

    def test_disconnected_cycle_returns_none(self):
        """x <-> y with no route to root: not an empty chain"""
        graph = ResolutionGraph()
        add(graph, "a", "1.0")
        x = add(graph, "x", "1.0")
        y = add(graph, "y", "1.0")
        graph.add_edge(x, y)
        graph.add_edge(y, x)

        assert derivation_chain_from_graph(graph, make_dist("x", "1.0")) is None

    def test_duplicate_payloads_are_distinct_nodes(self):
        graph = ResolutionGraph()
        first = add(graph, "a", "1.0")
        second = add(graph, "a", "1.0")
        c = add(graph, "c", "1.0")
        assert first != second
        graph.add_edge(ROOT_INDEX, first)
        graph.add_edge(first, second)
        graph.add_edge(second, c)

        chain = derivation_chain_from_graph(graph, make_dist("c", "1.0"))
        assert names(chain) == ["a==1.0", "a==1.0"]


class TestMissingTarget:
    def test_unknown_distribution_is_an_invariant_failure(self, linear_graph):
        with pytest.raises(MissingDistributionError, match="should be present"):
            derivation_chain_from_graph(linear_graph, make_dist("zzz", "1.0"))

    def test_wrong_version_is_an_invariant_failure(self, linear_graph):
        with pytest.raises(RuntimeError):
            derivation_chain_from_graph(linear_graph, make_dist("c", "9.9"))

    def test_installed_distribution_is_not_a_target(self):
        graph = ResolutionGraph()
        a = add(graph, "a", "1.0", installed=True)
        graph.add_edge(ROOT_INDEX, a)
        with pytest.raises(MissingDistributionError):
            derivation_chain_from_graph(graph, make_dist("a", "1.0"))

    def test_location_is_part_of_identity(self, linear_graph):
        with pytest.raises(MissingDistributionError):
            derivation_chain_from_graph(linear_graph, make_dist("c", "3.0", "c-3.0.tar.gz"))
