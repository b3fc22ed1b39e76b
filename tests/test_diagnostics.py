"""Tests for chain explanations"""

from packaging.version import Version

from conftest import add
from depchain.diagnostics import explain_resolution, format_derivation_chain
from depchain.graph import ROOT_INDEX, ResolutionGraph
from depchain.structures import DerivationChain, DerivationStep


def chain_of(*pins: str) -> DerivationChain:
    steps = []
    for pin in pins:
        name, version = pin.split("==")
        steps.append(DerivationStep(name, Version(version)))
    return DerivationChain.from_iter(steps)


class TestFormatDerivationChain:
    def test_direct_requirement(self):
        message = format_derivation_chain("a", Version("1.0"), DerivationChain())
        assert message == "`a==1.0` was included because it is a direct requirement"

    def test_single_requirer(self):
        message = format_derivation_chain("b", Version("2.0"), chain_of("a==1.0"))
        assert message == "`b==2.0` was included because `a==1.0` depends on `b`"

    def test_multiple_requirers(self):
        message = format_derivation_chain("c", Version("3.0"), chain_of("a==1.0", "b==2.0"))
        assert message == (
            "`c==3.0` was included because `a==1.0` depends on `b==2.0` which depends on `c`"
        )


class TestExplainResolution:
    def test_every_installable_distribution_is_explained(self, linear_graph):
        results = {dist.name: str(chain) for dist, chain in explain_resolution(linear_graph)}
        assert results == {"a": "", "b": "a==1.0", "c": "a==1.0 -> b==2.0"}

    def test_installed_distributions_are_skipped(self):
        graph = ResolutionGraph()
        a = add(graph, "a", "1.0")
        b = add(graph, "b", "1.0", installed=True)
        graph.add_edge(ROOT_INDEX, a)
        graph.add_edge(a, b)

        explained = [dist.name for dist, _ in explain_resolution(graph)]
        assert explained == ["a"]

    def test_unreachable_distribution_yields_none(self):
        graph = ResolutionGraph()
        a = add(graph, "a", "1.0")
        add(graph, "orphan", "1.0")
        graph.add_edge(ROOT_INDEX, a)

        results = dict((dist.name, chain) for dist, chain in explain_resolution(graph))
        assert results["a"] == DerivationChain()
        assert results["orphan"] is None
