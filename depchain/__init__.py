"""
depchain: explain why a package version was selected during resolution.

Derivation chains can be computed from a finished resolution graph (shortest
path) or from the live solver state (first recorded derivation to reach the
root), and rendered for diagnostics.
"""

from depchain.derivation import (
    MissingDistributionError,
    derivation_chain_from_graph,
    derivation_chain_from_state,
)
from depchain.entrypoint import ExplainRunner, explain_one
from depchain.loader import PackageIndex, load_index
from depchain.structures import DerivationChain, DerivationStep

__all__ = [
    "DerivationChain",
    "DerivationStep",
    "ExplainRunner",
    "MissingDistributionError",
    "PackageIndex",
    "derivation_chain_from_graph",
    "derivation_chain_from_state",
    "explain_one",
    "load_index",
]
