"""
Value types shared across depchain.

DerivationStep / DerivationChain are the provenance result types; they are
produced by the finders in depchain.derivation and never mutated afterwards.
Candidate / Requirement are the resolver's (package, version) and
dependency types used by the resolvelib provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from packaging.requirements import Requirement as PEP508Requirement
from packaging.utils import NormalizedName, canonicalize_name
from packaging.version import Version


@dataclass(frozen=True)
class DerivationStep:
    """A (name, version) pair in a derivation chain."""

    name: NormalizedName
    version: Version

    def __str__(self) -> str:
        return f"{self.name}=={self.version}"


@dataclass(frozen=True)
class DerivationChain:
    """
    Steps from the root package to the requirer of a package, root-ward first.

    Neither the root nor the package being explained is included, so an empty
    chain means the package is a direct requirement of the root.
    """

    steps: Tuple[DerivationStep, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.steps, tuple):
            object.__setattr__(self, "steps", tuple(self.steps))

    @classmethod
    def from_iter(cls, steps: Iterable[DerivationStep]) -> "DerivationChain":
        return cls(tuple(steps))

    @classmethod
    def from_graph(cls, graph, target) -> Optional["DerivationChain"]:
        from depchain.derivation import derivation_chain_from_graph

        return derivation_chain_from_graph(graph, target)

    @classmethod
    def from_state(cls, package, version, state) -> Optional["DerivationChain"]:
        from depchain.derivation import derivation_chain_from_state

        return derivation_chain_from_state(package, version, state)

    def __len__(self) -> int:
        return len(self.steps)

    def is_empty(self) -> bool:
        return not self.steps

    def iter(self) -> Iterator[DerivationStep]:
        return iter(self.steps)

    def __iter__(self) -> Iterator[DerivationStep]:
        return iter(self.steps)

    def into_iter(self) -> Iterator[DerivationStep]:
        """Yield the steps as standalone values, safe to keep after the chain."""
        for step in self.steps:
            yield DerivationStep(step.name, step.version)

    def __str__(self) -> str:
        return " -> ".join(str(step) for step in self.steps)


@dataclass(frozen=True)
class Candidate:
    """A specific (package, version) offered to the resolver."""

    name: NormalizedName
    version: Version

    def __str__(self) -> str:
        return f"{self.name}=={self.version}"


@dataclass(frozen=True)
class Requirement:
    """A dependency on a package, requested by parent (Candidate or None)."""

    requirement: PEP508Requirement
    parent: Optional[Candidate]  # None = root requirement

    @property
    def name(self) -> NormalizedName:
        return canonicalize_name(self.requirement.name)

    def __hash__(self) -> int:
        return hash((self.name, str(self.requirement.specifier), self.parent))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Requirement):
            return False
        return (
            self.name == other.name
            and self.requirement.specifier == other.requirement.specifier
            and self.parent == other.parent
        )

    def __str__(self) -> str:
        return str(self.requirement)
