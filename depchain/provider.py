"""
Index-backed provider implementing resolvelib's AbstractProvider.
All candidate discovery and specifier filtering happen here.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Mapping, Sequence, Set

from packaging.requirements import Requirement as PEP508Requirement
from packaging.utils import NormalizedName, canonicalize_name
from packaging.version import Version
from resolvelib import AbstractProvider

from depchain.loader import PackageIndex
from depchain.structures import Candidate, Requirement


class IndexProvider(AbstractProvider):
    """
    Provider over an in-memory PackageIndex. Identifier = canonical name.
    Candidates are offered newest-first.
    """

    def __init__(self, index: PackageIndex):
        self._index = index

    def identify(self, requirement_or_candidate: Requirement | Candidate) -> NormalizedName:
        return canonicalize_name(requirement_or_candidate.name)

    def get_preference(
        self,
        identifier: NormalizedName,
        resolutions: Mapping[NormalizedName, Candidate],
        candidates: Mapping[NormalizedName, Iterator[Candidate]],
        information: Mapping[NormalizedName, Iterable],
        backtrack_causes: Sequence,
    ):
        """Prefer fewer remaining candidates, then name (deterministic)."""
        return (sum(1 for _ in candidates[identifier]), identifier)

    def find_matches(
        self,
        identifier: NormalizedName,
        requirements: Mapping[NormalizedName, Iterator[Requirement]],
        incompatibilities: Mapping[NormalizedName, Iterator[Candidate]],
    ) -> List[Candidate]:
        reqs = list(requirements.get(identifier, ()))
        bad_versions: Set[Version] = {c.version for c in incompatibilities.get(identifier, ())}

        matches: List[Candidate] = []
        for version in self._index.versions(identifier):
            if version in bad_versions:
                continue
            if all(r.requirement.specifier.contains(version, prereleases=True) for r in reqs):
                matches.append(Candidate(name=identifier, version=version))
        return matches

    def is_satisfied_by(self, requirement: Requirement, candidate: Candidate) -> bool:
        if candidate.name != requirement.name:
            return False
        return requirement.requirement.specifier.contains(candidate.version, prereleases=True)

    def get_dependencies(self, candidate: Candidate) -> List[Requirement]:
        deps: List[Requirement] = []
        for req in self._index.get_requirements(candidate.name, candidate.version):
            if req.marker is not None and not req.marker.evaluate({"extra": ""}):
                continue
            deps.append(Requirement(requirement=req, parent=candidate))
        return deps


def root_requirements(specs: Iterable[str]) -> List[Requirement]:
    """Parse top-level requirement strings into root Requirements."""
    return [Requirement(requirement=PEP508Requirement(s), parent=None) for s in specs]
