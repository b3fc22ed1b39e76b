"""
Read-side model of a PubGrub-style solver state.

The solver records every fact it learns as an incompatibility. The kind that
matters for provenance is FromDependencyOf: "package at range depends on
dependency only within dependency_range". Incompatibilities are stored once
in incompatibility_store (id = index) and indexed per package in
incompatibilities, in insertion order.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from packaging.specifiers import SpecifierSet
from packaging.utils import NormalizedName, canonicalize_name
from packaging.version import Version


class PackageKind(enum.Enum):
    ROOT = "root"
    PYTHON = "python"  # virtual: the interpreter requirement
    PACKAGE = "package"
    EXTRA = "extra"


@dataclass(frozen=True)
class Package:
    """A solver package. Root and virtual packages carry no name."""

    kind: PackageKind
    package_name: Optional[NormalizedName] = None
    extra: Optional[str] = None

    @classmethod
    def root(cls) -> "Package":
        return cls(PackageKind.ROOT)

    @classmethod
    def python(cls) -> "Package":
        return cls(PackageKind.PYTHON)

    @classmethod
    def of(cls, name: str, extra: Optional[str] = None) -> "Package":
        if extra is None:
            return cls(PackageKind.PACKAGE, canonicalize_name(name))
        return cls(PackageKind.EXTRA, canonicalize_name(name), canonicalize_name(extra))

    @property
    def name(self) -> Optional[NormalizedName]:
        if self.kind in (PackageKind.ROOT, PackageKind.PYTHON):
            return None
        return self.package_name

    def is_root(self) -> bool:
        return self.kind is PackageKind.ROOT

    def __str__(self) -> str:
        if self.kind is PackageKind.ROOT:
            return "root"
        if self.kind is PackageKind.PYTHON:
            return "python"
        if self.extra is not None:
            return f"{self.package_name}[{self.extra}]"
        return str(self.package_name)


def range_contains(versions: SpecifierSet, version: Version) -> bool:
    return versions.contains(version, prereleases=True)


# Incompatibility kinds


@dataclass(frozen=True)
class NotRoot:
    package: Package
    version: Version


@dataclass(frozen=True)
class NoVersions:
    package: Package
    range: SpecifierSet


@dataclass(frozen=True)
class FromDependencyOf:
    """package within range depends on dependency only within dependency_range."""

    package: Package
    range: SpecifierSet
    dependency: Package
    dependency_range: SpecifierSet


@dataclass(frozen=True)
class DerivedFrom:
    cause1: int
    cause2: int


Kind = Union[NotRoot, NoVersions, FromDependencyOf, DerivedFrom]


@dataclass(frozen=True)
class Incompatibility:
    kind: Kind
    # Only consulted for derived incompatibilities.
    terms: Tuple[Package, ...] = ()

    def packages(self) -> Tuple[Package, ...]:
        kind = self.kind
        if isinstance(kind, FromDependencyOf):
            return (kind.package, kind.dependency)
        if isinstance(kind, (NotRoot, NoVersions)):
            return (kind.package,)
        return self.terms


@dataclass
class PartialSolution:
    """Decisions made so far plus the ranges derived for undecided packages."""

    decisions: Dict[Package, Version] = field(default_factory=dict)
    derivations: Dict[Package, SpecifierSet] = field(default_factory=dict)

    def decide(self, package: Package, version: Version) -> None:
        self.decisions[package] = version
        self.derivations.pop(package, None)

    def derive(self, package: Package, versions: SpecifierSet) -> None:
        if package in self.decisions:
            raise RuntimeError(f"{package} is already decided")
        prior = self.derivations.get(package)
        self.derivations[package] = versions if prior is None else prior & versions

    def extract_solution(self) -> Dict[Package, Version]:
        """Snapshot of decided packages; undecided packages are absent."""
        return dict(self.decisions)


@dataclass
class State:
    """Solver state; the root is decided at root_version on creation."""

    root_package: Package = field(default_factory=Package.root)
    root_version: Version = field(default_factory=lambda: Version("0"))
    incompatibility_store: List[Incompatibility] = field(default_factory=list)
    incompatibilities: Dict[Package, List[int]] = field(default_factory=dict)
    partial_solution: PartialSolution = field(default_factory=PartialSolution)

    def __post_init__(self) -> None:
        self.partial_solution.decide(self.root_package, self.root_version)

    def is_root(self, package: Package) -> bool:
        return package == self.root_package

    def add_incompatibility(self, incompat: Incompatibility) -> int:
        incompat_id = len(self.incompatibility_store)
        self.incompatibility_store.append(incompat)
        for package in incompat.packages():
            ids = self.incompatibilities.setdefault(package, [])
            if incompat_id not in ids:
                ids.append(incompat_id)
        return incompat_id

    def add_dependency(
        self,
        package: Package,
        version: Optional[Version],
        dependency: Package,
        dependency_range: SpecifierSet,
    ) -> int:
        """Record that package==version depends on dependency within dependency_range."""
        versions = SpecifierSet() if version is None else SpecifierSet(f"=={version}")
        return self.add_incompatibility(
            Incompatibility(FromDependencyOf(package, versions, dependency, dependency_range))
        )
