"""
Load a package index from JSON into memory.

File layout:
  {"packages": {"<name>": {"<version>": ["<PEP 508 requirement>", ...]}}}

Names are canonicalized, versions and requirements parsed once at load time.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from packaging.requirements import InvalidRequirement
from packaging.requirements import Requirement as PEP508Requirement
from packaging.utils import NormalizedName, canonicalize_name
from packaging.version import InvalidVersion, Version

logger = logging.getLogger("depchain.loader")


class IndexLoadError(RuntimeError):
    """The index file is unreadable or malformed."""


@dataclass
class PackageIndex:
    """
    In-memory index: name -> version -> direct requirements.
    """

    packages: Dict[NormalizedName, Dict[Version, List[PEP508Requirement]]] = field(default_factory=dict)

    def add(self, name: str, version: Union[str, Version], requires: Iterable[str] = ()) -> None:
        versions = self.packages.setdefault(canonicalize_name(name), {})
        versions[Version(str(version))] = [PEP508Requirement(r) for r in requires]

    def versions(self, name: str) -> List[Version]:
        """All known versions of name, newest first."""
        return sorted(self.packages.get(canonicalize_name(name), {}), reverse=True)

    def get_requirements(self, name: str, version: Version) -> List[PEP508Requirement]:
        return self.packages.get(canonicalize_name(name), {}).get(version, [])

    def __contains__(self, name: str) -> bool:
        return canonicalize_name(name) in self.packages

    def __len__(self) -> int:
        return len(self.packages)


def index_from_dict(doc: Dict[str, Any]) -> PackageIndex:
    packages = doc.get("packages") if isinstance(doc, dict) else None
    if not isinstance(packages, dict):
        raise IndexLoadError("Bad index: missing 'packages' mapping.")

    index = PackageIndex()
    for name, versions in packages.items():
        if not isinstance(versions, dict):
            raise IndexLoadError(f"Bad index entry for {name!r}: expected version mapping.")
        for version, requires in versions.items():
            requires = requires or []
            if not isinstance(requires, list) or not all(isinstance(r, str) for r in requires):
                raise IndexLoadError(
                    f"Bad requirements for {name}=={version}: expected a list of strings, got {requires!r}"
                )
            try:
                index.add(name, version, requires)
            except InvalidVersion as e:
                raise IndexLoadError(f"Bad version for {name!r}: {version!r}") from e
            except InvalidRequirement as e:
                raise IndexLoadError(f"Bad requirement for {name}=={version}: {e}") from e
    return index


def load_index(path: Union[str, Path]) -> PackageIndex:
    """Read and parse an index file."""
    try:
        with open(path, encoding="utf-8") as f:
            doc = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise IndexLoadError(f"Cannot read index {str(path)!r}: {e}") from e

    index = index_from_dict(doc)
    logger.debug("loaded %d package(s) from %s", len(index), path)
    return index
