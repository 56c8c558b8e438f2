"""
Toolchain version management.

Each supported toolchain registers a VersionOperator subclass here.
"""

from typing import Dict, Type

from .catalog import ArtifactDescriptor, CatalogEntry, CatalogFetcher
from .operator import VersionOperator
from .store import InstalledVersion, VersionStore
from .go import GoCatalog, GoOperator

TOOLCHAINS: Dict[str, Type[VersionOperator]] = {
    GoOperator.tag: GoOperator,
}

__all__ = [
    "ArtifactDescriptor",
    "CatalogEntry",
    "CatalogFetcher",
    "VersionOperator",
    "InstalledVersion",
    "VersionStore",
    "GoCatalog",
    "GoOperator",
    "TOOLCHAINS",
]
