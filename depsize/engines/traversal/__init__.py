"""Traversal engine — resolve a package's transitive dependency closure."""

from depsize.engines.traversal.engine import JoinCounter, PackageFetcher, Traversal, traverse
from depsize.engines.traversal.models import DiscoverySet, TraversalResult

__all__ = [
    "DiscoverySet",
    "JoinCounter",
    "PackageFetcher",
    "Traversal",
    "TraversalResult",
    "traverse",
]
