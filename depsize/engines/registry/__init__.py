"""Registry client engine — fetch and parse npm package documents."""

from depsize.engines.registry.client import RegistryClient
from depsize.engines.registry.models import (
    PackageDocument,
    PackageRecord,
    VersionManifest,
    parse_package_document,
)

__all__ = [
    "PackageDocument",
    "PackageRecord",
    "RegistryClient",
    "VersionManifest",
    "parse_package_document",
]
