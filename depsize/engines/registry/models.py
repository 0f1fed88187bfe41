"""Registry document schemas and the parsed package record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from depsize.exceptions import PackageNotFoundError, RegistryError

NOT_FOUND_MARKER = "Not found"


class DistInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    unpacked_size: int = Field(default=0, alias="unpackedSize")

    @field_validator("unpacked_size", mode="before")
    @classmethod
    def _none_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class VersionManifest(BaseModel):
    """The subset of a single version's manifest that sizing needs."""

    model_config = ConfigDict(extra="ignore")

    dependencies: dict[str, Any] = Field(default_factory=dict)
    dist: DistInfo = Field(default_factory=DistInfo)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _normalize_dependencies(cls, v: Any) -> Any:
        # Very old manifests carry a list of names, or null.
        if v is None:
            return {}
        if isinstance(v, list):
            return {str(name): "*" for name in v}
        return v

    @field_validator("dist", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class DistTags(BaseModel):
    model_config = ConfigDict(extra="ignore")

    latest: str | None = None


class PackageDocument(BaseModel):
    """Top-level registry document.

    ``versions`` is left unvalidated; only the latest manifest is parsed, so a
    malformed historical release never breaks the lookup.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    dist_tags: DistTags = Field(default_factory=DistTags, alias="dist-tags")
    versions: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None

    @field_validator("dist_tags", "versions", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


@dataclass(frozen=True)
class PackageRecord:
    """Latest-version facts about one package, produced per fetch."""

    name: str
    version: str | None
    size: int
    dependencies: frozenset[str] = field(default_factory=frozenset)
    registry_name: str | None = None


def parse_package_document(name: str, payload: Any) -> PackageRecord:
    """Turn a decoded registry response into a :class:`PackageRecord`.

    Raises :class:`PackageNotFoundError` when the body carries the not-found
    marker and :class:`RegistryError` when the document has the wrong shape.
    A latest tag that is missing or points at an unknown version yields a
    zero-size record with no dependencies.
    """
    if not isinstance(payload, dict):
        raise RegistryError(name, f"expected a JSON object, got {type(payload).__name__}")

    try:
        document = PackageDocument.model_validate(payload)
    except ValidationError as exc:
        raise RegistryError(name, f"invalid package document: {exc.error_count()} error(s)") from exc

    if document.error == NOT_FOUND_MARKER:
        raise PackageNotFoundError(name)

    latest = document.dist_tags.latest
    raw_manifest = document.versions.get(latest) if latest else None
    if not isinstance(raw_manifest, dict):
        return PackageRecord(
            name=name,
            version=latest,
            size=0,
            registry_name=document.name,
        )

    try:
        manifest = VersionManifest.model_validate(raw_manifest)
    except ValidationError as exc:
        raise RegistryError(
            name, f"invalid manifest for version {latest}: {exc.error_count()} error(s)"
        ) from exc

    return PackageRecord(
        name=name,
        version=latest,
        size=manifest.dist.unpacked_size,
        dependencies=frozenset(manifest.dependencies),
        registry_name=document.name,
    )
