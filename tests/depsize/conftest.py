"""Shared fixtures for depsize tests (no network required)."""

import pytest


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


def package_document(
    name: str = "leftpad",
    latest: str = "1.0.0",
    size: int | None = 1024,
    dependencies: dict | None = None,
) -> dict:
    """Build a minimal registry document for *name*."""
    dist = {} if size is None else {"unpackedSize": size}
    return {
        "name": name,
        "dist-tags": {"latest": latest},
        "versions": {
            latest: {
                "dependencies": dependencies or {},
                "dist": dist,
            },
        },
    }


@pytest.fixture
def make_document():
    return package_document
