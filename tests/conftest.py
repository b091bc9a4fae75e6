"""Shared test fixtures for specvault tests."""

from collections.abc import Callable
from typing import Any

import pytest
from rich.console import Console

from specvault.audit import MemoryAuditSink
from specvault.cache import CacheLayer
from specvault.documents import Document, SchemaVersion
from specvault.storage import MemoryStorage
from specvault.vault import SpecVault


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def cache() -> CacheLayer:
    return CacheLayer()


@pytest.fixture
def audit() -> MemoryAuditSink:
    return MemoryAuditSink()


@pytest.fixture
def vault(storage: MemoryStorage, audit: MemoryAuditSink) -> SpecVault:
    """Vault over in-memory storage, without default folders."""
    return SpecVault(storage, audit=audit)


@pytest.fixture
async def seeded_vault(vault: SpecVault) -> SpecVault:
    """Vault with the ``active`` and ``recycled`` folders created."""
    _ = await vault.folders.ensure_default_folders()
    return vault


def _petstore_content(version: str) -> dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Petstore", "version": version},
        "x-owner": "pets-team",
        "paths": {
            "/pets": {
                "get": {
                    "summary": "List pets",
                    "parameters": [{"name": "limit", "in": "query"}],
                    "responses": {"200": {"description": "ok"}},
                },
                "post": {
                    "summary": "Create a pet",
                    "requestBody": {"content": {"application/json": {}}},
                    "responses": {"201": {"description": "created"}},
                },
            },
            "/pets/{id}": {
                "get": {
                    "summary": "Get a pet",
                    "responses": {
                        "200": {"description": "ok"},
                        "404": {"description": "missing"},
                    },
                },
            },
        },
        "components": {
            "schemas": {
                "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
                "Error": {"type": "object"},
            }
        },
    }


@pytest.fixture
def make_petstore() -> Callable[[str], Document]:
    """Return a factory for a small petstore document with the given info.version."""

    def _make(version: str = "1.0.0") -> Document:
        return Document(
            content=_petstore_content(version), schema_version=SchemaVersion.OPENAPI_3_0
        )

    return _make


@pytest.fixture
def petstore(make_petstore: Callable[[str], Document]) -> Document:
    return make_petstore("1.0.0")


@pytest.fixture
def console() -> Console:
    return Console(
        width=100,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )
