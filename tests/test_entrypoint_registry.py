from __future__ import annotations

import pytest

from wiki_intel.entrypoints.knowledge import SearchEntrypoint
from wiki_intel.entrypoints.registry import (
    ALL_ENTRYPOINT_CLASSES,
    EntrypointRegistry,
    bootstrap_entrypoint_registry,
    entrypoint_registry,
    normalize_entrypoint_key,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("search", "search"),
        ("Analytics_CSV", "analytics-csv"),
        ("  analytics transactions ", "analytics-transactions"),
    ],
)
def test_normalize_entrypoint_key(raw: str, expected: str) -> None:
    assert normalize_entrypoint_key(raw) == expected


def test_registry_rejects_duplicates() -> None:
    registry = EntrypointRegistry()
    registry.register(SearchEntrypoint())

    with pytest.raises(ValueError):
        registry.register(SearchEntrypoint())

    assert "SEARCH" in registry
    assert len(registry) == 1


def test_registry_unregister_and_clear() -> None:
    registry = EntrypointRegistry()
    registry.register(SearchEntrypoint())

    registry.unregister("search")
    assert registry.get("search") is None

    registry.register(SearchEntrypoint())
    registry.clear()
    assert registry.list() == []


def test_bootstrap_registers_every_entrypoint() -> None:
    bootstrap_entrypoint_registry()

    assert entrypoint_registry.list() == [cls.key for cls in ALL_ENTRYPOINT_CLASSES]
    assert entrypoint_registry.list() == [
        "overview",
        "search",
        "summary",
        "details",
        "related",
        "batch",
        "analytics",
        "analytics-transactions",
        "analytics-csv",
    ]
