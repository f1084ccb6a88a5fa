from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, Iterator, Tuple

from ..core.exceptions import EntrypointNotFoundError
from .analytics import ANALYTICS_ENTRYPOINT_CLASSES
from .base import Entrypoint
from .knowledge import KNOWLEDGE_ENTRYPOINT_CLASSES

__all__ = [
    "normalize_entrypoint_key",
    "EntrypointRegistry",
    "entrypoint_registry",
    "ALL_ENTRYPOINT_CLASSES",
    "bootstrap_entrypoint_registry",
]


_KEY_PATTERN = re.compile(r"[\s_]+")

ALL_ENTRYPOINT_CLASSES: tuple[type[Entrypoint], ...] = KNOWLEDGE_ENTRYPOINT_CLASSES + ANALYTICS_ENTRYPOINT_CLASSES


def normalize_entrypoint_key(key: str) -> str:
    """Return the identifier used for registry lookups (``Analytics_CSV`` -> ``analytics-csv``)."""
    if not isinstance(key, str):
        raise TypeError("Entrypoint key must be a string")
    return _KEY_PATTERN.sub("-", key.strip()).strip("-").lower()


class EntrypointRegistry:
    """Registry of entrypoint instances keyed by normalized entrypoint key."""

    def __init__(self) -> None:
        self._registry: Dict[str, Entrypoint] = {}

    def register(self, entrypoint: Entrypoint) -> None:
        key = normalize_entrypoint_key(entrypoint.key)
        if key in self._registry:
            raise ValueError(f"Entrypoint '{key}' is already registered")
        self._registry[key] = entrypoint

    def unregister(self, key: str) -> None:
        self._registry.pop(normalize_entrypoint_key(key), None)

    def clear(self) -> None:
        self._registry.clear()

    def get(self, key: str) -> Entrypoint | None:
        return self._registry.get(normalize_entrypoint_key(key))

    def require(self, key: str) -> Entrypoint:
        entrypoint = self.get(key)
        if entrypoint is None:
            raise EntrypointNotFoundError(f"Entrypoint '{key}' not found")
        return entrypoint

    def list(self) -> list[str]:
        return list(self._registry)

    def items(self) -> Iterator[Tuple[str, Entrypoint]]:
        yield from self._registry.items()

    def __len__(self) -> int:
        return len(self._registry)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_entrypoint_key(key) in self._registry


entrypoint_registry = EntrypointRegistry()


@lru_cache(maxsize=1)
def bootstrap_entrypoint_registry() -> bool:
    for entrypoint_cls in ALL_ENTRYPOINT_CLASSES:
        if entrypoint_registry.get(entrypoint_cls.key) is not None:
            continue
        entrypoint_registry.register(entrypoint_cls())
    return True
