"""Entrypoint exports."""

from .analytics import ANALYTICS_ENTRYPOINT_CLASSES
from .base import Entrypoint, EntrypointDescriptor
from .knowledge import KNOWLEDGE_ENTRYPOINT_CLASSES
from .registry import ALL_ENTRYPOINT_CLASSES, bootstrap_entrypoint_registry, entrypoint_registry

__all__ = [
    "ANALYTICS_ENTRYPOINT_CLASSES",
    "KNOWLEDGE_ENTRYPOINT_CLASSES",
    "ALL_ENTRYPOINT_CLASSES",
    "Entrypoint",
    "EntrypointDescriptor",
    "bootstrap_entrypoint_registry",
    "entrypoint_registry",
]
