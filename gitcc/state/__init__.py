"""Repository state: cache and registry."""

from .cache import StateStore
from .registry import RegistryListener, RepositoryRegistry

__all__ = ["RegistryListener", "RepositoryRegistry", "StateStore"]
