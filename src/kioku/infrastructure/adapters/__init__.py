# Infrastructure Store Adapters Package
from .store import InMemoryStore, JsonFileStore

__all__ = ["JsonFileStore", "InMemoryStore"]
