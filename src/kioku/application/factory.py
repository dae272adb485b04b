"""
Store Factory
Centralizes the logic for selecting the review item store.
"""

from kioku.application.config import AppConfig
from kioku.domain.review.ports import ReviewItemStore
from kioku.infrastructure.adapters.store import InMemoryStore, JsonFileStore


def get_store(config: AppConfig) -> ReviewItemStore:
    """
    Returns the ReviewItemStore implementation selected by config.backend.
    """
    if config.backend == "memory":
        return InMemoryStore()
    return JsonFileStore(config.store_path)
