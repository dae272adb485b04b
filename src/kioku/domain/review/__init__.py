# Domain Review Package
from .models import Grade, ProgressSummary, ReviewItem, ReviewStats, StudyDeck
from .ports import ItemNotFoundError, ReviewItemStore, StoreError

__all__ = [
    "Grade",
    "ReviewItem",
    "ReviewStats",
    "StudyDeck",
    "ProgressSummary",
    "ReviewItemStore",
    "StoreError",
    "ItemNotFoundError",
]
