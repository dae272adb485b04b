"""
Review Service — Application layer orchestrator.

Coordinates loading the deck, running the scheduling engine, and saving
the results back to the store.
"""

import logging
import threading
from dataclasses import replace
from datetime import date, datetime, timedelta

from kioku.application import scheduler
from kioku.application.clock import now_ms
from kioku.application.stats.metrics_calculator import MetricsCalculator
from kioku.domain.review.models import (
    Grade,
    ProgressSummary,
    ReviewItem,
    ReviewStats,
    StudyDeck,
)
from kioku.domain.review.ports import ItemNotFoundError, ReviewItemStore

logger = logging.getLogger(__name__)


def _local_day(epoch_ms: int) -> date:
    return datetime.fromtimestamp(epoch_ms / 1000).date()


def _normalize_id(item_id: str) -> str:
    return item_id.strip()


def next_streak(deck: StudyDeck, now: int) -> int:
    """
    Study streak after a grading at ``now``.

    The first grading on a new local calendar day extends the streak if the
    previous study day was yesterday and restarts it at 1 otherwise. Later
    gradings on the same day leave it unchanged.
    """
    today = _local_day(now)
    if deck.last_study_date > 0:
        last_day = _local_day(deck.last_study_date)
        if today <= last_day:
            return deck.study_streak
        if last_day == today - timedelta(days=1):
            return deck.study_streak + 1
    return 1


class ReviewService:
    """
    Application service for adding, grading and querying review items.

    Depends on the ReviewItemStore abstraction, not a concrete adapter.
    Every load-modify-save sequence runs under one lock, so concurrent
    gradings in this process cannot overwrite each other.
    """

    def __init__(
        self,
        store: ReviewItemStore,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            store: The repository (port) holding the deck.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._store = store
        self._calc = calculator or MetricsCalculator()
        self._lock = threading.Lock()

    def add_item(self, item_id: str, now: int | None = None) -> ReviewItem:
        """
        Start tracking ``item_id``. Adding an id twice returns the stored item.
        """
        item_id = _normalize_id(item_id)
        if not item_id:
            raise ValueError("Item id must not be empty")

        with self._lock:
            deck = self._store.load_deck()
            existing = deck.find(item_id)
            if existing is not None:
                logger.debug(f"Item {item_id} already tracked")
                return existing

            item = scheduler.initialize(item_id, now)
            self._store.save_deck(replace(deck, items=[*deck.items, item]))

        logger.info(f"Added {item_id}")
        return item

    def remove_item(self, item_id: str) -> bool:
        """Stop tracking ``item_id``. Returns False if it was not tracked."""
        item_id = _normalize_id(item_id)
        with self._lock:
            deck = self._store.load_deck()
            remaining = [item for item in deck.items if item.id != item_id]
            if len(remaining) == len(deck.items):
                return False
            self._store.save_deck(replace(deck, items=remaining))

        logger.info(f"Removed {item_id}")
        return True

    def get_item(self, item_id: str) -> ReviewItem:
        item_id = _normalize_id(item_id)
        item = self._store.load_deck().find(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def due_queue(self, now: int | None = None, limit: int | None = None) -> list[ReviewItem]:
        """
        Items due at ``now``, earliest first, at most ``limit`` of them.
        """
        if now is None:
            now = now_ms()
        due = scheduler.sort_by_due_date(scheduler.get_due_items(self._store.load(), now))
        if limit is not None:
            due = due[:limit]
        return due

    def grade_item(
        self, item_id: str, grade: Grade | int | str, now: int | None = None
    ) -> ReviewItem:
        """
        Grade one item, persist its new schedule and update study progress.

        Raises:
            ItemNotFoundError: If ``item_id`` is not tracked.
        """
        item_id = _normalize_id(item_id)
        if now is None:
            now = now_ms()
        grade = Grade.coerce(grade)

        with self._lock:
            deck = self._store.load_deck()
            current = deck.find(item_id)
            if current is None:
                raise ItemNotFoundError(item_id)

            updated = scheduler.advance(current, grade, now)
            items = [updated if item.id == item_id else item for item in deck.items]
            correct = grade >= Grade.GOOD

            self._store.save_deck(
                replace(
                    deck,
                    items=items,
                    last_study_date=now,
                    study_streak=next_streak(deck, now),
                    total_reviews=deck.total_reviews + 1,
                    correct_reviews=deck.correct_reviews + (1 if correct else 0),
                )
            )

        logger.info(
            f"Graded {item_id} {grade.name}: interval={updated.interval}d "
            f"ef={updated.easiness_factor:.2f} reps={updated.repetitions}"
        )
        return updated

    def stats(self, now: int | None = None) -> ReviewStats:
        return self._calc.compute_stats(self._store.load(), now)

    def progress(self, now: int | None = None) -> ProgressSummary:
        return self._calc.summarize_progress(self._store.load_deck(), now)
