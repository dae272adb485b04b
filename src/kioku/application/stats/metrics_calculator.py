"""
Metrics calculator for deriving aggregate statistics from review items.

This is a pure computation module with no I/O.
"""

from collections.abc import Sequence

from kioku.application.clock import now_ms
from kioku.domain.constants import DUE_WINDOW_DAYS, MS_PER_DAY
from kioku.domain.review.models import ProgressSummary, ReviewItem, ReviewStats, StudyDeck


class MetricsCalculator:
    """
    Computes read-only projections over a collection of items.

    Stateless and side-effect free.
    """

    def compute_stats(self, items: Sequence[ReviewItem], now: int | None = None) -> ReviewStats:
        """
        Summarize a collection at ``now``.

        due_this_week counts everything due within the next seven days,
        including items that are already overdue.
        """
        if now is None:
            now = now_ms()

        week_end = now + DUE_WINDOW_DAYS * MS_PER_DAY
        total = len(items)

        return ReviewStats(
            total_items=total,
            due_today=sum(1 for item in items if item.due_date <= now),
            due_this_week=sum(1 for item in items if item.due_date <= week_end),
            average_ef=self._average_easiness(items),
            retention_rate=self._retention_rate(items),
        )

    def summarize_progress(self, deck: StudyDeck, now: int | None = None) -> ProgressSummary:
        if now is None:
            now = now_ms()

        return ProgressSummary(
            total_cards=len(deck.items),
            due_cards=sum(1 for item in deck.items if item.due_date <= now),
            study_streak=deck.study_streak,
            accuracy_rate=self._accuracy_rate(deck),
            total_reviews=deck.total_reviews,
        )

    def _average_easiness(self, items: Sequence[ReviewItem]) -> float:
        if not items:
            return 0.0
        return sum(item.easiness_factor for item in items) / len(items)

    def _retention_rate(self, items: Sequence[ReviewItem]) -> float:
        """
        Percentage of items successfully reviewed at least once.
        """
        if not items:
            return 0.0
        learned = sum(1 for item in items if item.repetitions > 0)
        return learned / len(items) * 100

    def _accuracy_rate(self, deck: StudyDeck) -> float:
        if deck.total_reviews == 0:
            return 0.0
        return deck.correct_reviews / deck.total_reviews * 100


def compute_stats(items: Sequence[ReviewItem], now: int | None = None) -> ReviewStats:
    """Module-level shortcut for MetricsCalculator().compute_stats."""
    return MetricsCalculator().compute_stats(items, now)
