"""
Domain models for spaced-repetition review.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from enum import IntEnum

from kioku.domain.constants import INITIAL_EASINESS


class Grade(IntEnum):
    """Self-assessed recall quality for one review event."""

    AGAIN = 0  # Complete blackout, wrong answer
    HARD = 1  # Correct, but with much difficulty
    GOOD = 2  # Correct, with some difficulty
    EASY = 3  # Perfect recall

    @classmethod
    def coerce(cls, value: "int | str | Grade") -> "Grade":
        """
        Convert a raw grade into a Grade.

        Names are matched case-insensitively. Integers outside 0-3 are
        clamped into range instead of rejected. Unknown names raise ValueError.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip()
            if name.lstrip("-").isdigit():
                return cls.coerce(int(name))
            try:
                return cls[name.upper()]
            except KeyError:
                raise ValueError(f"Unknown grade: {value!r}") from None
        return cls(max(int(cls.AGAIN), min(int(cls.EASY), int(value))))


@dataclass(frozen=True)
class ReviewItem:
    """
    Spaced-repetition state of one learnable unit (word or kanji).

    Attributes:
        id: Stable identifier, unique within a deck.
        easiness_factor: Interval multiplier, never below 1.3.
        interval: Days until the next scheduled review.
        repetitions: Consecutive successful reviews (GOOD or EASY).
        due_date: Epoch ms at or after which the item may be reviewed.
        last_reviewed: Epoch ms of the last grading (creation time if never graded).
    """

    id: str
    easiness_factor: float = INITIAL_EASINESS
    interval: int = 0
    repetitions: int = 0
    due_date: int = 0
    last_reviewed: int = 0


@dataclass(frozen=True)
class ReviewStats:
    """Aggregate statistics over a collection of review items."""

    total_items: int
    due_today: int
    due_this_week: int  # Cumulative: includes overdue items
    average_ef: float
    retention_rate: float  # Percent of items with repetitions > 0


@dataclass
class StudyDeck:
    """
    The persisted collection together with study progress counters.

    This is the document the store loads and saves as a whole.
    """

    items: list[ReviewItem] = field(default_factory=list)
    last_study_date: int = 0  # Epoch ms of the last grading, 0 if never
    study_streak: int = 0  # Consecutive calendar days with a grading
    total_reviews: int = 0
    correct_reviews: int = 0

    def find(self, item_id: str) -> ReviewItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


@dataclass(frozen=True)
class ProgressSummary:
    """Deck-level study progress for display."""

    total_cards: int
    due_cards: int
    study_streak: int
    accuracy_rate: float
    total_reviews: int
