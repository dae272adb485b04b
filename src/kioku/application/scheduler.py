"""
SM-2 scheduling engine.

Pure value transformations of (item, grade, now) -> item. No I/O.

Every operation takes ``now`` (epoch milliseconds) as an optional argument;
when omitted the wall clock is read exactly once per call.
"""

import math
from collections.abc import Iterable
from dataclasses import replace

from kioku.application.clock import now_ms
from kioku.domain.constants import (
    FIRST_INTERVAL_DAYS,
    INITIAL_EASINESS,
    LAPSE_INTERVAL_DAYS,
    MIN_EASINESS,
    MS_PER_DAY,
    SECOND_INTERVAL_DAYS,
)
from kioku.domain.review.models import Grade, ReviewItem


def initialize(item_id: str, now: int | None = None) -> ReviewItem:
    """Create a fresh item that is due immediately."""
    if now is None:
        now = now_ms()
    return ReviewItem(
        id=item_id,
        easiness_factor=INITIAL_EASINESS,
        interval=0,
        repetitions=0,
        due_date=now,
        last_reviewed=now,
    )


def next_easiness(easiness_factor: float, grade: Grade) -> float:
    """
    SM-2 easiness update on a 0-3 grade scale.

    EF' = EF + (0.1 - (3 - g) * (0.08 + (3 - g) * 0.02)), floored at 1.3.
    """
    miss = int(Grade.EASY) - int(grade)
    return max(MIN_EASINESS, easiness_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def _round_half_up(value: float) -> int:
    # Builtin round() is banker's rounding; intervals round .5 up.
    return int(math.floor(value + 0.5))


def advance(item: ReviewItem, grade: Grade | int, now: int | None = None) -> ReviewItem:
    """
    Grade an item and return its rescheduled state.

    AGAIN and HARD count as a lapse: the streak resets and the item comes
    back in one day. GOOD and EASY extend the streak; the first two
    successes use fixed 1 and 6 day intervals, later ones multiply the
    previous interval by the new easiness factor.

    A previous interval of 0 with repetitions >= 2 stays at 0 forever.
    That only happens for items built outside this module and is kept as is.
    """
    if now is None:
        now = now_ms()

    g = Grade.coerce(grade)
    easiness = next_easiness(item.easiness_factor, g)

    if g < Grade.GOOD:
        repetitions = 0
        interval = LAPSE_INTERVAL_DAYS
    else:
        repetitions = item.repetitions + 1
        if repetitions == 1:
            interval = FIRST_INTERVAL_DAYS
        elif repetitions == 2:
            interval = SECOND_INTERVAL_DAYS
        else:
            interval = _round_half_up(item.interval * easiness)

    return replace(
        item,
        easiness_factor=easiness,
        interval=interval,
        repetitions=repetitions,
        due_date=now + interval * MS_PER_DAY,
        last_reviewed=now,
    )


def is_due(item: ReviewItem, now: int | None = None) -> bool:
    if now is None:
        now = now_ms()
    return now >= item.due_date


def get_due_items(items: Iterable[ReviewItem], now: int | None = None) -> list[ReviewItem]:
    """Items due at ``now``, in their original relative order."""
    if now is None:
        now = now_ms()
    return [item for item in items if is_due(item, now)]


def sort_by_due_date(items: Iterable[ReviewItem]) -> list[ReviewItem]:
    """Earliest due first. Stable: ties keep their input order."""
    return sorted(items, key=lambda item: item.due_date)
