import random

import pytest

from kioku.application import scheduler
from kioku.domain.review.models import Grade, ReviewItem

DAY = 86_400_000


@pytest.fixture
def fresh():
    return scheduler.initialize("word-1", now=1_000_000)


# --- Initialization ---


def test_initialize_defaults(fresh):
    assert fresh == ReviewItem(
        id="word-1",
        easiness_factor=2.5,
        interval=0,
        repetitions=0,
        due_date=1_000_000,
        last_reviewed=1_000_000,
    )


def test_initialize_is_deterministic():
    a = scheduler.initialize("word-1", now=42)
    b = scheduler.initialize("word-1", now=42)
    assert a == b
    assert a is not b


def test_initialize_reads_clock_when_now_omitted(monkeypatch):
    monkeypatch.setattr(scheduler, "now_ms", lambda: 777)
    item = scheduler.initialize("kanji-日")
    assert item.due_date == item.last_reviewed == 777


# --- Grading transition ---


def test_first_success_schedules_one_day(fresh):
    item = scheduler.advance(fresh, Grade.GOOD, now=1_000_000)
    assert item.repetitions == 1
    assert item.interval == 1
    assert item.due_date == 1_000_000 + DAY
    assert item.last_reviewed == 1_000_000
    assert item.easiness_factor == pytest.approx(2.5)


def test_second_success_schedules_six_days(fresh):
    first = scheduler.advance(fresh, Grade.GOOD, now=1_000_000)
    second = scheduler.advance(first, Grade.GOOD, now=1_086_400_000)
    assert second.repetitions == 2
    assert second.interval == 6
    assert second.due_date == 1_086_400_000 + 6 * DAY


@pytest.mark.parametrize("ef", [1.3, 2.0, 2.5, 3.7])
def test_second_success_ignores_easiness(ef):
    item = ReviewItem(id="w", easiness_factor=ef, interval=1, repetitions=1)
    assert scheduler.advance(item, Grade.EASY, now=0).interval == 6


def test_lapse_after_streak(fresh):
    item = scheduler.advance(fresh, Grade.GOOD, now=1_000_000)
    item = scheduler.advance(item, Grade.GOOD, now=1_086_400_000)
    ef_before = item.easiness_factor

    lapsed = scheduler.advance(item, Grade.AGAIN, now=2_000_000_000)

    assert lapsed.repetitions == 0
    assert lapsed.interval == 1
    assert lapsed.easiness_factor == pytest.approx(max(1.3, ef_before - 0.32))
    assert lapsed.due_date == 2_000_000_000 + DAY


@pytest.mark.parametrize("grade", [Grade.AGAIN, Grade.HARD])
@pytest.mark.parametrize("reps,interval", [(1, 1), (2, 6), (7, 120)])
def test_lapse_resets_repetitions(grade, reps, interval):
    item = ReviewItem(id="w", easiness_factor=2.2, interval=interval, repetitions=reps)
    result = scheduler.advance(item, grade, now=10)
    assert result.repetitions == 0
    assert result.interval == 1


@pytest.mark.parametrize(
    "grade,delta",
    [
        (Grade.AGAIN, -0.32),
        (Grade.HARD, -0.14),
        (Grade.GOOD, 0.0),
        (Grade.EASY, 0.1),
    ],
)
def test_easiness_update_per_grade(grade, delta):
    item = ReviewItem(id="w", easiness_factor=2.5)
    assert scheduler.advance(item, grade, now=0).easiness_factor == pytest.approx(2.5 + delta)


def test_easiness_never_below_floor():
    item = ReviewItem(id="w", easiness_factor=1.3)
    for grade in (Grade.AGAIN, Grade.HARD, Grade.AGAIN):
        item = scheduler.advance(item, grade, now=0)
        assert item.easiness_factor == 1.3


def test_later_successes_multiply_previous_interval():
    item = ReviewItem(id="w", easiness_factor=2.5, interval=6, repetitions=2)
    third = scheduler.advance(item, Grade.GOOD, now=0)
    assert third.repetitions == 3
    assert third.interval == 15

    fourth = scheduler.advance(third, Grade.EASY, now=0)
    assert fourth.easiness_factor == pytest.approx(2.6)
    assert fourth.interval == 39


def test_interval_rounds_half_up():
    item = ReviewItem(id="w", easiness_factor=2.5, interval=5, repetitions=2)
    assert scheduler.advance(item, Grade.GOOD, now=0).interval == 13


def test_zero_interval_stays_zero_on_late_streak():
    # Known boundary: an item built with repetitions >= 2 and interval 0
    # never leaves interval 0.
    item = ReviewItem(id="w", easiness_factor=2.5, interval=0, repetitions=3, due_date=0)
    result = scheduler.advance(item, Grade.EASY, now=5_000)
    assert result.repetitions == 4
    assert result.interval == 0
    assert result.due_date == result.last_reviewed == 5_000


def test_advance_does_not_mutate_input(fresh):
    snapshot = ReviewItem(**vars(fresh))
    scheduler.advance(fresh, Grade.EASY, now=9_999_999)
    assert fresh == snapshot


@pytest.mark.parametrize("raw,expected_reps", [(-5, 0), (0, 0), (1, 0), (2, 1), (3, 1), (99, 1)])
def test_raw_grades_are_clamped(fresh, raw, expected_reps):
    result = scheduler.advance(fresh, raw, now=0)
    assert result.repetitions == expected_reps
    assert result.easiness_factor >= 1.3


def test_out_of_range_grade_matches_easy(fresh):
    assert scheduler.advance(fresh, 17, now=0) == scheduler.advance(fresh, Grade.EASY, now=0)


def test_advance_reads_clock_once_when_now_omitted(monkeypatch, fresh):
    calls = []

    def fake_now():
        calls.append(1)
        return 50_000

    monkeypatch.setattr(scheduler, "now_ms", fake_now)
    result = scheduler.advance(fresh, Grade.GOOD)
    assert len(calls) == 1
    assert result.last_reviewed == 50_000
    assert result.due_date == 50_000 + DAY


# --- Long grade sequences ---


@pytest.mark.parametrize("seed", range(25))
def test_invariants_hold_over_random_sequences(seed):
    rng = random.Random(seed)
    item = scheduler.initialize(f"w{seed}", now=0)
    now = 0

    for _ in range(60):
        now += rng.randint(0, 40) * DAY
        prev = item
        item = scheduler.advance(item, rng.choice(list(Grade)), now=now)

        assert item.easiness_factor >= 1.3
        assert isinstance(item.interval, int) and item.interval >= 0
        assert item.repetitions >= 0
        assert item.last_reviewed == now
        assert item.due_date == now + item.interval * DAY
        assert item.due_date >= item.last_reviewed
        assert prev.id == item.id


@pytest.mark.parametrize("seed", range(10))
def test_due_date_non_decreasing_when_graded_on_time(seed):
    rng = random.Random(seed)
    item = scheduler.initialize("w", now=0)

    for _ in range(40):
        # Grade only once the item is due
        now = item.due_date + rng.randint(0, 3) * DAY
        nxt = scheduler.advance(item, rng.choice(list(Grade)), now=now)
        assert nxt.due_date >= item.due_date
        item = nxt


# --- Due-ness and ordering ---


@pytest.mark.parametrize("now,expected", [(99, False), (100, True), (101, True)])
def test_is_due_boundary(now, expected):
    assert scheduler.is_due(ReviewItem(id="w", due_date=100), now) is expected


def test_get_due_items_keeps_input_order():
    items = [
        ReviewItem(id="a", due_date=100),
        ReviewItem(id="b", due_date=300),
        ReviewItem(id="c", due_date=50),
    ]
    due = scheduler.get_due_items(items, now=200)
    assert [i.id for i in due] == ["a", "c"]


@pytest.mark.parametrize("seed", range(10))
def test_get_due_items_matches_predicate(seed):
    rng = random.Random(seed)
    items = [ReviewItem(id=str(n), due_date=rng.randint(0, 1000)) for n in range(30)]
    now = rng.randint(0, 1000)
    due = scheduler.get_due_items(items, now)
    assert due == [i for i in items if now >= i.due_date]


def test_sort_by_due_date_is_stable_and_copies():
    items = [
        ReviewItem(id="a", due_date=300),
        ReviewItem(id="b", due_date=100),
        ReviewItem(id="c", due_date=300),
        ReviewItem(id="d", due_date=100),
        ReviewItem(id="e", due_date=200),
    ]
    original = list(items)

    result = scheduler.sort_by_due_date(items)

    assert [i.id for i in result] == ["b", "d", "e", "a", "c"]
    assert items == original
    assert result is not items


def test_sort_by_due_date_accepts_generators():
    gen = (ReviewItem(id=str(n), due_date=-n) for n in range(3))
    assert [i.id for i in scheduler.sort_by_due_date(gen)] == ["2", "1", "0"]
