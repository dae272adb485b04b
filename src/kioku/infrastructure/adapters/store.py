"""
Review item stores — infrastructure adapters for deck persistence.

JsonFileStore keeps the whole deck in one JSON document, using the same
camelCase layout as the mobile app's flashcard blob:

    {"items": [{"id": ..., "easinessFactor": ..., "interval": ...,
                "repetitions": ..., "dueDate": ..., "lastReviewed": ...}],
     "lastStudyDate": 0, "studyStreak": 0,
     "totalReviews": 0, "correctReviews": 0}
"""

import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from kioku.domain.constants import INITIAL_EASINESS, MIN_EASINESS
from kioku.domain.review.models import ReviewItem, StudyDeck
from kioku.domain.review.ports import ReviewItemStore, StoreError

logger = logging.getLogger(__name__)


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReviewItemRecord(_Record):
    id: str = Field(min_length=1)
    easiness_factor: float = Field(default=INITIAL_EASINESS, ge=MIN_EASINESS)
    interval: int = Field(default=0, ge=0)
    repetitions: int = Field(default=0, ge=0)
    due_date: int = 0
    last_reviewed: int = 0

    @classmethod
    def from_domain(cls, item: ReviewItem) -> "ReviewItemRecord":
        return cls(
            id=item.id,
            easiness_factor=item.easiness_factor,
            interval=item.interval,
            repetitions=item.repetitions,
            due_date=item.due_date,
            last_reviewed=item.last_reviewed,
        )

    def to_domain(self) -> ReviewItem:
        return ReviewItem(**self.model_dump())


class StudyDeckRecord(_Record):
    items: list[ReviewItemRecord] = Field(default_factory=list)
    last_study_date: int = 0
    study_streak: int = Field(default=0, ge=0)
    total_reviews: int = Field(default=0, ge=0)
    correct_reviews: int = Field(default=0, ge=0)

    @classmethod
    def from_domain(cls, deck: StudyDeck) -> "StudyDeckRecord":
        return cls(
            items=[ReviewItemRecord.from_domain(item) for item in deck.items],
            last_study_date=deck.last_study_date,
            study_streak=deck.study_streak,
            total_reviews=deck.total_reviews,
            correct_reviews=deck.correct_reviews,
        )

    def to_domain(self) -> StudyDeck:
        return StudyDeck(
            items=[record.to_domain() for record in self.items],
            last_study_date=self.last_study_date,
            study_streak=self.study_streak,
            total_reviews=self.total_reviews,
            correct_reviews=self.correct_reviews,
        )


class JsonFileStore(ReviewItemStore):
    """
    Stores the deck as a single JSON file.

    A missing file reads as an empty deck. Writes go to a temporary file in
    the same directory and are moved into place with os.replace.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load_deck(self) -> StudyDeck:
        if not self.path.exists():
            logger.debug(f"No deck at {self.path}, starting empty")
            return StudyDeck()

        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"Failed to load items from {self.path}: {e}") from e

        if not raw.strip():
            logger.warning(f"Deck file {self.path} is empty, starting empty")
            return StudyDeck()

        try:
            record = StudyDeckRecord.model_validate_json(raw)
        except ValidationError as e:
            raise StoreError(f"Failed to load items from {self.path}: {e}") from e

        deck = record.to_domain()
        logger.debug(f"Loaded {len(deck.items)} items from {self.path}")
        return deck

    def save_deck(self, deck: StudyDeck) -> None:
        payload = StudyDeckRecord.from_domain(deck).model_dump_json(by_alias=True, indent=2)

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreError(f"Failed to save items to {self.path}: {e}") from e

        logger.debug(f"Saved {len(deck.items)} items to {self.path}")


class InMemoryStore(ReviewItemStore):
    """Keeps the deck in process memory. Nothing survives the process."""

    def __init__(self, deck: StudyDeck | None = None):
        self._deck = deck or StudyDeck()

    def load_deck(self) -> StudyDeck:
        # Callers get their own item list
        return replace(self._deck, items=list(self._deck.items))

    def save_deck(self, deck: StudyDeck) -> None:
        self._deck = replace(deck, items=list(deck.items))
