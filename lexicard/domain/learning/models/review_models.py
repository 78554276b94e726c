"""Vocabulary and review-state models used by the scheduling engine."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lexicard.domain.shared.models import Direction

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class ReviewState(BaseModel):
    """SM-2 state of one word in one direction.

    A missing ``next_review`` means the word is due immediately.
    """

    model_config = ConfigDict(frozen=True)

    ease_factor: float = Field(
        DEFAULT_EASE_FACTOR, allow_inf_nan=False, description="SM-2 ease factor"
    )
    interval: float = Field(
        0.0, ge=0, allow_inf_nan=False, description="Interval in (fractional) days"
    )
    repetitions: int = Field(0, ge=0, description="Consecutive qualifying answers")
    next_review: datetime | None = Field(None, description="When the word is due")
    last_reviewed: datetime | None = Field(None, description="Time of last answer")

    @field_validator("ease_factor")
    @classmethod
    def clamp_ease_factor(cls, value: float) -> float:
        """Ease factors below the SM-2 floor are raised to it."""
        return max(MIN_EASE_FACTOR, value)

    @field_validator("next_review", "last_reviewed")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC."""
        return _as_utc(value)

    def is_due(self, now: datetime) -> bool:
        """Return True when the review time is unset or has elapsed."""
        return self.next_review is None or self.next_review <= _as_utc(now)


class VocabWord(BaseModel):
    """A vocabulary pair with independent review state per direction."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable word identifier")
    term: str = Field(..., description="Source-language side")
    translation: str = Field(..., description="Target-language side")
    notes: str | None = None
    review_states: dict[Direction, ReviewState] = Field(default_factory=dict)

    def review_state(self, direction: Direction) -> ReviewState | None:
        """Return the stored state for a direction, if the word was ever answered."""
        return self.review_states.get(direction)

    def with_review_state(self, direction: Direction, state: ReviewState) -> VocabWord:
        """Return a copy with one direction's state replaced."""
        states = dict(self.review_states)
        states[direction] = state
        return self.model_copy(update={"review_states": states})

    def prompt(self, direction: Direction) -> tuple[str, str]:
        """Return (question, answer) for the given direction."""
        if direction is Direction.FORWARD:
            return self.term, self.translation
        return self.translation, self.term


class VocabList(BaseModel):
    """A named collection of words."""

    id: str
    name: str
    language: str | None = None
    words: list[VocabWord] = Field(default_factory=list)


class PracticeItem(BaseModel):
    """A word queued for practice, tagged with the list it came from."""

    model_config = ConfigDict(frozen=True)

    word: VocabWord
    list_id: str
    list_name: str

    @property
    def id(self) -> str:
        return self.word.id

    def review_state(self, direction: Direction) -> ReviewState | None:
        return self.word.review_state(direction)

    def with_review_state(self, direction: Direction, state: ReviewState) -> PracticeItem:
        return self.model_copy(
            update={"word": self.word.with_review_state(direction, state)}
        )
