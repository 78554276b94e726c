"""Builders and a fake clock shared by the test modules."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from lexicard.domain.learning.models.review_models import (
    PracticeItem,
    ReviewState,
    VocabList,
    VocabWord,
)
from lexicard.domain.shared.models import Direction

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def make_word(
    word_id: str,
    forward: ReviewState | None = None,
    reverse: ReviewState | None = None,
) -> VocabWord:
    states = {}
    if forward is not None:
        states[Direction.FORWARD] = forward
    if reverse is not None:
        states[Direction.REVERSE] = reverse
    return VocabWord(
        id=word_id,
        term=f"term-{word_id}",
        translation=f"translation-{word_id}",
        review_states=states,
    )


def make_item(
    word_id: str,
    list_id: str = "list-1",
    forward: ReviewState | None = None,
    reverse: ReviewState | None = None,
) -> PracticeItem:
    return PracticeItem(
        word=make_word(word_id, forward, reverse), list_id=list_id, list_name=list_id
    )


def make_list(list_id: str, words: list[VocabWord]) -> VocabList:
    return VocabList(id=list_id, name=f"List {list_id}", words=words)


def scheduled_at(next_review: datetime) -> ReviewState:
    """A state that becomes due at ``next_review``."""
    return ReviewState(repetitions=1, interval=0.5, next_review=next_review)
