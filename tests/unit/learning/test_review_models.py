"""Tests for the vocabulary and review-state models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pydantic
import pytest
from helpers import NOW, make_item, make_word

from lexicard.domain.learning.models.review_models import ReviewState
from lexicard.domain.shared.models import DifficultyLevel, Direction


class TestReviewState:
    def test_defaults(self):
        state = ReviewState()

        assert state.ease_factor == 2.5
        assert state.interval == 0
        assert state.repetitions == 0
        assert state.next_review is None
        assert state.is_due(NOW)

    def test_low_ease_factor_is_clamped(self):
        assert ReviewState(ease_factor=0.9).ease_factor == 1.3

    @pytest.mark.parametrize("field", ["interval", "repetitions"])
    def test_negative_values_are_rejected(self, field):
        with pytest.raises(pydantic.ValidationError):
            ReviewState(**{field: -1})

    def test_naive_timestamps_are_treated_as_utc(self):
        state = ReviewState(next_review=datetime(2024, 6, 1, 12, 0))

        assert state.next_review == NOW
        assert state.next_review.tzinfo is UTC

    def test_is_due_boundaries(self):
        state = ReviewState(repetitions=1, next_review=NOW)

        assert state.is_due(NOW)
        assert state.is_due(NOW + timedelta(seconds=1))
        assert not state.is_due(NOW - timedelta(seconds=1))

    def test_is_frozen(self):
        state = ReviewState()

        with pytest.raises(pydantic.ValidationError):
            state.repetitions = 3


class TestVocabWord:
    def test_directions_are_independent(self):
        word = make_word("w", forward=ReviewState(repetitions=4))

        updated = word.with_review_state(Direction.REVERSE, ReviewState(repetitions=1))

        assert updated.review_state(Direction.FORWARD).repetitions == 4
        assert updated.review_state(Direction.REVERSE).repetitions == 1
        assert word.review_state(Direction.REVERSE) is None

    def test_prompt_follows_direction(self):
        word = make_word("w")

        assert word.prompt(Direction.FORWARD) == ("term-w", "translation-w")
        assert word.prompt(Direction.REVERSE) == ("translation-w", "term-w")

    def test_practice_item_exposes_word(self):
        item = make_item("w", list_id="list-9")

        updated = item.with_review_state(Direction.FORWARD, ReviewState(repetitions=2))

        assert item.id == "w"
        assert updated.list_id == "list-9"
        assert updated.review_state(Direction.FORWARD).repetitions == 2


class TestEnums:
    def test_difficulty_quality_mapping(self):
        assert [level.quality for level in DifficultyLevel] == [1, 3, 4, 5]

    def test_direction_opposite_and_label(self):
        assert Direction.FORWARD.opposite is Direction.REVERSE
        assert Direction.REVERSE.opposite is Direction.FORWARD
        assert Direction.FORWARD.label == "A→B"
        assert Direction("reverse") is Direction.REVERSE
