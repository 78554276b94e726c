"""SM-2 interval algorithm adapted for short learning steps.

The first two qualifying answers use fixed presets measured in minutes to
hours so that new words come back the same day; after that the interval grows
by the ease factor scaled with a per-quality factor. All functions are pure:
the current time is always passed in by the caller.

References:
    - SM-2: https://super-memory.com/english/ol/sm2.htm
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from lexicard.domain.learning.models.review_models import (
    MIN_EASE_FACTOR,
    ReviewState,
)
from lexicard.domain.shared.models import PASSING_QUALITY, DifficultyLevel
from lexicard.domain.shared.services import ValidationError

MINUTE = 1 / (24 * 60)
HOUR = 1 / 24

# Failing answers are shown again almost immediately
FAILED_REVIEW_DELAY = timedelta(minutes=1)
HARD_REVIEW_DELAY = timedelta(minutes=1)

# Intervals in days for the first and second qualifying answer, by quality
FIRST_STEP_INTERVALS: dict[int, float] = {3: 30 * MINUTE, 4: 1 * HOUR, 5: 3 * HOUR}
SECOND_STEP_INTERVALS: dict[int, float] = {3: 3 * HOUR, 4: 8 * HOUR, 5: 1.0}

# Perfect answers grow the interval faster than merely-good ones
QUALITY_FACTORS: dict[int, float] = {3: 0.5, 4: 1.0, 5: 1.5}


@dataclass(frozen=True)
class IntervalResult:
    """New SM-2 parameters plus the delay until the next review."""

    state: ReviewState
    duration: timedelta

    @property
    def failed(self) -> bool:
        return self.state.repetitions == 0


def validate_quality(quality: int) -> int:
    """Reject anything that is not an integer quality in 0..5."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ValidationError(f"Quality must be an integer, got {quality!r}", "quality")
    if not 0 <= quality <= 5:
        raise ValidationError(f"Quality must be between 0 and 5, got {quality}", "quality")
    return quality


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """SM-2 E-Factor update, floored at 1.3."""
    penalty = 5 - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - penalty * (0.08 + penalty * 0.02)))


def calculate_next_interval(state: ReviewState, quality: int) -> IntervalResult:
    """Apply one answer of the given quality to a review state.

    Only ease factor, interval and repetitions change; review timestamps are
    carried over untouched (see ``schedule_review``).

    Args:
        state: Current review state (defaults for a never-answered word)
        quality: Recall quality, 0-5; below 3 counts as a failure

    Returns:
        IntervalResult with the updated state and the delay until next review

    Raises:
        ValidationError: When quality is out of range
    """
    quality = validate_quality(quality)
    ease_factor = next_ease_factor(state.ease_factor, quality)

    if quality < PASSING_QUALITY:
        new_state = state.model_copy(
            update={"ease_factor": ease_factor, "interval": 0.0, "repetitions": 0}
        )
        return IntervalResult(state=new_state, duration=FAILED_REVIEW_DELAY)

    repetitions = state.repetitions + 1
    if repetitions == 1:
        interval = FIRST_STEP_INTERVALS[quality]
    elif repetitions == 2:
        interval = SECOND_STEP_INTERVALS[quality]
    else:
        # Growth uses the ease factor from before this answer
        interval = state.interval * state.ease_factor * QUALITY_FACTORS[quality]

    new_state = state.model_copy(
        update={
            "ease_factor": ease_factor,
            "interval": interval,
            "repetitions": repetitions,
        }
    )
    return IntervalResult(state=new_state, duration=timedelta(days=interval))


def schedule_review(
    state: ReviewState | None, difficulty: DifficultyLevel, now: datetime
) -> IntervalResult:
    """Schedule the next review of a word after the learner rated it.

    This is the single call site for scheduling: the Hard override is applied
    here so that answering and previewing always agree.

    Args:
        state: Stored state for the direction, or None if never answered
        difficulty: Learner's self-assessment
        now: Time of the answer

    Returns:
        IntervalResult whose state carries ``last_reviewed`` and ``next_review``
    """
    result = calculate_next_interval(state or ReviewState(), difficulty.quality)
    duration = HARD_REVIEW_DELAY if difficulty is DifficultyLevel.HARD else result.duration

    scheduled = result.state.model_copy(
        update={"last_reviewed": now, "next_review": now + duration}
    )
    return IntervalResult(state=scheduled, duration=duration)
