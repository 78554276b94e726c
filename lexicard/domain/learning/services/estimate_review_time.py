"""Preview of the next review delay for each difficulty button."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from lexicard.domain.learning.models.review_models import ReviewState
from lexicard.domain.learning.services.interval_algorithm import schedule_review
from lexicard.domain.shared.models import DifficultyLevel

_PREVIEW_EPOCH = datetime(2000, 1, 1, tzinfo=UTC)


def estimate(state: ReviewState | None, difficulty: DifficultyLevel) -> timedelta:
    """Delay that answering with ``difficulty`` would schedule.

    Runs the real scheduling function on the given state and discards the
    resulting state, so the preview cannot drift from the actual outcome.
    """
    return schedule_review(state, difficulty, _PREVIEW_EPOCH).duration


def format_duration(duration: timedelta) -> str:
    """Render a delay in a coarse unit: ``1m``, ``30m``, ``8h``, ``3d``."""
    seconds = duration.total_seconds()
    if seconds < 60:
        return "1m"
    if seconds < 60 * 60:
        return f"{round(seconds / 60)}m"
    if seconds < 24 * 60 * 60:
        return f"{round(seconds / 3600)}h"
    return f"{round(seconds / 86400)}d"


def estimate_label(state: ReviewState | None, difficulty: DifficultyLevel) -> str:
    return format_duration(estimate(state, difficulty))


def estimate_all(state: ReviewState | None) -> dict[DifficultyLevel, str]:
    """Preview labels for every difficulty, in button order."""
    return {difficulty: estimate_label(state, difficulty) for difficulty in DifficultyLevel}
