"""Shared models and base classes for all bounded contexts."""

from __future__ import annotations

from enum import Enum

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Direction(str, Enum):
    """Quiz orientation of a vocabulary pair."""

    FORWARD = "forward"  # source term -> target term
    REVERSE = "reverse"  # target term -> source term

    @property
    def opposite(self) -> Direction:
        """Return the other direction."""
        return Direction.REVERSE if self is Direction.FORWARD else Direction.FORWARD

    @property
    def label(self) -> str:
        """Short label for display."""
        return "A→B" if self is Direction.FORWARD else "B→A"


class DifficultyLevel(str, Enum):
    """Self-assessed recall difficulty, ordered from worst to best."""

    HARD = "hard"
    OK = "ok"
    GOOD = "good"
    PERFECT = "perfect"

    @property
    def quality(self) -> int:
        """SM-2 quality score (0-5) for this difficulty."""
        return DIFFICULTY_TO_QUALITY[self]


# Quality < 3 is a failing answer
DIFFICULTY_TO_QUALITY: dict[DifficultyLevel, int] = {
    DifficultyLevel.HARD: 1,
    DifficultyLevel.OK: 3,
    DifficultyLevel.GOOD: 4,
    DifficultyLevel.PERFECT: 5,
}

PASSING_QUALITY = 3
