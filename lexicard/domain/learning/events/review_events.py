"""Learning context domain events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from lexicard.infrastructure.messaging.event_bus import DomainEvent


@dataclass
class PracticeSessionStartedEvent(DomainEvent):
    """Emitted when a session captures its snapshot."""

    session_id: str
    direction: str
    total_items: int

    def __post_init__(self) -> None:
        super().__init__()


@dataclass
class ReviewScheduledEvent(DomainEvent):
    """Emitted when an answer produced a new review state."""

    session_id: str
    word_id: str
    direction: str
    difficulty: str
    quality: int
    ease_factor: float
    interval_days: float
    repetitions: int
    next_review: datetime

    def __post_init__(self) -> None:
        super().__init__()


@dataclass
class ReviewPersistenceFailedEvent(DomainEvent):
    """Emitted when the store rejected a review-state write.

    The session has already moved on; the UI is expected to show a
    non-blocking notice.
    """

    session_id: str
    word_id: str
    direction: str
    error_message: str

    def __post_init__(self) -> None:
        super().__init__()


@dataclass
class PracticeSessionCompletedEvent(DomainEvent):
    """Emitted when the cursor runs past the last snapshot item."""

    session_id: str
    direction: str
    total_items: int
    answered_items: int
    duration_seconds: int

    def __post_init__(self) -> None:
        super().__init__()


@dataclass
class WordDeletedEvent(DomainEvent):
    """Emitted after a word was removed from the store."""

    word_id: str
    list_id: str | None = None

    def __post_init__(self) -> None:
        super().__init__()
