"""Practice session orchestration.

A ``SessionController`` owns exactly one practice view. On ``start`` it loads
the items from its item source, selects the due ones for the active direction
and keeps them as a private snapshot. The snapshot is never re-filtered against
the store: items answered during the session do not come back, items that
become due mid-session do not appear, and the progress denominator only
changes when a word is deleted.

Answers are applied to the snapshot immediately and persisted in the
background. A failed write is logged, recorded and published as an event; the
session carries on with its local copy.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import uuid4

from lexicard.application_services.practice.item_sources import ItemSource
from lexicard.domain.learning.events.review_events import (
    PracticeSessionCompletedEvent,
    PracticeSessionStartedEvent,
    ReviewPersistenceFailedEvent,
    ReviewScheduledEvent,
    WordDeletedEvent,
)
from lexicard.domain.learning.models.review_models import PracticeItem, ReviewState
from lexicard.domain.learning.services.estimate_review_time import estimate_all
from lexicard.domain.learning.services.interval_algorithm import schedule_review
from lexicard.domain.learning.services.select_due import select_due
from lexicard.domain.shared.models import DifficultyLevel, Direction
from lexicard.domain.shared.services import BusinessRuleViolationError
from lexicard.infrastructure.messaging.event_bus import DomainEvent, EventBus
from lexicard.infrastructure.repositories.vocab_repository import VocabRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class SessionStatus(str, Enum):
    """Session life cycle."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    COMPLETE = "complete"


class SessionStateError(BusinessRuleViolationError):
    """Raised when an operation is not allowed in the current session state."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "session_state")


@dataclass
class SessionProgress:
    """Progress numbers shown next to the card."""

    session_id: str | None
    direction: Direction
    status: SessionStatus
    total_items: int
    answered_items: int
    remaining_items: int
    current_number: int
    elapsed_seconds: int


@dataclass
class AnswerOutcome:
    """What answering the current item did."""

    item: PracticeItem
    difficulty: DifficultyLevel
    quality: int
    state: ReviewState
    duration: timedelta


@dataclass
class WriteFailure:
    """A review-state write the store rejected."""

    word_id: str
    direction: Direction
    error: Exception


class SessionController:
    """Drives one practice view: snapshot, cursor, answers, deletions.

    With an event bus the controller listens for deleted words from the moment
    it is created. Call ``close()`` when the view is left, otherwise the bus
    keeps the controller alive and it keeps reacting to deletions.
    """

    def __init__(
        self,
        item_source: ItemSource,
        repository: VocabRepository,
        event_bus: EventBus | None = None,
        clock: Clock = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            item_source: Single-list or all-lists source of candidate items
            repository: Store the updated review states are written to
            event_bus: Optional bus for session events and delete notifications
            clock: Returns the current (UTC aware) time
            rng: Random source for the presentation order
        """
        self.item_source = item_source
        self.repository = repository
        self.event_bus = event_bus
        self.clock = clock
        self.rng = rng

        self.status = SessionStatus.UNINITIALIZED
        self.direction = Direction.FORWARD
        self.session_id: str | None = None
        self._snapshot: list[PracticeItem] = []
        self._cursor = 0
        self._answered = False
        self._answered_ids: set[str] = set()
        self._started_at: datetime | None = None
        self._finished_at: datetime | None = None

        self._pending_writes: set[asyncio.Task[None]] = set()
        self.write_failures: list[WriteFailure] = []

        if event_bus is not None:
            event_bus.subscribe(WordDeletedEvent, self._on_word_deleted)

    # -- read-only views -------------------------------------------------

    @property
    def snapshot(self) -> tuple[PracticeItem, ...]:
        return tuple(self._snapshot)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def is_answered(self) -> bool:
        return self._answered

    @property
    def answered_count(self) -> int:
        return len(self._answered_ids)

    @property
    def total(self) -> int:
        return len(self._snapshot)

    @property
    def remaining(self) -> int:
        return max(0, len(self._snapshot) - self._cursor)

    @property
    def current_item(self) -> PracticeItem | None:
        if self.status is not SessionStatus.ACTIVE:
            return None
        return self._snapshot[self._cursor]

    @property
    def pending_writes(self) -> int:
        return len(self._pending_writes)

    def progress(self) -> SessionProgress:
        """Current progress, with elapsed time frozen once the session completes."""
        elapsed = 0
        if self._started_at is not None:
            end = self._finished_at or self.clock()
            elapsed = int((end - self._started_at).total_seconds())
        return SessionProgress(
            session_id=self.session_id,
            direction=self.direction,
            status=self.status,
            total_items=self.total,
            answered_items=self.answered_count,
            remaining_items=self.remaining,
            current_number=min(self._cursor + 1, self.total),
            elapsed_seconds=elapsed,
        )

    def preview(self) -> dict[DifficultyLevel, str]:
        """Next-review labels for each difficulty button of the current item."""
        item = self._require_current()
        return estimate_all(item.review_state(self.direction))

    # -- transitions -----------------------------------------------------

    async def start(self, direction: Direction | None = None) -> int:
        """Capture a new snapshot of due items and start from the first one.

        Args:
            direction: Direction to practice; keeps the current one if None

        Returns:
            Number of items in the snapshot
        """
        if direction is not None:
            self.direction = direction

        # Earlier answers must reach the store before it is read again
        await self.flush()
        items = await self.item_source.load_items()
        now = self.clock()
        self._snapshot = select_due(items, self.direction, now, self.rng)
        self.session_id = str(uuid4())
        self._cursor = 0
        self._answered = False
        self._answered_ids = set()
        self._started_at = now
        self._finished_at = None
        self.status = SessionStatus.ACTIVE

        logger.info(
            f"Session {self.session_id} started with {len(self._snapshot)} "
            f"{self.direction.value} items"
        )
        await self._publish(
            PracticeSessionStartedEvent(
                session_id=self.session_id,
                direction=self.direction.value,
                total_items=len(self._snapshot),
            )
        )
        await self._complete_if_exhausted()
        return len(self._snapshot)

    async def answer(self, difficulty: DifficultyLevel) -> AnswerOutcome:
        """Rate the current item and schedule its next review.

        The snapshot copy is updated right away; the store write runs in the
        background and its failure never blocks the session.

        Raises:
            SessionStateError: When no item is shown or it was already answered
        """
        item = self._require_current()
        if self._answered:
            raise SessionStateError(f"Item {item.id} has already been answered")

        now = self.clock()
        result = schedule_review(item.review_state(self.direction), difficulty, now)
        updated = item.with_review_state(self.direction, result.state)
        self._snapshot[self._cursor] = updated
        self._answered_ids.add(item.id)
        self._answered = True

        logger.debug(
            f"Word {item.id} rated {difficulty.value}, next review in {result.duration}"
        )
        self._dispatch_write(item.id, self.direction, result.state)
        await self._publish(
            ReviewScheduledEvent(
                session_id=self.session_id or "",
                word_id=item.id,
                direction=self.direction.value,
                difficulty=difficulty.value,
                quality=difficulty.quality,
                ease_factor=result.state.ease_factor,
                interval_days=result.state.interval,
                repetitions=result.state.repetitions,
                next_review=result.state.next_review or now,
            )
        )
        return AnswerOutcome(
            item=updated,
            difficulty=difficulty,
            quality=difficulty.quality,
            state=result.state,
            duration=result.duration,
        )

    async def advance(self, skip: bool = False) -> PracticeItem | None:
        """Move to the next item.

        Args:
            skip: Allow moving on without rating the current item

        Returns:
            The new current item, or None when the session is complete

        Raises:
            SessionStateError: When the current item is unanswered and not skipped
        """
        item = self._require_current()
        if not self._answered and not skip:
            raise SessionStateError(f"Item {item.id} must be answered before advancing")

        self._cursor += 1
        self._answered = False
        await self._complete_if_exhausted()
        return self.current_item

    async def remove(self, item_id: str) -> bool:
        """Drop a deleted word from the snapshot.

        Items before the cursor stay passed and the current card keeps being
        shown unless it is the one removed, in which case the next item takes
        its place.

        Returns:
            True if the item was part of the snapshot
        """
        index = next(
            (i for i, item in enumerate(self._snapshot) if item.id == item_id), None
        )
        if index is None:
            return False

        del self._snapshot[index]
        self._answered_ids.discard(item_id)
        if index < self._cursor:
            self._cursor -= 1
        elif index == self._cursor:
            self._answered = False

        logger.info(f"Removed word {item_id}, {len(self._snapshot)} items left")
        if self.status is SessionStatus.ACTIVE:
            await self._complete_if_exhausted()
        return True

    async def restart(self) -> int:
        """Throw away in-session progress and take a fresh snapshot.

        Review states already written to the store are kept.
        """
        return await self.start(self.direction)

    async def change_direction(self, direction: Direction) -> int:
        """Restart the session for another direction."""
        return await self.start(direction)

    async def flush(self) -> list[WriteFailure]:
        """Wait for background writes and return all failures so far."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))
        return list(self.write_failures)

    def close(self) -> None:
        """Detach from the event bus when the practice view is left."""
        if self.event_bus is not None:
            self.event_bus.unsubscribe(WordDeletedEvent, self._on_word_deleted)

    # -- internals -------------------------------------------------------

    def _require_current(self) -> PracticeItem:
        item = self.current_item
        if item is None:
            raise SessionStateError(f"No item to practice (session is {self.status.value})")
        return item

    async def _complete_if_exhausted(self) -> None:
        if self.status is not SessionStatus.ACTIVE or self._cursor < len(self._snapshot):
            return
        self.status = SessionStatus.COMPLETE
        self._cursor = len(self._snapshot)
        self._finished_at = self.clock()
        progress = self.progress()
        logger.info(
            f"Session {self.session_id} complete: {progress.answered_items}/"
            f"{progress.total_items} answered"
        )
        await self._publish(
            PracticeSessionCompletedEvent(
                session_id=self.session_id or "",
                direction=self.direction.value,
                total_items=progress.total_items,
                answered_items=progress.answered_items,
                duration_seconds=progress.elapsed_seconds,
            )
        )

    def _dispatch_write(self, word_id: str, direction: Direction, state: ReviewState) -> None:
        task = asyncio.create_task(self._persist(word_id, direction, state))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _persist(self, word_id: str, direction: Direction, state: ReviewState) -> None:
        try:
            await self.repository.put_review_state(word_id, direction, state)
        except Exception as e:
            logger.warning(f"Could not save review of word {word_id}: {e}")
            self.write_failures.append(WriteFailure(word_id, direction, e))
            await self._publish(
                ReviewPersistenceFailedEvent(
                    session_id=self.session_id or "",
                    word_id=word_id,
                    direction=direction.value,
                    error_message=str(e),
                )
            )

    async def _on_word_deleted(self, event: WordDeletedEvent) -> None:
        await self.remove(event.word_id)

    async def _publish(self, event: DomainEvent) -> None:
        if self.event_bus is None:
            return
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            logger.error(f"Failed to publish event {event.event_name}: {e}")
