"""DeleteWord domain service."""

from __future__ import annotations

from dataclasses import dataclass

from lexicard.domain.learning.events.review_events import WordDeletedEvent
from lexicard.domain.shared.services import (
    DomainService,
    ValidationError,
    log_domain_operation,
)
from lexicard.infrastructure.messaging.event_bus import EventBus
from lexicard.infrastructure.repositories.vocab_repository import VocabRepository


@dataclass
class DeleteWordRequest:
    """Request DTO for deleting a word."""

    word_id: str

    def __post_init__(self) -> None:
        if not self.word_id:
            raise ValueError("word_id must not be empty")


@dataclass
class DeleteWordResult:
    word_id: str
    deleted: bool
    list_id: str | None = None


class DeleteWord(DomainService[DeleteWordRequest, DeleteWordResult]):
    """Delete a word from the store and notify open practice sessions.

    Sessions subscribed to ``WordDeletedEvent`` drop the word from their
    snapshot, so a learner deleting the card being shown simply moves on.
    """

    def __init__(self, repository: VocabRepository, event_bus: EventBus) -> None:
        super().__init__(event_bus)
        self.repository = repository

    @log_domain_operation
    async def call(self, request: DeleteWordRequest) -> DeleteWordResult:
        if not isinstance(request, DeleteWordRequest):
            raise ValidationError("Request must be a DeleteWordRequest", "request")

        list_id = await self.repository.delete_word(request.word_id)
        if list_id is None:
            self.logger.warning(f"Word {request.word_id} not found")
            return DeleteWordResult(word_id=request.word_id, deleted=False)

        await self._publish_event(WordDeletedEvent(word_id=request.word_id, list_id=list_id))
        return DeleteWordResult(word_id=request.word_id, deleted=True, list_id=list_id)
