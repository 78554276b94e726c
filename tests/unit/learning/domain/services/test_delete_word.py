"""Tests for the DeleteWord domain service."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, Mock

import pytest
from helpers import make_list, make_word

from lexicard.domain.learning.events.review_events import WordDeletedEvent
from lexicard.domain.learning.services.delete_word import (
    DeleteWord,
    DeleteWordRequest,
    DeleteWordResult,
)
from lexicard.domain.shared.services import ValidationError
from lexicard.infrastructure.messaging.event_bus import EventBus
from lexicard.infrastructure.repositories.vocab_repository import InMemoryVocabRepository


class TestDeleteWordRequest:
    def test_empty_word_id_is_rejected(self):
        with pytest.raises(ValueError, match="word_id must not be empty"):
            DeleteWordRequest(word_id="")


class TestDeleteWord:
    @pytest.fixture
    def repository(self):
        return InMemoryVocabRepository([make_list("list-1", [make_word("w1"), make_word("w2")])])

    @pytest.fixture
    def event_bus(self):
        return EventBus()

    @pytest.fixture
    def service(self, repository, event_bus):
        return DeleteWord(repository, event_bus)

    @pytest.mark.asyncio
    async def test_deletes_word_and_publishes_event(self, service, repository, event_bus):
        handler = Mock()
        event_bus.subscribe(WordDeletedEvent, handler)

        result = await service.call(DeleteWordRequest(word_id="w1"))

        assert result == DeleteWordResult(word_id="w1", deleted=True, list_id="list-1")
        vocab_list = await repository.get_list("list-1")
        assert [word.id for word in vocab_list.words] == ["w2"]
        handler.assert_called_once()
        event = handler.call_args.args[0]
        assert event.word_id == "w1"
        assert event.list_id == "list-1"

    @pytest.mark.asyncio
    async def test_unknown_word_publishes_nothing(self, service, event_bus, caplog):
        handler = Mock()
        event_bus.subscribe(WordDeletedEvent, handler)

        with caplog.at_level(logging.WARNING):
            result = await service.call(DeleteWordRequest(word_id="ghost"))

        assert not result.deleted
        assert result.list_id is None
        handler.assert_not_called()
        assert "Word ghost not found" in caplog.text

    @pytest.mark.asyncio
    async def test_rejects_wrong_request_type(self, service):
        with pytest.raises(ValidationError):
            await service.call({"word_id": "w1"})

    @pytest.mark.asyncio
    async def test_publish_failure_is_logged_not_raised(self, repository, caplog):
        event_bus = Mock()
        event_bus.publish = AsyncMock(side_effect=RuntimeError("bus down"))
        service = DeleteWord(repository, event_bus)

        result = await service.call(DeleteWordRequest(word_id="w1"))

        assert result.deleted
        assert "Failed to publish event WordDeletedEvent: bus down" in caplog.text
