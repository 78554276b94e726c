"""Repository interface for the vocabulary store, plus an in-memory store.

The scheduling engine only talks to the store through ``VocabRepository``.
Writes of review states must be idempotent: putting the same state twice
leaves the store as if it had been put once.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable
from uuid import uuid4

from lexicard.domain.learning.models.review_models import (
    ReviewState,
    VocabList,
    VocabWord,
)
from lexicard.domain.shared.models import Direction
from lexicard.domain.shared.services import PersistenceError

logger = logging.getLogger(__name__)


@runtime_checkable
class VocabRepository(Protocol):
    """Async access to lists, words and their review states."""

    async def get_lists(self) -> list[VocabList]: ...

    async def get_list(self, list_id: str) -> VocabList | None: ...

    async def get_review_state(
        self, word_id: str, direction: Direction
    ) -> ReviewState | None: ...

    async def put_review_state(
        self, word_id: str, direction: Direction, state: ReviewState
    ) -> None: ...

    async def delete_word(self, word_id: str) -> str | None:
        """Delete a word and its review states; return its list id."""
        ...


class InMemoryVocabRepository:
    """Dict-backed store, used for tests and for embedding without a database."""

    def __init__(self, lists: list[VocabList] | None = None) -> None:
        self._lists: dict[str, VocabList] = {}
        self._word_list: dict[str, str] = {}
        self._words: dict[str, VocabWord] = {}
        self.write_count = 0
        for vocab_list in lists or []:
            self._add(vocab_list)

    def _add(self, vocab_list: VocabList) -> None:
        self._lists[vocab_list.id] = vocab_list.model_copy(update={"words": []})
        for word in vocab_list.words:
            self._words[word.id] = word
            self._word_list[word.id] = vocab_list.id

    def add_list(self, name: str, language: str | None = None) -> VocabList:
        vocab_list = VocabList(id=str(uuid4()), name=name, language=language)
        self._add(vocab_list)
        return vocab_list

    def add_word(
        self, list_id: str, term: str, translation: str, notes: str | None = None
    ) -> VocabWord:
        if list_id not in self._lists:
            raise PersistenceError(f"List {list_id} not found", "add_word")
        word = VocabWord(id=str(uuid4()), term=term, translation=translation, notes=notes)
        self._words[word.id] = word
        self._word_list[word.id] = list_id
        return word

    def _assemble(self, list_id: str) -> VocabList:
        words = [
            word for word_id, word in self._words.items()
            if self._word_list[word_id] == list_id
        ]
        return self._lists[list_id].model_copy(update={"words": words})

    async def get_lists(self) -> list[VocabList]:
        return [self._assemble(list_id) for list_id in self._lists]

    async def get_list(self, list_id: str) -> VocabList | None:
        if list_id not in self._lists:
            return None
        return self._assemble(list_id)

    async def get_review_state(
        self, word_id: str, direction: Direction
    ) -> ReviewState | None:
        word = self._words.get(word_id)
        return word.review_state(direction) if word else None

    async def put_review_state(
        self, word_id: str, direction: Direction, state: ReviewState
    ) -> None:
        word = self._words.get(word_id)
        if word is None:
            raise PersistenceError(f"Word {word_id} not found", "put_review_state")
        self._words[word_id] = word.with_review_state(direction, state)
        self.write_count += 1

    async def delete_word(self, word_id: str) -> str | None:
        self._words.pop(word_id, None)
        list_id = self._word_list.pop(word_id, None)
        if list_id is None:
            logger.debug(f"Word {word_id} already absent")
        return list_id
