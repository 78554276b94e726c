"""Where a practice session gets its candidate items from.

The same session controller drives both a single-list session and the
"practice everything" session; only the item source differs.
"""

from __future__ import annotations

from typing import Protocol

from lexicard.domain.learning.models.review_models import PracticeItem
from lexicard.domain.learning.services.select_due import flatten_lists
from lexicard.domain.shared.services import BusinessRuleViolationError
from lexicard.infrastructure.repositories.vocab_repository import VocabRepository


class ItemSource(Protocol):
    """Loads the current items, with their review states, from the store."""

    async def load_items(self) -> list[PracticeItem]: ...


class SingleListSource:
    """Items of one vocabulary list."""

    def __init__(self, repository: VocabRepository, list_id: str) -> None:
        self.repository = repository
        self.list_id = list_id

    async def load_items(self) -> list[PracticeItem]:
        vocab_list = await self.repository.get_list(self.list_id)
        if vocab_list is None:
            raise BusinessRuleViolationError(
                f"List {self.list_id} not found", "list_must_exist"
            )
        return flatten_lists([vocab_list])


class AllListsSource:
    """Items of every list, flattened and tagged with their list."""

    def __init__(self, repository: VocabRepository) -> None:
        self.repository = repository

    async def load_items(self) -> list[PracticeItem]:
        return flatten_lists(await self.repository.get_lists())
