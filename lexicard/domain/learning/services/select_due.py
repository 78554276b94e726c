"""Due-item selection for practice sessions."""

from __future__ import annotations

import random
from collections.abc import Iterable
from datetime import datetime

from lexicard.domain.learning.models.review_models import PracticeItem, VocabList
from lexicard.domain.shared.models import Direction


def is_due(item: PracticeItem, direction: Direction, now: datetime) -> bool:
    """An item is due when it has no state, no review time, or the time has passed."""
    state = item.review_state(direction)
    return state is None or state.is_due(now)


def select_due(
    items: Iterable[PracticeItem],
    direction: Direction,
    now: datetime,
    rng: random.Random | None = None,
) -> list[PracticeItem]:
    """Return the due items for a direction in a freshly shuffled order.

    Args:
        items: Candidate items (from one list or flattened from many)
        direction: Direction being practiced; the other one is ignored
        now: Current time
        rng: Random source, injectable for reproducible ordering

    Returns:
        New list of due items; the input is left untouched
    """
    due = [item for item in items if is_due(item, direction, now)]
    (rng or random).shuffle(due)
    return due


def count_due(items: Iterable[PracticeItem], now: datetime) -> dict[Direction, int]:
    """Count due items for both directions at once."""
    counts = dict.fromkeys(Direction, 0)
    for item in items:
        for direction in Direction:
            if is_due(item, direction, now):
                counts[direction] += 1
    return counts


def flatten_lists(lists: Iterable[VocabList]) -> list[PracticeItem]:
    """Turn lists into practice items tagged with their source list."""
    return [
        PracticeItem(word=word, list_id=vocab_list.id, list_name=vocab_list.name)
        for vocab_list in lists
        for word in vocab_list.words
    ]
