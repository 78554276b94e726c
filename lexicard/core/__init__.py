"""Core scheduling engine exports."""

from lexicard.application_services.practice.item_sources import (
    AllListsSource,
    ItemSource,
    SingleListSource,
)
from lexicard.application_services.practice.session_controller import (
    AnswerOutcome,
    SessionController,
    SessionProgress,
    SessionStateError,
    SessionStatus,
)
from lexicard.domain.learning.models.review_models import (
    PracticeItem,
    ReviewState,
    VocabList,
    VocabWord,
)
from lexicard.domain.learning.services.estimate_review_time import (
    estimate,
    estimate_all,
    format_duration,
)
from lexicard.domain.learning.services.interval_algorithm import (
    IntervalResult,
    calculate_next_interval,
    schedule_review,
)
from lexicard.domain.learning.services.select_due import (
    count_due,
    flatten_lists,
    select_due,
)
from lexicard.domain.shared.models import DifficultyLevel, Direction
from lexicard.domain.shared.services import (
    BusinessRuleViolationError,
    DomainServiceError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    # Data model
    "Direction",
    "DifficultyLevel",
    "ReviewState",
    "VocabWord",
    "VocabList",
    "PracticeItem",
    # Scheduling
    "IntervalResult",
    "calculate_next_interval",
    "schedule_review",
    "select_due",
    "count_due",
    "flatten_lists",
    "estimate",
    "estimate_all",
    "format_duration",
    # Sessions
    "ItemSource",
    "SingleListSource",
    "AllListsSource",
    "SessionController",
    "SessionStatus",
    "SessionProgress",
    "SessionStateError",
    "AnswerOutcome",
    # Errors
    "DomainServiceError",
    "ValidationError",
    "BusinessRuleViolationError",
    "PersistenceError",
]
