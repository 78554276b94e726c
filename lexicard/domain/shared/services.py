"""Domain service base classes and the shared error taxonomy.

Each domain service encapsulates a single business operation behind an async
``call`` method and publishes domain events through the in-memory event bus.
"""

from __future__ import annotations

import functools
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from lexicard.infrastructure.messaging.event_bus import DomainEvent, EventBus

logger = logging.getLogger(__name__)

T = TypeVar("T")  # Request type
U = TypeVar("U")  # Response type


class DomainService(ABC, Generic[T, U]):
    """Base class for all domain services.

    Each domain service should:
    - Use Verb + Noun naming (e.g., DeleteWord)
    - Expose only a single `call` method as the primary operation
    - Emit domain events for cross-context communication
    """

    def __init__(self, event_bus: EventBus) -> None:
        """Initialize domain service with event bus.

        Args:
            event_bus: Event bus for publishing domain events
        """
        self.event_bus = event_bus
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def call(self, request: T) -> U:
        """Single entry point for domain service execution."""

    async def _publish_event(self, event: DomainEvent) -> None:
        """Publish a domain event, logging instead of raising on failure.

        Args:
            event: Domain event to publish
        """
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            self.logger.error(f"Failed to publish event {type(event).__name__}: {e}")


class DomainServiceError(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        """Initialize domain service error.

        Args:
            message: Human-readable error message
            error_code: Optional machine-readable error code
        """
        super().__init__(message)
        self.error_code = error_code


class ValidationError(DomainServiceError):
    """Raised when input data does not meet domain constraints."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Human-readable error message
            field: Optional field name that failed validation
        """
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class BusinessRuleViolationError(DomainServiceError):
    """Raised when an operation violates a domain rule."""

    def __init__(self, message: str, rule: str | None = None) -> None:
        """Initialize business rule violation error.

        Args:
            message: Human-readable error message
            rule: Optional name of the violated business rule
        """
        super().__init__(message, "BUSINESS_RULE_VIOLATION")
        self.rule = rule


class PersistenceError(DomainServiceError):
    """Raised by a store adapter when a read or write fails.

    Recoverable: practice sessions keep going on their local copy.
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message, "PERSISTENCE_ERROR")
        self.operation = operation


def log_domain_operation(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to log domain service operations with their duration."""

    @functools.wraps(func)
    async def wrapper(self: Any, request: Any) -> Any:
        operation_name = f"{self.__class__.__name__}.call"
        self.logger.info(f"Starting {operation_name}")

        start_time = time.time()
        try:
            result = await func(self, request)
            duration = time.time() - start_time
            self.logger.info(f"Completed {operation_name} in {duration:.3f}s")
            return result
        except Exception as e:
            duration = time.time() - start_time
            self.logger.error(f"Failed {operation_name} after {duration:.3f}s: {e}")
            raise

    return wrapper
