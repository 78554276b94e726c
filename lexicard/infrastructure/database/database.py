"""SQLite-backed vocabulary store."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from sqlalchemy import create_engine, event, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker
from sqlalchemy.pool import StaticPool

from lexicard.domain.learning.models.learning_models import (
    ReviewStateRecord,
    VocabListRecord,
    VocabWordRecord,
)
from lexicard.domain.learning.models.review_models import (
    ReviewState,
    VocabList,
    VocabWord,
)
from lexicard.domain.shared.models import Base, Direction
from lexicard.domain.shared.services import PersistenceError

logger = logging.getLogger(__name__)


def _to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class DatabaseManager:
    """Owns the SQLAlchemy engine and hands out transactional sessions."""

    def __init__(self, db_path: str | Path = "data/lexicard.db") -> None:
        """Initialize database manager.

        Args:
            db_path: Path to the SQLite database file, or ":memory:".
        """
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

        @event.listens_for(self.engine, "connect")
        def set_sqlite_pragma(dbapi_connection: Any, _: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database initialized at {self.db_path}")

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Yield a session that commits on success and rolls back on error."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


class SqlVocabRepository:
    """``VocabRepository`` implementation on top of ``DatabaseManager``."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        self.db_manager = db_manager

    @contextmanager
    def _session(self, operation: str) -> Generator[Session, None, None]:
        try:
            with self.db_manager.get_session() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error during {operation}: {e}")
            raise PersistenceError(str(e), operation) from e

    def add_list(self, name: str, language: str | None = None) -> VocabList:
        with self._session("add_list") as session:
            record = VocabListRecord(id=str(uuid4()), name=name, language=language)
            session.add(record)
        return VocabList(id=record.id, name=name, language=language)

    def add_word(
        self, list_id: str, term: str, translation: str, notes: str | None = None
    ) -> VocabWord:
        with self._session("add_word") as session:
            if session.get(VocabListRecord, list_id) is None:
                raise PersistenceError(f"List {list_id} not found", "add_word")
            record = VocabWordRecord(
                id=str(uuid4()),
                list_id=list_id,
                term=term,
                translation=translation,
                notes=notes,
            )
            session.add(record)
        return VocabWord(id=record.id, term=term, translation=translation, notes=notes)

    async def get_lists(self) -> list[VocabList]:
        with self._session("get_lists") as session:
            records = session.scalars(
                select(VocabListRecord)
                .options(
                    selectinload(VocabListRecord.words).selectinload(
                        VocabWordRecord.review_states
                    )
                )
                .order_by(VocabListRecord.created_at)
            ).all()
            return [self._to_list(record) for record in records]

    async def get_list(self, list_id: str) -> VocabList | None:
        with self._session("get_list") as session:
            record = session.get(VocabListRecord, list_id)
            return self._to_list(record) if record else None

    async def get_review_state(
        self, word_id: str, direction: Direction
    ) -> ReviewState | None:
        with self._session("get_review_state") as session:
            record = self._find_state(session, word_id, direction)
            return self._to_state(record) if record else None

    async def put_review_state(
        self, word_id: str, direction: Direction, state: ReviewState
    ) -> None:
        with self._session("put_review_state") as session:
            if session.get(VocabWordRecord, word_id) is None:
                raise PersistenceError(f"Word {word_id} not found", "put_review_state")
            record = self._find_state(session, word_id, direction)
            if record is None:
                record = ReviewStateRecord(word_id=word_id, direction=direction.value)
                session.add(record)
            record.ease_factor = state.ease_factor
            record.interval = state.interval
            record.repetitions = state.repetitions
            record.next_review = _to_naive_utc(state.next_review)
            record.last_reviewed = _to_naive_utc(state.last_reviewed)

    async def delete_word(self, word_id: str) -> str | None:
        with self._session("delete_word") as session:
            record = session.get(VocabWordRecord, word_id)
            if record is None:
                return None
            list_id = record.list_id
            session.delete(record)
            return list_id

    @staticmethod
    def _find_state(
        session: Session, word_id: str, direction: Direction
    ) -> ReviewStateRecord | None:
        return session.scalars(
            select(ReviewStateRecord).filter_by(
                word_id=word_id, direction=direction.value
            )
        ).first()

    @staticmethod
    def _to_state(record: ReviewStateRecord) -> ReviewState:
        return ReviewState(
            ease_factor=record.ease_factor,
            interval=record.interval,
            repetitions=record.repetitions,
            next_review=record.next_review,
            last_reviewed=record.last_reviewed,
        )

    def _to_list(self, record: VocabListRecord) -> VocabList:
        words = [
            VocabWord(
                id=word.id,
                term=word.term,
                translation=word.translation,
                notes=word.notes,
                review_states={
                    Direction(state.direction): self._to_state(state)
                    for state in word.review_states
                },
            )
            for word in record.words
        ]
        return VocabList(
            id=record.id, name=record.name, language=record.language, words=words
        )
