"""SQLAlchemy tables backing the SQLite vocabulary store."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from lexicard.domain.shared.models import Base


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class VocabListRecord(Base):
    """A vocabulary list."""

    __tablename__ = "vocab_lists"

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    language = Column(String(20))
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    words = relationship(
        "VocabWordRecord",
        back_populates="vocab_list",
        cascade="all, delete-orphan",
        order_by="VocabWordRecord.created_at",
    )


class VocabWordRecord(Base):
    """A vocabulary pair inside a list."""

    __tablename__ = "vocab_words"

    id = Column(String(36), primary_key=True)
    list_id = Column(
        String(36), ForeignKey("vocab_lists.id", ondelete="CASCADE"), nullable=False
    )
    term = Column(String(500), nullable=False)
    translation = Column(String(500), nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, default=_utcnow)

    vocab_list = relationship("VocabListRecord", back_populates="words")
    review_states = relationship(
        "ReviewStateRecord",
        back_populates="word",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_vocab_words_list", "list_id"),)


class ReviewStateRecord(Base):
    """SM-2 state of one word in one direction."""

    __tablename__ = "review_states"

    id = Column(Integer, primary_key=True)
    word_id = Column(
        String(36), ForeignKey("vocab_words.id", ondelete="CASCADE"), nullable=False
    )
    direction = Column(String(10), nullable=False)  # 'forward' or 'reverse'
    ease_factor = Column(Float, nullable=False, default=2.5)
    interval = Column(Float, nullable=False, default=0.0)  # days
    repetitions = Column(Integer, nullable=False, default=0)
    next_review = Column(DateTime)  # NULL = due now
    last_reviewed = Column(DateTime)

    word = relationship("VocabWordRecord", back_populates="review_states")

    __table_args__ = (
        UniqueConstraint("word_id", "direction"),
        Index("idx_review_states_next_review", "next_review"),
    )
