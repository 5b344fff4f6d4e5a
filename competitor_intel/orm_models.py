"""
SQLAlchemy ORM models for the competitor intelligence pipeline.

These models are internal to the database layer. The public interface
uses the dataclass models from models.py.
"""

import json
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from competitor_intel.models import (
    Competitor,
    Signal,
    UserPreferences,
    UserProfile,
)


class JSONEncodedList(TypeDecorator):
    """Represents a list as a JSON-encoded string."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[List], dialect) -> Optional[str]:
        if value is None or value == []:
            return None
        return json.dumps(value)

    def process_result_value(self, value: Optional[str], dialect) -> List:
        if value is None:
            return []
        return json.loads(value)


class Base(DeclarativeBase):
    pass


class UserProfileORM(Base):
    """SQLAlchemy model for user_profiles table."""

    __tablename__ = "user_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)


class CompetitorORM(Base):
    """SQLAlchemy model for competitors table."""

    __tablename__ = "competitors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    website: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rss_feeds: Mapped[List[str]] = mapped_column(JSONEncodedList, nullable=True)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_competitors_user_id", "user_id"),
    )


class UserPreferencesORM(Base):
    """SQLAlchemy model for user_preferences table."""

    __tablename__ = "user_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    signal_types: Mapped[List[str]] = mapped_column(JSONEncodedList, nullable=True)
    delivery_email: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    delivery_dashboard: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    check_frequency_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    email_digest_frequency_hours: Mapped[int] = mapped_column(Integer, nullable=False)


class SignalORM(Base):
    """SQLAlchemy model for signals table."""

    __tablename__ = "signals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    competitor_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    signal_type: Mapped[str] = mapped_column(Text, nullable=False)
    sentiment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source_url: Mapped[str] = mapped_column(Text, nullable=False)
    source_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_high_priority: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    notified_at: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    content_hash: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("content_hash", name="uq_signals_content_hash"),
        Index("idx_signals_user_created", "user_id", "created_at"),
        Index("idx_signals_competitor_id", "competitor_id"),
    )


# Conversion functions between ORM models and dataclasses


def competitor_orm_to_dataclass(orm: CompetitorORM) -> Competitor:
    """Convert a CompetitorORM instance to a Competitor dataclass."""
    return Competitor(
        id=orm.id,
        user_id=orm.user_id,
        name=orm.name,
        website=orm.website,
        rss_feeds=orm.rss_feeds or [],
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


def signal_orm_to_dataclass(orm: SignalORM) -> Signal:
    """Convert a SignalORM instance to a Signal dataclass."""
    return Signal(
        id=orm.id,
        competitor_id=orm.competitor_id,
        user_id=orm.user_id,
        title=orm.title,
        summary=orm.summary,
        signal_type=orm.signal_type,
        sentiment=orm.sentiment,
        source_url=orm.source_url,
        source_name=orm.source_name,
        is_high_priority=bool(orm.is_high_priority),
        published_at=orm.published_at,
        created_at=orm.created_at,
        notified_at=orm.notified_at,
        content_hash=orm.content_hash,
    )


def signal_dataclass_to_orm(signal: Signal, created_at: int) -> SignalORM:
    """Convert a Signal dataclass to a SignalORM instance."""
    return SignalORM(
        competitor_id=signal.competitor_id,
        user_id=signal.user_id,
        title=signal.title,
        summary=signal.summary,
        signal_type=signal.signal_type,
        sentiment=signal.sentiment,
        source_url=signal.source_url,
        source_name=signal.source_name,
        is_high_priority=signal.is_high_priority,
        published_at=signal.published_at,
        created_at=created_at,
        notified_at=signal.notified_at,
        content_hash=signal.content_hash,
    )


def preferences_orm_to_dataclass(orm: UserPreferencesORM) -> UserPreferences:
    """Convert a UserPreferencesORM instance to a UserPreferences dataclass."""
    return UserPreferences(
        id=orm.id,
        user_id=orm.user_id,
        signal_types=orm.signal_types or [],
        delivery_email=bool(orm.delivery_email),
        delivery_dashboard=bool(orm.delivery_dashboard),
        check_frequency_hours=orm.check_frequency_hours,
        email_digest_frequency_hours=orm.email_digest_frequency_hours,
    )


def profile_orm_to_dataclass(orm: UserProfileORM) -> UserProfile:
    """Convert a UserProfileORM instance to a UserProfile dataclass."""
    return UserProfile(id=orm.id, email=orm.email, created_at=orm.created_at)
