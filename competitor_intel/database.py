"""
Database operations for the competitor intelligence pipeline.

Uses SQLAlchemy ORM for database access. The public API uses dataclass models
from models.py, with conversion to/from ORM models handled internally.
"""

import time
from typing import Dict, Iterable, List, Optional

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError

from competitor_intel.db_engine import get_engine, get_session
from competitor_intel.models import (
    Competitor,
    DigestRecipient,
    Signal,
    UserPreferences,
    UserProfile,
)
from competitor_intel.orm_models import (
    Base,
    CompetitorORM,
    SignalORM,
    UserPreferencesORM,
    UserProfileORM,
    competitor_orm_to_dataclass,
    preferences_orm_to_dataclass,
    profile_orm_to_dataclass,
    signal_dataclass_to_orm,
    signal_orm_to_dataclass,
)
from util.logging_util import setup_logger

logger = setup_logger(__name__)


def init_db():
    """Initialize the database schema."""
    engine = get_engine()
    Base.metadata.create_all(engine)


# Competitors


def insert_competitor(competitor: Competitor) -> int:
    """Insert a new competitor. Returns the competitor id."""
    now = int(time.time())
    orm = CompetitorORM(
        user_id=competitor.user_id,
        name=competitor.name,
        website=competitor.website,
        rss_feeds=competitor.rss_feeds if competitor.rss_feeds else None,
        created_at=competitor.created_at or now,
        updated_at=competitor.updated_at or now,
    )
    with get_session() as session:
        session.add(orm)
        session.flush()
        return orm.id


def list_competitors() -> List[Competitor]:
    """Get every tracked competitor across all users."""
    with get_session() as session:
        stmt = select(CompetitorORM).order_by(CompetitorORM.id.asc())
        orms = session.execute(stmt).scalars().all()
        return [competitor_orm_to_dataclass(orm) for orm in orms]


def list_competitors_for_user(user_id: int) -> List[Competitor]:
    """Get the competitors tracked by one user."""
    with get_session() as session:
        stmt = (
            select(CompetitorORM)
            .where(CompetitorORM.user_id == user_id)
            .order_by(CompetitorORM.id.asc())
        )
        orms = session.execute(stmt).scalars().all()
        return [competitor_orm_to_dataclass(orm) for orm in orms]


def get_competitors_by_ids(competitor_ids: Iterable[int]) -> Dict[int, Competitor]:
    """Get competitors keyed by id. Unknown ids are left out."""
    ids = list(set(competitor_ids))
    if not ids:
        return {}
    with get_session() as session:
        stmt = select(CompetitorORM).where(CompetitorORM.id.in_(ids))
        orms = session.execute(stmt).scalars().all()
        return {orm.id: competitor_orm_to_dataclass(orm) for orm in orms}


# Signals


def signal_exists(content_hash: str) -> bool:
    """Check if a signal with this content hash has already been stored."""
    with get_session() as session:
        stmt = select(exists().where(SignalORM.content_hash == content_hash))
        return session.execute(stmt).scalar()


def insert_signal_if_absent(signal: Signal) -> Optional[int]:
    """Insert a signal unless one with the same content hash exists.

    The unique constraint on content_hash makes this safe when two runs
    overlap. Returns the new signal id, or None if the hash was taken.
    """
    created_at = signal.created_at or int(time.time())
    orm = signal_dataclass_to_orm(signal, created_at)

    try:
        with get_session() as session:
            session.add(orm)
            session.flush()
            return orm.id
    except IntegrityError:
        logger.debug(f"Signal with content hash {signal.content_hash} already exists")
        return None


def get_signal_by_id(signal_id: int) -> Optional[Signal]:
    """Get a signal by its database ID."""
    with get_session() as session:
        orm = session.get(SignalORM, signal_id)
        if orm is None:
            return None
        return signal_orm_to_dataclass(orm)


def get_undelivered_signals(user_id: int, since: int) -> List[Signal]:
    """Get a user's signals not yet sent in a digest, created at or after `since`.

    Newest first.
    """
    with get_session() as session:
        stmt = (
            select(SignalORM)
            .where(
                SignalORM.user_id == user_id,
                SignalORM.notified_at.is_(None),
                SignalORM.created_at >= since,
            )
            .order_by(SignalORM.created_at.desc(), SignalORM.id.desc())
        )
        orms = session.execute(stmt).scalars().all()
        return [signal_orm_to_dataclass(orm) for orm in orms]


def get_recent_signals(user_id: int, since: int, competitor_id: Optional[int] = None) -> List[Signal]:
    """Get a user's signals created at or after `since`, newest first.

    Optionally restricted to a single competitor.
    """
    with get_session() as session:
        stmt = select(SignalORM).where(
            SignalORM.user_id == user_id,
            SignalORM.created_at >= since,
        )
        if competitor_id is not None:
            stmt = stmt.where(SignalORM.competitor_id == competitor_id)
        stmt = stmt.order_by(SignalORM.created_at.desc(), SignalORM.id.desc())
        orms = session.execute(stmt).scalars().all()
        return [signal_orm_to_dataclass(orm) for orm in orms]


def mark_signals_notified(signal_ids: List[int], notified_at: Optional[int] = None) -> int:
    """Set notified_at on all the given signals in one update.

    Returns the number of rows updated.
    """
    if not signal_ids:
        return 0
    notified_at = notified_at or int(time.time())
    with get_session() as session:
        stmt = (
            update(SignalORM)
            .where(SignalORM.id.in_(signal_ids))
            .values(notified_at=notified_at)
        )
        result = session.execute(stmt)
        return result.rowcount


# Users and preferences


def upsert_user_profile(user_id: int, email: str) -> None:
    """Create a user profile, or update the email of an existing one."""
    with get_session() as session:
        orm = session.get(UserProfileORM, user_id)
        if orm is None:
            session.add(UserProfileORM(id=user_id, email=email, created_at=int(time.time())))
        else:
            orm.email = email


def get_user_profile(user_id: int) -> Optional[UserProfile]:
    with get_session() as session:
        orm = session.get(UserProfileORM, user_id)
        if orm is None:
            return None
        return profile_orm_to_dataclass(orm)


def get_user_preferences(user_id: int) -> Optional[UserPreferences]:
    """Get a user's preferences, or None if they never saved any."""
    with get_session() as session:
        stmt = select(UserPreferencesORM).where(UserPreferencesORM.user_id == user_id)
        orm = session.execute(stmt).scalar_one_or_none()
        if orm is None:
            return None
        return preferences_orm_to_dataclass(orm)


def upsert_user_preferences(preferences: UserPreferences) -> int:
    """Save a user's preferences, replacing any previous record.

    Returns the preferences id.
    """
    with get_session() as session:
        stmt = select(UserPreferencesORM).where(UserPreferencesORM.user_id == preferences.user_id)
        orm = session.execute(stmt).scalar_one_or_none()
        if orm is None:
            orm = UserPreferencesORM(user_id=preferences.user_id)
            session.add(orm)
        orm.signal_types = list(preferences.signal_types)
        orm.delivery_email = preferences.delivery_email
        orm.delivery_dashboard = preferences.delivery_dashboard
        orm.check_frequency_hours = preferences.check_frequency_hours
        orm.email_digest_frequency_hours = preferences.email_digest_frequency_hours
        session.flush()
        return orm.id


def list_digest_recipients() -> List[DigestRecipient]:
    """Get every user with email delivery enabled, with their email address.

    Users without a profile have nowhere to send to and are left out.
    """
    with get_session() as session:
        stmt = (
            select(UserPreferencesORM, UserProfileORM)
            .outerjoin(UserProfileORM, UserProfileORM.id == UserPreferencesORM.user_id)
            .where(UserPreferencesORM.delivery_email.is_(True))
            .order_by(UserPreferencesORM.user_id.asc())
        )
        recipients = []
        for prefs_orm, profile_orm in session.execute(stmt).all():
            if profile_orm is None or not profile_orm.email:
                logger.warning(f"User {prefs_orm.user_id} has email delivery enabled but no email address")
                continue
            recipients.append(DigestRecipient(
                preferences=preferences_orm_to_dataclass(prefs_orm),
                email=profile_orm.email,
            ))
        return recipients
