"""
Engine and session handling for signal storage.

The engine is created on first use from DATABASE_ADMIN_URL (or DATABASE_URL),
so importing this module never touches the database. Tests swap in their own
engine with set_engine().
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import Session, sessionmaker

from util.logging_util import setup_logger
from util.secrets import get_database_admin_url

logger = setup_logger(__name__)

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _bind(engine: Engine) -> None:
    global _engine, _session_factory
    _engine = engine
    # Dataclass conversion happens after commit, so keep loaded attributes
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)


def get_engine() -> Engine:
    """Return the shared engine, connecting on first call.

    Raises ConfigurationError if no database URL is configured.
    """
    if _engine is None:
        engine = create_engine(get_database_admin_url(), pool_pre_ping=True)
        logger.info(f"Connecting to {engine.url.render_as_string(hide_password=True)}")
        _bind(engine)
    return _engine


def set_engine(engine: Engine) -> None:
    """Use `engine` for all storage calls (tests use an in-memory SQLite engine)."""
    _bind(engine)


def reset_engine() -> None:
    """Dispose of the current engine; the next call reconnects from configuration."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on any error."""
    if _session_factory is None:
        get_engine()

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
