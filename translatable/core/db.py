from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from contextlib import contextmanager

from translatable.config.settings import get_settings
from translatable.core.logging import configure_logging

_settings = get_settings()

engine = create_engine(
    _settings.database_url, echo=_settings.database_echo, pool_pre_ping=True, future=True
)
SessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
)

# SQLAlchemy declarative base for models
Base = declarative_base()


def init_db(bind=None) -> None:
    """Set up logging, create the translation tables and hook the sync engine onto SessionLocal."""
    # Imported here so models register on Base before create_all
    from translatable import models  # noqa: F401
    from translatable.services.sync_engine import register_sync_events

    settings = get_settings()
    configure_logging(settings.log_level.value, settings.log_format)

    Base.metadata.create_all(bind or engine)
    register_sync_events(SessionLocal)


@contextmanager
def db_session():
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

