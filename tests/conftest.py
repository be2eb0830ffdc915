import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from translatable.core.db import Base
from translatable.core.locale import Translator, set_translator
from translatable.services.sync_engine import register_sync_events, unregister_sync_events

import tests.fixture_models  # noqa: F401  registers test tables on Base


@pytest.fixture(autouse=True)
def translator():
    translator = Translator(default_locale="en")
    set_translator(translator)
    yield translator
    set_translator(None)


@pytest.fixture(scope="function")
def engine():
    # In-memory SQLite for fast testing
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    register_sync_events(factory)
    yield factory
    unregister_sync_events(factory)


@pytest.fixture(scope="function")
def session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
