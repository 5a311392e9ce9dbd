# tests/conftest.py
import pytest

from pageqa.context import AppContext
from pageqa.database import init_db, make_engine, make_session_factory
from pageqa.settings import Settings
from pageqa.store import TaskStore

from .fakes import FakeAnswerer, FakeRenderer, RecordingStore


@pytest.fixture()
def settings():
    """In-memory database, no queue configured"""
    return Settings(database_url='sqlite://')


@pytest.fixture()
def engine():
    engine = make_engine('sqlite://')
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def store(session_factory):
    return TaskStore(session_factory)


@pytest.fixture()
def recording_store(session_factory):
    return RecordingStore(session_factory)


@pytest.fixture()
def renderer():
    return FakeRenderer()


@pytest.fixture()
def answerer():
    return FakeAnswerer()


@pytest.fixture()
def context(settings, renderer, answerer):
    ctx = AppContext.from_settings(settings, renderer=renderer, answerer=answerer)
    yield ctx
    ctx.close()
