# pageqa/database.py
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_engine(database_url, echo=False):
    """Build the engine; in-memory SQLite shares one connection across threads"""
    if database_url.startswith('sqlite'):
        kwargs = {'connect_args': {'check_same_thread': False}}
        if ':memory:' in database_url or database_url == 'sqlite://':
            kwargs['poolclass'] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def make_session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def get_db_context(session_factory):
    """Context manager for a single unit of work, rolled back on error"""
    db = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine):
    """Create all tables"""
    # Register models on Base.metadata
    from pageqa import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
