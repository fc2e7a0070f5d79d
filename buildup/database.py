"""Process-wide database handle.

The engine is created on first use and reused for the lifetime of the
process; ``dispose_engine`` is called from the application shutdown hook.
Request handlers get their session through the ``get_db`` dependency.
"""
import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from buildup.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


@lru_cache
def get_engine():
    database_url = get_settings().database_url
    engine = create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {}
    )
    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


@lru_cache
def get_sessionmaker():
    return sessionmaker(bind=get_engine(), autocommit=False, autoflush=False)


def init_db():
    # models must be registered on Base before create_all
    import buildup.models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def dispose_engine():
    if get_engine.cache_info().currsize:
        get_engine().dispose()
        logger.info("Database engine disposed")
    get_sessionmaker.cache_clear()
    get_engine.cache_clear()


def get_db():
    db = get_sessionmaker()()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
