import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base

import config

logger = logging.getLogger(__name__)


def make_engine(url: str):
    if url.startswith("sqlite"):
        # sqlite objects are created in one thread and used in the request threadpool
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=280,   # helps with idle connection timeouts
        pool_size=5,
        max_overflow=10,
    )


engine = make_engine(config.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def init_db(bind=None):
    # models must be imported so their tables are registered on Base.metadata
    import models  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info("Database ready url=%s", bind.url.render_as_string(hide_password=True))


# Database dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping(db) -> bool:
    return db.execute(text("SELECT 1")).scalar() == 1
