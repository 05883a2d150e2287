import asyncio

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from chatrelay.config import settings


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    if url.startswith("postgresql"):
        return {"options": "-csearch_path=public"}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def init_db():
    """Create any missing tables. Managed databases go through alembic instead."""
    import chatrelay.db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def run_db(fn, *args):
    """Run ``fn(db, *args)`` on a worker thread with a session of its own.

    Keeps store latency off the event loop so one slow query never stalls
    traffic for other sessions.
    """
    def call():
        db = SessionLocal()
        try:
            return fn(db, *args)
        finally:
            db.close()

    return await asyncio.to_thread(call)
