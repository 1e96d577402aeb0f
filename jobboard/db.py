from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

engine = None
SessionLocal = sessionmaker(autoflush=False, autocommit=False)

class Base(DeclarativeBase):
    pass

def init_engine(db_url: str):
    """Create the engine for ``db_url`` and bind ``SessionLocal`` to it."""
    global engine
    kwargs = {"echo": False, "pool_pre_ping": True}
    if db_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty db
            kwargs["poolclass"] = StaticPool
    engine = create_engine(db_url, **kwargs)
    SessionLocal.configure(bind=engine)
    return engine

def utcnow() -> datetime:
    # naive UTC, the way every DateTime column is stored
    return datetime.now(timezone.utc).replace(tzinfo=None)
