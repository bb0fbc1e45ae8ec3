"""Engine and session factory for the transfer log and batch tables."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from slot_settlement.core.settings import get_settings


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite files are shared across request threads."""

    connect_args: dict[str, Any] = {}
    if make_url(database_url).get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(bind: Engine) -> sessionmaker[Session]:
    # Services commit explicitly and return ORM rows after commit.
    return sessionmaker(
        bind=bind,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


engine = build_engine(get_settings().database_url)

SessionFactory = build_session_factory(engine)


def get_db_session() -> Generator[Session, None, None]:
    """Yield one session per request."""

    with SessionFactory() as session:
        yield session
