from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ticktask.config import SETTINGS

Base = declarative_base()


def make_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    if url in ("sqlite://", "sqlite:///:memory:"):
        # An in-memory database lives only as long as its one connection.
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, connect_args={"check_same_thread": False})


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False)


engine = make_engine(SETTINGS.database_url)
SessionLocal = make_session_factory(engine)


def create_schema(bind: Engine) -> None:
    from . import models  # noqa: F401

    Base.metadata.create_all(bind)


def init_db() -> None:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))

    if SETTINGS.auto_create_schema:
        create_schema(engine)
