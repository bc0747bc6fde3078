from __future__ import annotations
from functools import lru_cache
from typing import Optional
import os

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from walk_tracker_app.config import get_settings


def make_engine(db_path: str) -> Engine:
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
    return create_engine(f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False})


@lru_cache
def engine_for_path(db_path: str) -> Engine:
    """One engine per absolute database path."""
    return make_engine(db_path)


def get_engine(db_path: Optional[str] = None) -> Engine:
    return engine_for_path(os.path.abspath(db_path or get_settings().db_path))


def init_db(engine: Optional[Engine] = None) -> Engine:
    from walk_tracker_app.models import KeyValue  # ensure table imported
    engine = engine or get_engine()
    SQLModel.metadata.create_all(engine, tables=[KeyValue.__table__])
    return engine


def get_session(engine: Optional[Engine] = None) -> Session:
    return Session(engine or get_engine())
