"""
Pytest fixtures for the walk tracker tests.
"""
from datetime import datetime

import pytest

from walk_tracker_app.db import init_db, make_engine
from walk_tracker_app.models import Gender, Milestone, MilestoneType, UserProfile, WalkSession, WeightEntry
from walk_tracker_app.storage import MemoryBackend, SqliteBackend, TrackerStore


@pytest.fixture
def memory_store():
    """Best-effort store over an in-memory dict."""
    return TrackerStore(MemoryBackend())


@pytest.fixture
def sqlite_engine(tmp_path):
    """Fresh SQLite file with the keyvalue table created."""
    engine = make_engine(str(tmp_path / "data" / "tracker.db"))
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine):
    return TrackerStore(SqliteBackend(sqlite_engine))


@pytest.fixture(params=["memory", "sqlite"])
def store(request, memory_store, sqlite_store):
    """Run collection tests against both backends."""
    return memory_store if request.param == "memory" else sqlite_store


@pytest.fixture
def profile():
    return UserProfile(
        height=60,
        weight=200,
        age=32,
        gender=Gender.FEMALE,
        target_weight=180,
        weekly_weight_loss_goal=2,
        target_date=datetime(2025, 3, 17),
    )


@pytest.fixture
def walk():
    return WalkSession(
        date=datetime(2025, 1, 6, 7, 30),
        duration=1.0,
        speed=1.5,
        equipment="Bodycraft Spacewalker Treadmill",
        incline=0,
        calories_burned=136.08,
        miles_walked=1.5,
    )


@pytest.fixture
def weight_entry():
    return WeightEntry(date=datetime(2025, 1, 6), weight=199.2, body_fat=38.5)


@pytest.fixture
def milestone():
    return Milestone(
        date=datetime(2025, 1, 20),
        type=MilestoneType.WEIGHT,
        description="First 5 lbs down",
        achieved=True,
    )


@pytest.fixture
def fresh_defaults():
    """Clear cached settings, engines and the default store around a test."""
    from walk_tracker_app import storage
    from walk_tracker_app.config import get_settings
    from walk_tracker_app.db import engine_for_path

    cached = (get_settings, engine_for_path, storage.get_store)
    for fn in cached:
        fn.cache_clear()
    yield
    for fn in cached:
        fn.cache_clear()
