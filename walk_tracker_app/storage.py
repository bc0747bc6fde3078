"""
Local persistence for the tracker.

Each record kind lives under its own string key as one JSON document (an
array of records, or a single object for the profile). Every save or delete
is a read-modify-write of the whole collection; there is no locking, so two
writers racing on the same key can drop a write.

When the backend is missing or unreachable the store either degrades
(reads come back empty, writes are dropped and logged) or raises
StorageUnavailableError, depending on ``strict``.
"""
from __future__ import annotations

import json
import logging
import uuid
from functools import lru_cache
from typing import Dict, List, Optional, Type, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlmodel import SQLModel

from walk_tracker_app.config import get_settings
from walk_tracker_app.db import get_engine, get_session, init_db
from walk_tracker_app.models import KeyValue, Milestone, UserProfile, WalkSession, WeightEntry

logger = logging.getLogger(__name__)

# Store keys
USER_PROFILE_KEY = "standing-desk-tracker-profile"
WEIGHT_ENTRIES_KEY = "standing-desk-tracker-weight"
WALK_SESSIONS_KEY = "standing-desk-tracker-walks"
MILESTONES_KEY = "standing-desk-tracker-milestones"

R = TypeVar("R", bound=SQLModel)

# Marks a read that failed in best-effort mode, as opposed to a missing key
_UNREADABLE = object()


class StorageError(Exception):
    """Base class for storage failures."""


class StorageUnavailableError(StorageError):
    """The backing store cannot be reached."""


# ---- Backends ----------------------------------------------------------------

class StorageBackend:
    """Minimal string key-value interface."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryBackend(StorageBackend):
    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class SqliteBackend(StorageBackend):
    """Key-value rows in the ``keyvalue`` table, one short session per call."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def get(self, key: str) -> Optional[str]:
        try:
            with get_session(self.engine) as sess:
                row = sess.get(KeyValue, key)
                return row.value if row else None
        except OperationalError as e:
            raise StorageUnavailableError(str(e)) from e

    def set(self, key: str, value: str) -> None:
        try:
            with get_session(self.engine) as sess:
                row = sess.get(KeyValue, key)
                if not row:
                    row = KeyValue(key=key, value=value)
                row.value = value
                sess.add(row)
                sess.commit()
        except OperationalError as e:
            raise StorageUnavailableError(str(e)) from e

    def delete(self, key: str) -> None:
        try:
            with get_session(self.engine) as sess:
                row = sess.get(KeyValue, key)
                if row:
                    sess.delete(row)
                    sess.commit()
        except OperationalError as e:
            raise StorageUnavailableError(str(e)) from e


# ---- Store -------------------------------------------------------------------

class TrackerStore:
    """CRUD over the four record collections."""

    def __init__(self, backend: Optional[StorageBackend], strict: bool = False):
        self.backend = backend
        self.strict = strict

    # -- raw access with the degrade/raise policy --

    def _unavailable(self, action: str, key: str, err: Optional[Exception] = None) -> None:
        if self.strict:
            if err is not None:
                raise err
            raise StorageUnavailableError(f"no storage backend to {action} {key!r}")
        logger.warning("Storage unavailable, %s of %s skipped%s", action, key, f": {err}" if err else "")

    def _read_raw(self, key: str):
        """Stored text, None when absent, or _UNREADABLE when the read degraded."""
        if self.backend is None:
            self._unavailable("read", key)
            return _UNREADABLE
        try:
            return self.backend.get(key)
        except StorageUnavailableError as e:
            self._unavailable("read", key, e)
            return _UNREADABLE

    def _read(self, key: str) -> Optional[str]:
        data = self._read_raw(key)
        return None if data is _UNREADABLE else data

    def _write(self, key: str, value: str) -> None:
        if self.backend is None:
            self._unavailable("write", key)
            return
        try:
            self.backend.set(key, value)
            logger.debug("Wrote %s (%d bytes)", key, len(value))
        except StorageUnavailableError as e:
            self._unavailable("write", key, e)

    # -- collections --

    def _parse(self, data: Optional[str], model: Type[R]) -> List[R]:
        if not data:
            return []
        # corrupted JSON or records propagate to the caller
        return [model.model_validate(item) for item in json.loads(data)]

    def _load(self, key: str, model: Type[R]) -> List[R]:
        return self._parse(self._read(key), model)

    def _load_for_update(self, key: str, model: Type[R], action: str) -> Optional[List[R]]:
        """Collection to rewrite, or None when it could not be read.

        A collection that could not be read is never written back.
        """
        data = self._read_raw(key)
        if data is _UNREADABLE:
            logger.warning("Dropping %s on %s: collection could not be read", action, key)
            return None
        return self._parse(data, model)

    def _dump(self, key: str, records: List[R]) -> None:
        self._write(key, json.dumps([r.model_dump(mode="json") for r in records]))

    def _save(self, key: str, model: Type[R], record: R) -> R:
        if not record.id:
            record.id = str(uuid.uuid4())
        records = self._load_for_update(key, model, "save")
        if records is None:
            return record
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                break
        else:
            records.append(record)
        self._dump(key, records)
        return record

    def _delete(self, key: str, model: Type[R], record_id: str) -> None:
        records = self._load_for_update(key, model, "delete")
        if records is None:
            return
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            logger.debug("Delete of %s from %s matched nothing", record_id, key)
        self._dump(key, remaining)

    # -- user profile --

    def save_user_profile(self, profile: UserProfile) -> UserProfile:
        if not profile.id:
            profile.id = str(uuid.uuid4())
        self._write(USER_PROFILE_KEY, profile.model_dump_json())
        return profile

    def get_user_profile(self) -> Optional[UserProfile]:
        data = self._read(USER_PROFILE_KEY)
        if not data:
            return None
        return UserProfile.model_validate(json.loads(data))

    # -- weight entries --

    def save_weight_entry(self, entry: WeightEntry) -> WeightEntry:
        return self._save(WEIGHT_ENTRIES_KEY, WeightEntry, entry)

    def get_weight_entries(self) -> List[WeightEntry]:
        return self._load(WEIGHT_ENTRIES_KEY, WeightEntry)

    def delete_weight_entry(self, entry_id: str) -> None:
        self._delete(WEIGHT_ENTRIES_KEY, WeightEntry, entry_id)

    # -- walk sessions --

    def save_walk_session(self, session: WalkSession) -> WalkSession:
        return self._save(WALK_SESSIONS_KEY, WalkSession, session)

    def get_walk_sessions(self) -> List[WalkSession]:
        return self._load(WALK_SESSIONS_KEY, WalkSession)

    def delete_walk_session(self, session_id: str) -> None:
        self._delete(WALK_SESSIONS_KEY, WalkSession, session_id)

    # -- milestones --

    def save_milestone(self, milestone: Milestone) -> Milestone:
        return self._save(MILESTONES_KEY, Milestone, milestone)

    def get_milestones(self) -> List[Milestone]:
        return self._load(MILESTONES_KEY, Milestone)

    def delete_milestone(self, milestone_id: str) -> None:
        self._delete(MILESTONES_KEY, Milestone, milestone_id)


@lru_cache
def get_store() -> TrackerStore:
    """Process-wide store on the configured SQLite file."""
    settings = get_settings()
    try:
        backend: Optional[StorageBackend] = SqliteBackend(init_db(get_engine(settings.db_path)))
    except (OSError, OperationalError) as e:
        if settings.strict_storage:
            raise StorageUnavailableError(str(e)) from e
        logger.warning("Could not open %s, running without persistence: %s", settings.db_path, e)
        backend = None
    return TrackerStore(backend, strict=settings.strict_storage)


# ---- Module-level shortcuts on the default store -----------------------------

def save_user_profile(profile: UserProfile) -> UserProfile:
    return get_store().save_user_profile(profile)


def get_user_profile() -> Optional[UserProfile]:
    return get_store().get_user_profile()


def save_weight_entry(entry: WeightEntry) -> WeightEntry:
    return get_store().save_weight_entry(entry)


def get_weight_entries() -> List[WeightEntry]:
    return get_store().get_weight_entries()


def delete_weight_entry(entry_id: str) -> None:
    get_store().delete_weight_entry(entry_id)


def save_walk_session(session: WalkSession) -> WalkSession:
    return get_store().save_walk_session(session)


def get_walk_sessions() -> List[WalkSession]:
    return get_store().get_walk_sessions()


def delete_walk_session(session_id: str) -> None:
    get_store().delete_walk_session(session_id)


def save_milestone(milestone: Milestone) -> Milestone:
    return get_store().save_milestone(milestone)


def get_milestones() -> List[Milestone]:
    return get_store().get_milestones()


def delete_milestone(milestone_id: str) -> None:
    get_store().delete_milestone(milestone_id)
