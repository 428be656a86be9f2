# citybuild/db/kv_backends.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from citybuild.core.config import Settings
from citybuild.core.errors import StorageUnavailable
from citybuild.db.base import Base
from citybuild.models.storage_entry import StorageEntry


class KeyValueBackend:
    """
    Minimal string -> string store (localStorage semantics).

    Backends may raise; LocalStorageManager is the layer that turns
    failures into defaults.
    """

    available: bool = True

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError


class MemoryBackend(KeyValueBackend):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class UnavailableBackend(KeyValueBackend):
    """No store at all (e.g. server-side render context)."""

    available = False

    def get_item(self, key: str) -> Optional[str]:
        raise StorageUnavailable("Key/value storage is not available.")

    def set_item(self, key: str, value: str) -> None:
        raise StorageUnavailable("Key/value storage is not available.")

    def remove_item(self, key: str) -> None:
        raise StorageUnavailable("Key/value storage is not available.")

    def keys(self) -> List[str]:
        return []


class SqlBackend(KeyValueBackend):
    """Blobs persisted in the `storage_entries` table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get_item(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            return db.execute(
                select(StorageEntry.value).where(StorageEntry.key == key)
            ).scalar_one_or_none()

    def set_item(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            row = db.get(StorageEntry, key)
            if row is None:
                row = StorageEntry(key=key, value=value)
                db.add(row)
            else:
                row.value = value
                row.updated_at = datetime.now(timezone.utc)
            try:
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise

    def remove_item(self, key: str) -> None:
        with self._session_factory() as db:
            db.execute(delete(StorageEntry).where(StorageEntry.key == key))
            db.commit()

    def keys(self) -> List[str]:
        with self._session_factory() as db:
            return list(db.execute(select(StorageEntry.key)).scalars().all())


def build_backend(settings: Settings) -> KeyValueBackend:
    if settings.storage_backend == "unavailable":
        return UnavailableBackend()

    if settings.storage_backend == "sql":
        from citybuild.db.session import make_engine, make_session_factory

        engine = make_engine(settings.database_url)
        # alembic owns the schema in deployed environments; this keeps
        # sqlite/dev databases usable without a migration step
        Base.metadata.create_all(bind=engine)
        return SqlBackend(make_session_factory(engine))

    return MemoryBackend()
