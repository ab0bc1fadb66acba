# storefront/repositories/local_storage_repo.py
from datetime import datetime, timezone

from sqlalchemy.engine import Engine
from sqlmodel import Session

from storefront.models.local_storage import LocalStorageEntry


class LocalStorageRepository:
    """
    Durable key-value slots (the storefront's local storage).

    Responsibilities:
      - Pure DB operations on named string slots
      - No parsing of slot content, no business logic

    Errors from the underlying engine propagate; callers decide
    whether a failed read/write is fatal.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def get_item(self, key: str) -> str | None:
        """Return the slot content, or None if the slot was never written."""
        with Session(self.engine) as session:
            entry = session.get(LocalStorageEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        """Create or overwrite a slot."""
        with Session(self.engine) as session:
            entry = session.get(LocalStorageEntry, key)
            if entry is None:
                entry = LocalStorageEntry(key=key, value=value)
            else:
                entry.value = value
                entry.updated_at = datetime.now(timezone.utc)
            session.add(entry)
            session.commit()

    def remove_item(self, key: str) -> None:
        """Delete a slot; no-op if it does not exist."""
        with Session(self.engine) as session:
            entry = session.get(LocalStorageEntry, key)
            if entry is not None:
                session.delete(entry)
                session.commit()
