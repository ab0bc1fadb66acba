# storefront/models/local_storage.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class LocalStorageEntry(SQLModel, table=True):
    """
    One named slot of durable local storage.

    Values are opaque strings (the cart stores a JSON array here).
    Each slot has a single owner; the cart never shares its key.
    """

    __tablename__ = "local_storage"

    key: str = Field(
        primary_key=True,
        max_length=100,
        description="Slot name, e.g. 'dang-cart'",
    )

    value: str = Field(
        description="Serialized slot content",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write timestamp (UTC)",
    )
