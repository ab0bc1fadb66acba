"""Shared pytest fixtures for storefront tests."""

import asyncio
import itertools
import os

# Settings are read at import time by most modules.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("LOCAL_STORAGE_URL", "sqlite://")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from storefront.database import create_db_and_tables
from storefront.repositories.local_storage_repo import LocalStorageRepository
from storefront.schemas.product import Product
from storefront.schemas.user import CurrentUser
from storefront.schemas.wishlist import WishlistEntry, WishlistEntryCreate


class FakeWishlistRepo:
    """In-memory stand-in for the remote Wishlist collection."""

    def __init__(self, rows: list[WishlistEntry] | None = None):
        self.rows: list[WishlistEntry] = list(rows or [])
        self.filter_calls: list[str] = []
        self.create_calls: list[WishlistEntryCreate] = []
        self.delete_calls: list[str] = []
        self.fail_writes = False
        self.fail_reads = False
        # set to an asyncio.Event to hold writes until released
        self.gate: asyncio.Event | None = None
        # set to an asyncio.Event to hold reads after they snapshot the rows
        self.read_gate: asyncio.Event | None = None
        self._ids = itertools.count(1)

    async def filter(self, *, user_email: str) -> list[WishlistEntry]:
        self.filter_calls.append(user_email)
        rows = [r for r in self.rows if r.user_email == user_email]
        if self.read_gate is not None:
            await self.read_gate.wait()
        await asyncio.sleep(0)
        if self.fail_reads:
            raise ConnectionError("remote store unreachable")
        return rows

    async def create(self, payload: WishlistEntryCreate) -> WishlistEntry:
        self.create_calls.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        if self.fail_writes:
            raise ConnectionError("remote store unreachable")
        entry = WishlistEntry(id=f"Wishlist_{next(self._ids)}", **payload.model_dump())
        self.rows.append(entry)
        return entry

    async def delete(self, entry_id: str) -> None:
        self.delete_calls.append(entry_id)
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        if self.fail_writes:
            raise ConnectionError("remote store unreachable")
        self.rows = [r for r in self.rows if r.id != entry_id]


class FakeAuth:
    """Authentication oracle double that records redirects."""

    def __init__(self, user: CurrentUser | None = None, broken: bool = False):
        self.user = user
        self.broken = broken
        self.redirects = 0

    async def is_authenticated(self) -> bool:
        if self.broken:
            raise ConnectionError("auth service unreachable")
        return self.user is not None

    async def me(self) -> CurrentUser | None:
        return self.user

    def redirect_to_login(self, url: str | None = None) -> None:
        self.redirects += 1

    async def sign_in(self, email: str, password: str) -> CurrentUser | None:
        if password != "secret":
            raise PermissionError("Invalid login credentials")
        self.user = CurrentUser(id="user-2", email=email)
        return self.user

    async def sign_out(self) -> None:
        self.user = None


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    return engine


@pytest.fixture
def storage(engine):
    return LocalStorageRepository(engine)


@pytest.fixture
def user():
    return CurrentUser(id="user-1", email="asha@example.com", name="asha")


@pytest.fixture
def auth(user):
    return FakeAuth(user)


@pytest.fixture
def wishlist_repo():
    return FakeWishlistRepo()


@pytest.fixture
def tomatoes():
    return Product(
        id="prod_1",
        name="Fresh Tomatoes",
        unit_type="kg",
        base_price=120,
        discount_price=100,
        category_name="Fresh Vegetables",
        images=["https://img.example/tomato.jpg"],
    )


@pytest.fixture
def milk():
    return Product(
        id="prod_8",
        name="Fresh Milk",
        unit_type="liter",
        base_price=80,
        category_name="Dairy Products",
    )
