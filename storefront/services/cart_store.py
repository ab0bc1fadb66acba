# storefront/services/cart_store.py
import logging
import threading
from typing import Any, Iterable

from pydantic import ValidationError

from storefront.core.config import get_settings
from storefront.repositories.local_storage_repo import LocalStorageRepository
from storefront.schemas.cart import (
    CartItemRead,
    CartItemsAdapter,
    CartLineItem,
    CartSummary,
)
from storefront.schemas.product import Product

settings = get_settings()
logger = logging.getLogger(__name__)


class CartStore:
    """
    Local shopping cart, mirrored to durable storage on every mutation.

    Responsibilities:
      - keep at most one line-item per product_id (repeat adds merge)
      - snapshot product fields at add-time, never re-sync prices
      - persist a full snapshot after each mutation (best-effort)
      - compute totals on every read

    Storage failures are logged and never raised; the in-memory list is
    the source of truth for the running session.
    """

    def __init__(
        self,
        storage: LocalStorageRepository,
        storage_key: str | None = None,
    ):
        self.storage = storage
        self.storage_key = storage_key or settings.CART_STORAGE_KEY
        # mutations may arrive from FastAPI's threadpool
        self._lock = threading.RLock()
        self._items: list[CartLineItem] = self._load()

    # ---- internal helpers ----

    def _load(self) -> list[CartLineItem]:
        try:
            raw = self.storage.get_item(self.storage_key)
        except Exception:
            logger.exception("Failed to read cart from local storage")
            return []

        if raw is None:
            return []

        try:
            return CartItemsAdapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Failed to parse cart from local storage: {e}")
            return []

    def _persist(self) -> None:
        try:
            payload = CartItemsAdapter.dump_json(self._items).decode()
            self.storage.set_item(self.storage_key, payload)
        except Exception:
            logger.exception("Failed to write cart to local storage")

    def _commit(self, items: list[CartLineItem]) -> None:
        self._items = items
        self._persist()

    def _index_of(self, product_id: str) -> int | None:
        for i, item in enumerate(self._items):
            if item.product_id == product_id:
                return i
        return None

    @staticmethod
    def _merge_duplicates(items: Iterable[CartLineItem]) -> list[CartLineItem]:
        """Collapse rows sharing a product_id, first row wins, quantities sum."""
        merged: dict[str, CartLineItem] = {}
        for item in items:
            existing = merged.get(item.product_id)
            if existing is None:
                merged[item.product_id] = item.model_copy(deep=True)
            else:
                merged[item.product_id] = existing.model_copy(
                    update={"quantity": existing.quantity + item.quantity}
                )
        return list(merged.values())

    # ---- mutations ----

    def add(
        self,
        product: Product,
        quantity: int = 1,
        is_custom: bool = False,
        customizations: Any | None = None,
    ) -> None:
        """
        Add `quantity` of `product`.

        An existing line for the same product only has its quantity
        increased; its price and other snapshot fields stay as they were.

        Raises:
            ValueError: if quantity < 1.
        """
        if quantity < 1:
            raise ValueError("quantity must be >= 1")

        with self._lock:
            idx = self._index_of(product.id)
            items = list(self._items)
            if idx is not None:
                current = items[idx]
                items[idx] = current.model_copy(
                    update={"quantity": current.quantity + quantity}
                )
            else:
                items.append(
                    CartLineItem.from_product(
                        product,
                        quantity,
                        is_custom=is_custom,
                        customizations=customizations,
                    )
                )
            self._commit(items)

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """
        Set the absolute quantity of a line. Zero or negative removes it.
        No-op if the product is not in the cart.
        """
        if quantity <= 0:
            self.remove(product_id)
            return

        with self._lock:
            idx = self._index_of(product_id)
            if idx is None:
                return
            items = list(self._items)
            items[idx] = items[idx].model_copy(update={"quantity": quantity})
            self._commit(items)

    def remove(self, product_id: str) -> None:
        """Remove a line if present (no error if absent)."""
        with self._lock:
            items = [it for it in self._items if it.product_id != product_id]
            if len(items) == len(self._items):
                return
            self._commit(items)

    def clear(self) -> None:
        with self._lock:
            self._commit([])

    def set_items(self, items: Iterable[CartLineItem]) -> None:
        """
        Replace the whole cart (checkout uses this after applying item
        replacements). Rows sharing a product_id are merged.
        """
        with self._lock:
            self._commit(self._merge_duplicates(items))

    def replace_product(self, product_id: str, replacement: Product) -> None:
        """
        Swap the product behind a line for `replacement`, keeping the
        requested quantity and the line's custom flags.

        If the replacement is already in the cart the two lines merge.
        No-op if `product_id` is not in the cart.
        """
        with self._lock:
            idx = self._index_of(product_id)
            if idx is None:
                return
            current = self._items[idx]
            swapped = CartLineItem.from_product(
                replacement,
                current.quantity,
                is_custom=current.is_custom,
                customizations=current.customizations,
            )
            items = list(self._items)
            items[idx] = swapped
            self._commit(self._merge_duplicates(items))

    # ---- derived reads ----

    @property
    def items(self) -> list[CartLineItem]:
        """Copies of the current lines, in insertion order."""
        with self._lock:
            return [it.model_copy(deep=True) for it in self._items]

    def get_item(self, product_id: str) -> CartLineItem | None:
        with self._lock:
            idx = self._index_of(product_id)
            return None if idx is None else self._items[idx].model_copy(deep=True)

    @property
    def total(self) -> float:
        with self._lock:
            return sum((it.unit_price * it.quantity for it in self._items), 0.0)

    @property
    def count(self) -> int:
        with self._lock:
            return sum(it.quantity for it in self._items)

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._items

    def summary(self) -> CartSummary:
        """
        Return full cart summary:
          - list of CartItemRead (with line_total)
          - total_quantity
          - total_price
        """
        with self._lock:
            item_reads = [
                CartItemRead(**it.model_dump(), line_total=it.line_total)
                for it in self._items
            ]
            return CartSummary(
                items=item_reads,
                total_quantity=self.count,
                total_price=self.total,
            )
