# storefront/schemas/cart.py
from typing import Any

from pydantic import TypeAdapter
from sqlmodel import SQLModel, Field

from storefront.schemas.product import Product


class CartLineItem(SQLModel):
    """
    One row of the local cart.

    Everything except `quantity` is a snapshot taken when the product was
    first added and is never re-synced with the catalog.
    Field names are the persisted format of the cart slot.
    """

    product_id: str
    product_name: str | None = None
    quantity: int = Field(ge=1, description="Must be >= 1")
    unit_type: str | None = None
    unit_price: float = Field(
        default=0.0,
        description="Discount price if present else base price, at add-time",
    )
    base_price: float | None = None
    discount_price: float | None = None
    category_name: str | None = None
    image: str | None = None
    is_custom: bool = False
    customizations: Any | None = None

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    @classmethod
    def from_product(
        cls,
        product: Product,
        quantity: int,
        is_custom: bool = False,
        customizations: Any | None = None,
    ) -> "CartLineItem":
        """Snapshot a catalog product into a new line-item."""
        return cls(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_type="list" if is_custom else product.unit_type,
            unit_price=product.effective_price or 0.0,
            base_price=product.base_price,
            discount_price=product.discount_price,
            category_name=product.category_name,
            image=product.first_image,
            is_custom=is_custom,
            customizations=customizations,
        )


# (De)serializer for the whole persisted cart slot
CartItemsAdapter = TypeAdapter(list[CartLineItem])


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.
    """

    product: Product
    quantity: int = Field(default=1, gt=0)
    is_custom: bool = False
    customizations: Any | None = None


class CartItemUpdate(SQLModel):
    """
    Payload for setting the quantity of a cart item.

    Zero or negative quantities remove the item.
    """

    quantity: int


class CartItemRead(SQLModel):
    """
    Read model for a single cart item, including line_total.
    """

    product_id: str
    product_name: str | None = None
    quantity: int
    unit_type: str | None = None
    unit_price: float
    base_price: float | None = None
    discount_price: float | None = None
    category_name: str | None = None
    image: str | None = None
    is_custom: bool = False
    customizations: Any | None = None
    line_total: float


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartItemRead]
    total_quantity: int
    total_price: float
