# storefront/schemas/wishlist.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel

from storefront.schemas.product import Product


class WishlistEntryCreate(SQLModel):
    """
    Payload sent to the remote Wishlist collection on toggle-add.

    Product fields are snapshots captured at toggle time.
    """

    user_email: str
    product_id: str
    product_name: str | None = None
    product_image: str = ""
    product_price: float | None = None

    @classmethod
    def from_product(cls, user_email: str, product: Product) -> "WishlistEntryCreate":
        return cls(
            user_email=user_email,
            product_id=product.id,
            product_name=product.name,
            product_image=product.first_image or "",
            product_price=product.effective_price,
        )


class WishlistEntry(WishlistEntryCreate):
    """A wishlist row as stored remotely (id assigned by the remote store)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    created_date: datetime | None = None

    @field_validator("id", "product_id", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        return str(v) if isinstance(v, int) else v


class WishlistSummary(SQLModel):
    """
    Current cached view of the signed-in user's wishlist.
    """

    items: list[WishlistEntry]
    count: int


class WishlistStatus(SQLModel):
    product_id: str
    wishlisted: bool


class WishlistToggleResult(SQLModel):
    """
    Response for a toggle request.

    status:
      - "removing": a remote delete was issued
      - "adding": a remote create was issued
    """

    product_id: str
    status: str
