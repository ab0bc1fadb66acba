# storefront/schemas/product.py
from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class Product(SQLModel):
    """
    Catalog product as handed to the stores by UI callers.

    Only the fields the stores snapshot are declared; anything else the
    catalog sends along (stock, visibility flags, ...) is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str | None = None
    unit_type: str | None = None
    base_price: float | None = None
    discount_price: float | None = None
    category_name: str | None = None
    images: list[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # catalog ids may arrive as integers from the backend
        return str(v) if isinstance(v, int) else v

    @property
    def effective_price(self) -> float | None:
        """Discount price when set (and non-zero), else base price."""
        return self.discount_price or self.base_price

    @property
    def first_image(self) -> str | None:
        return self.images[0] if self.images else None
