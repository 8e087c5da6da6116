"""Product domain models and catalog API schemas."""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

_LEADING_NUMBER = re.compile(
    r"^\s*[+-]?(?:Infinity|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)"
)


def parse_amount(value: str | float | int | None) -> float:
    """Parse a serialized decimal the way the storefront does.

    Leading numeric text is used and trailing garbage ignored ("12.5 INR" is
    12.5) and a leading "Infinity" is accepted. Anything without a numeric
    prefix becomes NaN.
    """
    if value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_NUMBER.match(value)
    if not match:
        return math.nan
    return float(match.group(0))


class CatalogModel(BaseModel):
    """Base for records exchanged with the marketplace (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Category(CatalogModel):
    """Product category as embedded in catalog records."""

    id: str
    name: str
    slug: str | None = None


class CreatorUser(CatalogModel):
    """User account behind a creator profile."""

    id: str | None = None
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value: Any) -> Any:
        return "" if value is None else value


class Creator(CatalogModel):
    """Seller profile embedded in each product."""

    id: str | None = None
    is_verified: bool = False
    followers: int = 0
    user: CreatorUser = Field(default_factory=CreatorUser)

    @field_validator("is_verified", "followers", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return False if info.field_name == "is_verified" else 0
        return value

    @field_validator("user", mode="before")
    @classmethod
    def _null_user(cls, value: Any) -> Any:
        return {} if value is None else value


class Product(CatalogModel):
    """Read-only product record consumed by the discovery engine."""

    id: str
    name: str
    slug: str | None = None
    image: str | None = None
    price: str = Field("", description="Decimal amount serialized as text")
    category_id: str | None = None
    category: Category | None = None
    rating: str = Field("0", description="Average rating 0-5 serialized as text")
    stock: int = Field(0, ge=0)
    is_featured: bool = False
    created_at: datetime | None = None
    materials: list[str] = Field(default_factory=list)
    creator: Creator = Field(default_factory=Creator)

    @field_validator("price", "rating", mode="before")
    @classmethod
    def _amount_as_text(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return "0" if info.field_name == "rating" else ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("stock", mode="before")
    @classmethod
    def _null_stock(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("is_featured", mode="before")
    @classmethod
    def _null_featured(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("materials", mode="before")
    @classmethod
    def _null_materials(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("creator", mode="before")
    @classmethod
    def _null_creator(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _fill_category_id(self) -> Product:
        if self.category_id is None and self.category is not None:
            self.category_id = self.category.id
        return self

    @property
    def price_amount(self) -> float:
        return parse_amount(self.price)

    @property
    def rating_value(self) -> float:
        return parse_amount(self.rating)


class CatalogEntry(BaseModel):
    """One element of the marketplace's GET /api/products response."""

    product: dict[str, Any]
    category: Category | None = None
    creator: dict[str, Any] | None = None
    user: dict[str, Any] | None = None

    @field_validator("category", mode="before")
    @classmethod
    def _unjoined_category(cls, value: Any) -> Any:
        if isinstance(value, dict) and value.get("id") is None:
            return None
        return value

    def to_product(self) -> Product:
        """Flatten the joined rows into a single product record."""

        creator = dict(self.creator or {})
        creator["user"] = self.user or {}
        return Product.model_validate(
            {
                **self.product,
                "category": self.category,
                "creator": creator,
            }
        )


class CatalogResponse(BaseModel):
    """Envelope returned by the marketplace product listing."""

    success: bool
    pagination: dict[str, Any] | None = None
    data: list[CatalogEntry] = Field(default_factory=list)
    message: str | None = None
