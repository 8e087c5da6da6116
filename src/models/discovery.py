"""Filter state and result schemas for product discovery."""

from __future__ import annotations

from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from src.config import settings
from src.models.product import Category, Product

ALL_CATEGORIES = "all"

SortKey = Literal["featured", "newest", "price-low", "price-high", "rating", "popular"]

SORT_OPTIONS: dict[SortKey, str] = {
    "featured": "Featured",
    "newest": "Newest",
    "price-low": "Price: Low to High",
    "price-high": "Price: High to Low",
    "rating": "Top Rated",
    "popular": "Most Popular",
}


def default_price_range() -> tuple[float, float]:
    return (0.0, settings.PRICE_RANGE_MAX)


class FilterState(BaseModel):
    """Every user-controlled discovery parameter, passed by value."""

    model_config = ConfigDict(frozen=True)

    search: str = Field("", description="Effective (debounced) search term")
    category: str = Field(
        ALL_CATEGORIES,
        description="Selected category id, or 'all' for no category filter",
    )
    price_range: tuple[float, float] = Field(default_factory=default_price_range)
    min_rating: float = Field(0, ge=0, le=5)
    in_stock_only: bool = False
    new_only: bool = False
    verified_only: bool = False
    materials: tuple[str, ...] = ()
    sort_by: SortKey = "featured"
    page: int = Field(1, ge=1)

    @field_validator("materials")
    @classmethod
    def _unique_materials(cls, values: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(values))

    @model_validator(mode="after")
    def _ordered_price_range(self) -> FilterState:
        low, high = self.price_range
        if low > high:
            raise ValueError("price_range minimum must not exceed maximum")
        return self


class Facets(BaseModel):
    """Filterable values derived from the loaded collection."""

    categories: list[Category] = Field(default_factory=list)
    materials: list[str] = Field(default_factory=list)


class ActiveFilter(BaseModel):
    """A removable chip describing one non-default filter."""

    kind: Literal[
        "category", "price", "rating", "in_stock", "new", "verified", "material"
    ]
    label: str
    value: str | None = None


class DiscoveryPage(BaseModel):
    """Everything the storefront needs to render one page of results."""

    items: list[Product] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Number of products after filtering")
    page: int
    page_size: int
    total_pages: int
    range_start: int = Field(..., description="1-based index of the first item shown")
    range_end: int
    page_numbers: list[int] = Field(default_factory=list)
    sort_by: SortKey
    facets: Facets
    has_active_filters: bool
    active_filters: list[ActiveFilter] = Field(default_factory=list)

    @computed_field
    @property
    def active_filter_count(self) -> int:
        return len(self.active_filters)
