"""Pure search, filter, sort and pagination over an in-memory product collection.

Nothing in this module performs I/O. Given the same collection and the same
``FilterState`` every function returns the same result in the same order, so
callers may re-run the whole pipeline on each user action.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from datetime import datetime
from functools import cmp_to_key

from src.config import settings
from src.models.discovery import (
    ALL_CATEGORIES,
    ActiveFilter,
    DiscoveryPage,
    Facets,
    FilterState,
    SortKey,
    default_price_range,
)
from src.models.product import Category, Product
from src.services.discovery.recency import is_product_new

logger = logging.getLogger(__name__)

NewPredicate = Callable[[datetime | None], bool]


def derive_facets(products: Sequence[Product]) -> Facets:
    """Collect the categories and materials present in ``products``."""

    categories: dict[str, Category] = {}
    materials: set[str] = set()
    for product in products:
        category = _category_of(product)
        if category is not None and category.id not in categories:
            categories[category.id] = category
        materials.update(product.materials)

    return Facets(
        categories=sorted(
            categories.values(), key=lambda c: (c.name.casefold(), c.name)
        ),
        materials=sorted(materials),
    )


def _category_of(product: Product) -> Category | None:
    if product.category is not None:
        return product.category
    if product.category_id:
        return Category(id=product.category_id, name=product.category_id)
    return None


def matches(
    product: Product,
    state: FilterState,
    is_new: NewPredicate = is_product_new,
) -> bool:
    """Return True when ``product`` passes every active predicate of ``state``."""

    if state.search:
        term = state.search.lower()
        if (
            term not in product.name.lower()
            and term not in product.creator.user.name.lower()
        ):
            return False

    if state.category != ALL_CATEGORIES and product.category_id != state.category:
        return False

    # NaN fails both comparisons, so unparseable amounts drop out here.
    low, high = state.price_range
    if not low <= product.price_amount <= high:
        return False

    if not product.rating_value >= state.min_rating:
        return False

    if state.in_stock_only and product.stock == 0:
        return False

    if state.new_only and not is_new(product.created_at):
        return False

    if state.verified_only and not product.creator.is_verified:
        return False

    if state.materials and not any(m in product.materials for m in state.materials):
        return False

    return True


def filter_products(
    products: Sequence[Product],
    state: FilterState,
    is_new: NewPredicate = is_product_new,
) -> list[Product]:
    """Keep the products matching ``state``, preserving collection order."""

    return [product for product in products if matches(product, state, is_new)]


def _sign(delta: float) -> int:
    # NaN deltas compare equal, leaving the pair in input order.
    if delta > 0:
        return 1
    if delta < 0:
        return -1
    return 0


def _by_price_low(a: Product, b: Product) -> int:
    return _sign(a.price_amount - b.price_amount)


def _by_price_high(a: Product, b: Product) -> int:
    return _sign(b.price_amount - a.price_amount)


def _by_rating(a: Product, b: Product) -> int:
    return _sign(b.rating_value - a.rating_value)


def _by_newest(a: Product, b: Product) -> int:
    if a.created_at is None or b.created_at is None:
        return 0
    return _sign((b.created_at - a.created_at).total_seconds())


def _by_popularity(a: Product, b: Product) -> int:
    return _sign((b.creator.followers or 0) - (a.creator.followers or 0))


def _by_featured(a: Product, b: Product) -> int:
    if a.is_featured == b.is_featured:
        return 0
    return 1 if b.is_featured else -1


_COMPARATORS: dict[str, Callable[[Product, Product], int]] = {
    "price-low": _by_price_low,
    "price-high": _by_price_high,
    "rating": _by_rating,
    "newest": _by_newest,
    "popular": _by_popularity,
    "featured": _by_featured,
}


def sort_products(products: Sequence[Product], sort_by: SortKey) -> list[Product]:
    """Return a stably sorted copy of ``products``.

    Unknown keys fall back to the featured ordering.
    """
    comparator = _COMPARATORS.get(sort_by, _by_featured)
    return sorted(products, key=cmp_to_key(comparator))


def total_pages_for(count: int, page_size: int) -> int:
    return math.ceil(count / page_size)


def paginate(
    products: Sequence[Product],
    page: int,
    page_size: int | None = None,
) -> tuple[list[Product], int]:
    """Slice out one 1-based page and report how many pages exist.

    Pages past the end are not clamped; they come back empty.
    """
    size = settings.DISCOVERY_PAGE_SIZE if page_size is None else page_size
    if size < 1:
        raise ValueError("page_size must be positive")
    start = (page - 1) * size
    return list(products[start : start + size]), total_pages_for(len(products), size)


def page_numbers(total_pages: int, shown: int | None = None) -> list[int]:
    """Page links offered to the shopper: always the leading pages."""

    limit = shown or settings.PAGE_LINKS_SHOWN
    return list(range(1, min(limit, total_pages) + 1))


def has_active_filters(state: FilterState) -> bool:
    """True when any filter (not sort or page) differs from its default."""

    low, high = default_price_range()
    return (
        state.category != ALL_CATEGORIES
        or state.price_range[0] != low
        or state.price_range[1] != high
        or state.min_rating > 0
        or state.search != ""
        or state.in_stock_only
        or state.new_only
        or state.verified_only
        or len(state.materials) > 0
    )


def _format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def active_filters(
    state: FilterState,
    categories: Sequence[Category] = (),
) -> list[ActiveFilter]:
    """Describe each non-default filter as a removable chip.

    The search term is not a chip; it stays visible in the search box.
    """
    chips: list[ActiveFilter] = []

    if state.category != ALL_CATEGORIES:
        names = {c.id: c.name for c in categories}
        chips.append(
            ActiveFilter(
                kind="category",
                label=names.get(state.category, state.category),
                value=state.category,
            )
        )

    if state.price_range != default_price_range():
        low, high = state.price_range
        chips.append(
            ActiveFilter(
                kind="price",
                label=f"₹{_format_amount(low)} - ₹{_format_amount(high)}",
            )
        )

    if state.min_rating > 0:
        chips.append(
            ActiveFilter(kind="rating", label=f"{_format_amount(state.min_rating)}★+")
        )

    if state.in_stock_only:
        chips.append(ActiveFilter(kind="in_stock", label="In Stock"))
    if state.new_only:
        chips.append(ActiveFilter(kind="new", label="New"))
    if state.verified_only:
        chips.append(ActiveFilter(kind="verified", label="Verified"))

    for material in state.materials:
        chips.append(ActiveFilter(kind="material", label=material, value=material))

    return chips


def discover(
    products: Sequence[Product],
    state: FilterState,
    *,
    is_new: NewPredicate = is_product_new,
    page_size: int | None = None,
) -> DiscoveryPage:
    """Run filter -> sort -> paginate and derive facets for one view."""

    size = settings.DISCOVERY_PAGE_SIZE if page_size is None else page_size
    facets = derive_facets(products)
    ordered = sort_products(filter_products(products, state, is_new), state.sort_by)
    items, total_pages = paginate(ordered, state.page, size)

    logger.debug(
        "Discovery matched %d of %d products (page %d/%d)",
        len(ordered),
        len(products),
        state.page,
        total_pages,
    )

    return DiscoveryPage(
        items=items,
        total=len(ordered),
        page=state.page,
        page_size=size,
        total_pages=total_pages,
        range_start=(state.page - 1) * size + 1 if items else 0,
        range_end=min(state.page * size, len(ordered)),
        page_numbers=page_numbers(total_pages),
        sort_by=state.sort_by,
        facets=facets,
        has_active_filters=has_active_filters(state),
        active_filters=active_filters(state, facets.categories),
    )
