"""Stateful owner of one shopper's discovery controls."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

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
from src.models.product import Product
from src.services.discovery import engine
from src.services.discovery.debounce import SearchDebouncer
from src.services.discovery.engine import NewPredicate
from src.services.discovery.recency import is_product_new

logger = logging.getLogger(__name__)


class DiscoverySession:
    """Holds the loaded collection and the current ``FilterState``.

    Each action replaces one field of the state. Only typing a search,
    picking a category and clearing everything send the shopper back to
    page 1; the other controls keep the current page.
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        *,
        search_delay_seconds: float | None = None,
        is_new: NewPredicate = is_product_new,
        page_size: int | None = None,
    ) -> None:
        self.state = FilterState()
        self.page_size = page_size or settings.DISCOVERY_PAGE_SIZE
        self._is_new = is_new
        self._debouncer = SearchDebouncer(
            delay_seconds=search_delay_seconds,
            on_change=self._apply_search,
        )
        self._products: list[Product] = []
        self._facets = Facets()
        self.replace_products(products)

    @property
    def products(self) -> list[Product]:
        return list(self._products)

    @property
    def facets(self) -> Facets:
        return self._facets

    @property
    def debouncer(self) -> SearchDebouncer:
        return self._debouncer

    @property
    def search_input(self) -> str:
        return self._debouncer.raw

    @property
    def total_pages(self) -> int:
        matched = engine.filter_products(self._products, self.state, self._is_new)
        return engine.total_pages_for(len(matched), self.page_size)

    @property
    def has_active_filters(self) -> bool:
        return engine.has_active_filters(self.state)

    def replace_products(self, products: Iterable[Product]) -> None:
        """Swap in a freshly loaded collection and rebuild the facets."""

        self._products = list(products)
        self._facets = engine.derive_facets(self._products)
        logger.debug("Session loaded %d products", len(self._products))

    def view(self) -> DiscoveryPage:
        return engine.discover(
            self._products,
            self.state,
            is_new=self._is_new,
            page_size=self.page_size,
        )

    def set_search(self, raw: str) -> None:
        self._debouncer.set(raw)
        self._update(page=1)

    def select_category(self, category_id: str) -> None:
        self._update(category=category_id, page=1)

    def set_price_range(self, low: float, high: float) -> None:
        self._update(price_range=(low, high))

    def set_min_rating(self, rating: float) -> None:
        self._update(min_rating=rating)

    def set_in_stock_only(self, enabled: bool) -> None:
        self._update(in_stock_only=enabled)

    def set_new_only(self, enabled: bool) -> None:
        self._update(new_only=enabled)

    def set_verified_only(self, enabled: bool) -> None:
        self._update(verified_only=enabled)

    def toggle_material(self, material: str) -> None:
        selected = self.state.materials
        if material in selected:
            self._update(materials=tuple(m for m in selected if m != material))
        else:
            self._update(materials=(*selected, material))

    def set_sort(self, sort_by: SortKey) -> None:
        self._update(sort_by=sort_by)

    def go_to_page(self, page: int) -> None:
        self._update(page=page)

    def previous_page(self) -> None:
        self._update(page=max(1, self.state.page - 1))

    def next_page(self) -> None:
        self._update(page=max(1, min(self.total_pages, self.state.page + 1)))

    def remove_filter(self, chip: ActiveFilter) -> None:
        """Undo the filter a chip from ``view().active_filters`` stands for."""

        if chip.kind == "category":
            self._update(category=ALL_CATEGORIES)
        elif chip.kind == "price":
            self._update(price_range=default_price_range())
        elif chip.kind == "rating":
            self._update(min_rating=0)
        elif chip.kind == "in_stock":
            self._update(in_stock_only=False)
        elif chip.kind == "new":
            self._update(new_only=False)
        elif chip.kind == "verified":
            self._update(verified_only=False)
        elif chip.kind == "material" and chip.value in self.state.materials:
            self.toggle_material(chip.value)

    def clear_all(self) -> None:
        """Reset every filter and return to page 1; the sort order is kept."""

        self._debouncer.set("")
        self._debouncer.flush()
        self.state = FilterState(sort_by=self.state.sort_by)

    def _apply_search(self, term: str) -> None:
        self._update(search=term)

    def _update(self, **changes: Any) -> None:
        # model_copy skips validation; rebuild so bounds are still enforced.
        self.state = FilterState.model_validate(
            {**self.state.model_dump(), **changes}
        )
