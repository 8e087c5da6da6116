"""Tests for product records and filter state validation."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from src.models.discovery import FilterState
from src.models.product import CatalogEntry, Product, parse_amount
from src.services.discovery.recency import is_product_new

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("19.99", 19.99),
        ("  42", 42.0),
        ("12.5 INR", 12.5),
        (".5", 0.5),
        (7, 7.0),
        ("Infinity", math.inf),
        ("-Infinity items", -math.inf),
    ],
)
def test_parse_amount_reads_leading_number(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "INR 12", None])
def test_parse_amount_without_number_is_nan(raw):
    assert math.isnan(parse_amount(raw))


def test_product_accepts_camel_case_and_fills_defaults():
    product = Product.model_validate(
        {
            "id": "prod-1",
            "name": "Walnut Board",
            "price": 35,
            "categoryId": "cat-wood",
            "rating": None,
            "stock": None,
            "isFeatured": None,
            "materials": None,
            "creator": None,
            "createdAt": "2025-05-20T10:00:00",
        }
    )

    assert product.price == "35"
    assert product.rating == "0"
    assert product.stock == 0
    assert product.is_featured is False
    assert product.materials == []
    assert product.creator.followers == 0
    assert product.creator.is_verified is False
    assert product.creator.user.name == ""
    assert product.created_at.tzinfo is UTC


def test_product_serializes_with_camel_case_aliases():
    product = Product(id="p", name="n", price="1", category_id="c", is_featured=True)

    dumped = product.model_dump(by_alias=True)

    assert dumped["categoryId"] == "c"
    assert dumped["isFeatured"] is True


def test_catalog_entry_flattens_joined_rows():
    entry = CatalogEntry.model_validate(
        {
            "product": {
                "id": "prod-9",
                "name": "Indigo Scarf",
                "price": "640.00",
                "rating": 4.2,
                "stock": 3,
                "categoryId": "cat-textile",
                "materials": ["Cotton"],
                "created_at": "2025-05-30T08:00:00.000Z",
            },
            "category": {"id": "cat-textile", "name": "Textiles", "slug": "textiles"},
            "creator": {"id": "cr-1", "followers": 88, "isVerified": True},
            "user": {"id": "u-1", "name": "Asha Weaves", "email": "a@example.com"},
        }
    )

    product = entry.to_product()

    assert product.category.name == "Textiles"
    assert product.rating == "4.2"
    assert product.creator.user.name == "Asha Weaves"
    assert product.creator.followers == 88
    assert product.created_at == datetime(2025, 5, 30, 8, 0, tzinfo=UTC)


def test_catalog_entry_without_joined_category():
    entry = CatalogEntry.model_validate(
        {
            "product": {"id": "p", "name": "n", "price": "1", "categoryId": "c-1"},
            "category": {"id": None, "name": None},
            "creator": None,
            "user": None,
        }
    )

    product = entry.to_product()

    assert product.category is None
    assert product.category_id == "c-1"


def test_category_id_falls_back_to_embedded_category():
    product = Product.model_validate(
        {"id": "p", "name": "n", "price": "1", "category": {"id": "c", "name": "C"}}
    )

    assert product.category_id == "c"


def test_filter_state_defaults():
    state = FilterState()

    assert state.category == "all"
    assert state.price_range == (0, 1000)
    assert state.sort_by == "featured"
    assert state.page == 1


def test_filter_state_rejects_inverted_price_range():
    with pytest.raises(ValidationError):
        FilterState(price_range=(500, 100))


def test_filter_state_rejects_unknown_sort_key():
    with pytest.raises(ValidationError):
        FilterState(sort_by="cheapest")


def test_filter_state_rejects_page_zero():
    with pytest.raises(ValidationError):
        FilterState(page=0)


def test_filter_state_materials_keep_first_occurrence():
    state = FilterState(materials=["Clay", "Wood", "Clay"])

    assert state.materials == ("Clay", "Wood")


def test_is_product_new_window():
    assert is_product_new(NOW - timedelta(days=15), now=NOW)
    assert not is_product_new(NOW - timedelta(days=15, seconds=1), now=NOW)
    assert is_product_new(NOW + timedelta(days=1), now=NOW)
    assert not is_product_new(None, now=NOW)


def test_is_product_new_treats_naive_timestamps_as_utc():
    naive = datetime(2025, 5, 30, 12, 0)

    assert is_product_new(naive, now=NOW)
    assert not is_product_new(naive, now=NOW, window=timedelta(days=1))
