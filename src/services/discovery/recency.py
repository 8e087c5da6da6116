"""Decides whether a product still counts as a new arrival."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from src.config import settings


def new_product_window() -> timedelta:
    return timedelta(days=settings.NEW_PRODUCT_WINDOW_DAYS)


def is_product_new(
    created_at: datetime | None,
    now: datetime | None = None,
    window: timedelta | None = None,
) -> bool:
    """Return True when the product was created within the new-arrival window.

    Products without a creation timestamp are never new. Future timestamps
    count as new.
    """
    if created_at is None:
        return False
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    current = now or datetime.now(UTC)
    if current.tzinfo is None:
        current = current.replace(tzinfo=UTC)
    return current - created_at <= (window or new_product_window())
