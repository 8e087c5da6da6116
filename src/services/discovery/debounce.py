"""Two-stage search input: the raw keystrokes and the term actually searched."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from src.config import settings

logger = logging.getLogger(__name__)


class SearchDebouncer:
    """Promote the raw search input to the effective term after a quiet period.

    ``raw`` changes on every keystroke; ``effective`` only changes once no new
    input arrived for ``delay_seconds``. Outside a running event loop there is
    no timer, so the value is promoted at once.
    """

    def __init__(
        self,
        delay_seconds: float | None = None,
        on_change: Callable[[str], None] | None = None,
    ) -> None:
        self.delay_seconds = (
            settings.search_debounce_seconds if delay_seconds is None else delay_seconds
        )
        self.raw = ""
        self.effective = ""
        self._on_change = on_change
        self._pending: asyncio.Task[None] | None = None

    @property
    def is_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def set(self, raw: str) -> None:
        """Record new input and restart the quiet-period timer."""

        self.raw = raw
        self._cancel_pending()
        if self.delay_seconds <= 0:
            self._promote()
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._promote()
            return
        self._pending = loop.create_task(self._promote_later())

    def flush(self) -> None:
        """Promote the current raw input immediately."""

        self._cancel_pending()
        self._promote()

    def cancel(self) -> None:
        """Drop any pending promotion, keeping the effective term as is."""

        self._cancel_pending()

    async def wait(self) -> None:
        """Wait until no promotion is pending."""

        while self.is_pending:
            task = self._pending
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                # Superseded by newer input; keep waiting on the replacement.
                if not task.cancelled():
                    raise

    async def _promote_later(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        self._pending = None
        self._promote()

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _promote(self) -> None:
        if self.raw == self.effective:
            return
        self.effective = self.raw
        logger.debug("Search term settled on %r", self.effective)
        if self._on_change is not None:
            self._on_change(self.effective)
