"""Tests for the server entry point."""

from __future__ import annotations

from unittest.mock import MagicMock

from src import main
from src.config import settings


def test_run_serves_the_app_with_uvicorn(monkeypatch):
    serve = MagicMock()
    monkeypatch.setattr(main.uvicorn, "run", serve)

    main.run()

    serve.assert_called_once()
    args, kwargs = serve.call_args
    assert args == ("src.main:app",)
    assert kwargs["host"] == settings.HOST
    assert kwargs["port"] == settings.PORT
    assert kwargs["reload"] is not settings.is_production
