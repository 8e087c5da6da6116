"""FastAPI application entry point."""

import uvicorn

from src.application import create_app
from src.config import settings

app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""

    uvicorn.run(
        "src.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=not settings.is_production,
        log_config=None,
    )


if __name__ == "__main__":
    run()


__all__ = ["app", "run"]
