"""ASGI entry point: ``uvicorn quickai_service.main:app``."""

import uvicorn

from .api import create_app
from .config import get_settings

app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
