from typing import Optional

import uvicorn
from fastapi import FastAPI

from .config import Settings, get_settings
from .logging_config import setup_logging
from .routers import webhook
from .services.notifier import Notifier, PushoverNotifier
from .services.pipeline import BatchProcessor


def create_app(settings: Optional[Settings] = None, notifier: Optional[Notifier] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Task Notifier", version="1.0.0")
    app.state.settings = settings
    app.state.processor = BatchProcessor(settings, notifier or PushoverNotifier(settings))
    app.include_router(webhook.router)
    return app


def run():
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    uvicorn.run(create_app(settings), host=settings.listen_host, port=settings.listen_port, log_config=None)


if __name__ == "__main__":
    run()
