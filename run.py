"""Process entry point for the Products API.

This script connects to the document store and then serves the API
with uvicorn.  The store connection is established *before* the server
starts listening: if it fails the error is logged and the process
exits with status 1 instead of serving requests it cannot answer.

Configuration is read from the environment (``PORT``, ``HOST``,
``DATABASE_URL``, ``LOG_LEVEL``, ``LOG_FILE``, ``CORS_ORIGINS``); see
``products_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import logging
import sys
from typing import Optional

from uvicorn import Config, Server

from products_api.app.core.config import Settings
from products_api.app.core.db import DocumentStore
from products_api.app.core.errors import StoreUnavailable
from products_api.app.core.logging_config import setup_logging
from products_api.app.main import create_app

logger = logging.getLogger("products_api.run")


async def serve(settings: Settings, store: DocumentStore) -> None:
    """Serve the application on ``settings.host``/``settings.port``."""
    app = create_app(settings, store=store)
    config = Config(app=app, host=settings.host, port=settings.port, reload=False, log_level=settings.log_level.lower())
    server = Server(config)
    logger.info("Starting backend on port %s", settings.port)
    await server.serve()


def main(settings: Optional[Settings] = None) -> None:
    settings = settings or Settings()
    setup_logging(settings.log_level, settings.log_file)
    store = DocumentStore(settings.database_url)
    try:
        store.connect()
    except StoreUnavailable as exc:
        logger.error("Document store connection error: %s", exc.message)
        sys.exit(1)
    try:
        asyncio.run(serve(settings, store))
    except KeyboardInterrupt:
        logger.info("Server stopped by user.")
    finally:
        store.close()


if __name__ == "__main__":
    main()
