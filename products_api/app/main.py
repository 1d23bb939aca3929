"""
Main entrypoint for the Products API.

This module assembles the FastAPI application: it sets up logging,
registers the error handlers, enables CORS and includes the routers.
The ``create_app`` function builds and configures the app, which is
then instantiated at module import time as ``app`` so that it can be
served directly, e.g.::

    uvicorn products_api.app.main:app --reload

The document store handle is created by ``create_app`` (or passed in
by the caller), connected when the application starts and closed when
it shuts down.  A store that cannot be reached aborts startup.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import root_router, router as api_router
from .core.config import Settings, settings as default_settings
from .core.db import DocumentStore
from .core.errors import register_exception_handlers
from .core.logging_config import setup_logging
from .services.product_service import ProductService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the settings read from the
        environment at import time.
    store : Optional[DocumentStore]
        Store handle to serve requests from.  When omitted a handle
        for ``settings.database_url`` is created.  A handle that is
        already connected is used as is.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_file)

    store = store or DocumentStore(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Connection errors propagate and abort startup; there is no retry.
        if not store.is_connected:
            store.connect()
        logger.info("%s %s ready", settings.project_name, settings.api_version)
        try:
            yield
        finally:
            store.close()

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.product_service = ProductService(store)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(root_router)
    app.include_router(api_router, prefix="/api")

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
