"""
app entrypoint

    uvicorn wardflow.main:app --reload

the encounter store is built once here, at start-up, and handed to routes through
the get_store dependency.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from wardflow.api.router import api_router
from wardflow.core.config import settings
from wardflow.core.log_config import configure_logging
from wardflow.core.state import get_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_store()
    logger.info(
        "Starting %s (%s): %d encounters on the ward",
        settings.app_name,
        settings.environment,
        len(store.get_snapshot()),
    )
    yield
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(api_router)
    return app


app = create_app()
