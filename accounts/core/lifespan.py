"""Application lifespan: startup and shutdown.

Only wiring of infrastructure (logging, storage root, tables, engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI

from accounts.core.config import get_settings
from accounts.infrastructure.persistence import database
from accounts.shared.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit dispose the database engine."""
    settings = get_settings()
    setup_logging()

    Path(settings.storage_root).mkdir(parents=True, exist_ok=True)
    if settings.database_create_tables:
        await database.create_tables()
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    await database.dispose_engine()
