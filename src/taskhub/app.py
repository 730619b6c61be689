"""Main application module for the taskhub service."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Final

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub.config import config_logger, engine, seed_db, settings
from taskhub.config.security import add_security_headers
from taskhub.utils.banner import create_banner
from taskhub.utils.error_handler import register_exception_handlers
from taskhub.utils.prometheus import add_prometheus_metrics
from taskhub.utils.routers import register_routers

config_logger()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None]:
    """Create tables on startup and release the engine on shutdown."""
    create_banner(settings, silent=settings.app_env == "testing")

    async with engine.begin() as conn:
        if settings.clear_db_on_restart:
            await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)

    if settings.seed_db_on_start:
        async with AsyncSession(engine) as session:
            await seed_db(session)

    yield
    await engine.dispose()


app: Final = FastAPI(
    title="taskhub",
    description="Task management service with queued status notifications",
    root_path=settings.root_path,
    version=settings.version,
    lifespan=lifespan,
)


# --------------------------------------------------------
# P R O M E T H E U S
# --------------------------------------------------------
Instrumentator().instrument(app).expose(app, include_in_schema=False)
add_prometheus_metrics(app)


# --------------------------------------------------------
# S E C U R I T Y   &   C O R S
# --------------------------------------------------------
add_security_headers(app)

if settings.app_env != "production":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origin_in_dev,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# --------------------------------------------------------
# R O U T E R S
# --------------------------------------------------------
register_routers(app)


# --------------------------------------------------------
# E X C E P T I O N S
# --------------------------------------------------------
register_exception_handlers(app)
