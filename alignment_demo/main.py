"""FastAPI application serving the alignment demo console."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from .api import api_router
from .core.config import Settings, get_settings
from .core.handlers import core_register_api_handlers
from .db import create_engine, create_session_factory, init_db
from .logger import setup_logging
from .services.key_store import SqlKeyStore
from .session import DemoSession, build_session

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session: Optional[DemoSession] = None,
) -> FastAPI:
    """Build the console app.

    Without ``session`` the lifespan opens the key store database, builds
    the session and loads the stored API key. A given session is used as
    is; its client must already be entered.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        if session is not None:
            yield
            return

        setup_logging(settings)
        logger.info("Starting application")
        engine = create_engine(settings)
        async with AsyncExitStack() as stack:
            stack.push_async_callback(engine.dispose)
            await init_db(engine)
            demo_session = build_session(
                settings, SqlKeyStore(create_session_factory(engine))
            )
            await stack.enter_async_context(demo_session.client)
            stack.push_async_callback(demo_session.close)
            await demo_session.start()
            application.state.demo_session = demo_session
            yield
        logger.info("Stopping application")

    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    if session is not None:
        app.state.demo_session = session

    core_register_api_handlers(app, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")
    return app
