"""
CineAI web service.

Identify movies and series from a description, a screenshot, a clip or an
actor name using a configurable AI provider.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cineai import __version__
from cineai.config import Settings
from cineai.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from cineai.routes import ai_router, auth_router, movies_router, users_router
from cineai.services import AvailabilityEnhancer, IdentificationService, WebSearchService
from cineai.storage import Database

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    identification: Optional[IdentificationService] = None,
    web_search: Optional[WebSearchService] = None,
) -> FastAPI:
    """
    Build the application and its collaborators.

    Everything the routes need is created here once and stored on
    app.state, so tests can pass in their own services.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    app = FastAPI(title="CineAI", version=__version__)

    app.state.settings = settings
    app.state.db = Database(settings.data_dir)
    app.state.identification = identification or IdentificationService.from_settings(
        settings, enhancer=AvailabilityEnhancer()
    )
    app.state.web_search = web_search or WebSearchService(
        settings.google_search_api_key, settings.google_search_engine_id
    )

    logger.info(
        "Providers configured: %s (active: %s)",
        ", ".join(app.state.identification.available_providers()) or "none",
        app.state.identification.current_provider
    )

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RateLimitMiddleware, enabled=settings.rate_limit_enabled)

    # CORS middleware (must be last to apply first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(ai_router)
    app.include_router(movies_router)

    @app.get("/")
    async def root():
        return {"message": "CineAI API", "version": __version__}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
