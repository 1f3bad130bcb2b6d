# cms_oauth_proxy/main.py
from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from typing import Optional
import logging
import httpx

from . import __version__
from .settings import AUTH_ROUTE_PATH, Settings, load_settings
from .oauth.endpoints import oauth_router

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging once, honouring the debug flag."""
    level = "DEBUG" if settings.debug_mode else settings.log_level.upper()
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=level,
            format='%(asctime)s - %(name)s [%(levelname)s] - %(message)s'
        )
    logging.getLogger("cms_oauth_proxy").setLevel(level)


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Application factory.

    Settings are resolved exactly once, here, and handed to every request via
    app.state. Missing or invalid configuration raises ConfigurationError so
    the server never starts accepting requests.

    An http_client passed in (tests, embedding) is used as-is and left open;
    otherwise the lifespan opens one and closes it at shutdown.
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def proxy_app_lifespan(app_instance: FastAPI):
        owns_client = app_instance.state.http_client is None
        if owns_client:
            app_instance.state.http_client = httpx.AsyncClient(
                timeout=settings.token_exchange_timeout_seconds
            )
            logger.info("Outbound HTTP client initialized.")
        logger.info(
            f"{settings.app_name} startup complete. "
            f"OAuth route: {settings.auth_route_prefix}{AUTH_ROUTE_PATH}, callback URL: {settings.callback_url}"
        )
        try:
            yield
        finally:
            if owns_client:
                await app_instance.state.http_client.aclose()
                app_instance.state.http_client = None
                logger.info("Outbound HTTP client closed.")
            logger.info(f"{settings.app_name} shutdown complete.")

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug_mode,
        version=__version__,
        lifespan=proxy_app_lifespan,
    )
    app.state.settings = settings
    app.state.http_client = http_client

    @app.get("/")
    async def root_api():
        return {"message": f"Welcome to {settings.app_name}!"}

    @app.get("/health")
    async def health_api(request: Request):
        """Reports whether the outbound client used for token exchange is ready."""
        client_ready = request.app.state.http_client is not None
        return {
            "status": "healthy" if client_ready else "degraded",
            "provider": settings.provider_name,
            "details": {"http_client": "ready" if client_ready else "not initialized"},
        }

    app.include_router(oauth_router, prefix=settings.auth_route_prefix, tags=["CMS OAuth"])
    return app
