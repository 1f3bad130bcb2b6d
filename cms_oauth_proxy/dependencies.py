# cms_oauth_proxy/dependencies.py
import logging
from fastapi import Depends, HTTPException, Request, status
from typing import Annotated
import httpx

from .settings import Settings
from .oauth.token_exchanger import TokenExchanger

logger = logging.getLogger(__name__)


async def get_settings(request: Request) -> Settings:
    """Returns the Settings instance the application was created with."""
    return request.app.state.settings


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """Returns the shared outbound HTTP client opened by the application lifespan."""
    http_client = getattr(request.app.state, "http_client", None)
    if http_client is None:
        logger.critical("Outbound HTTP client is not initialized. Was the application lifespan run?")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Token exchange service unavailable.",
        )
    return http_client


async def get_token_exchanger(
    settings: Annotated[Settings, Depends(get_settings)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> TokenExchanger:
    """Creates a per-request TokenExchanger bound to the process configuration."""
    return TokenExchanger(settings=settings, http_client=http_client)
