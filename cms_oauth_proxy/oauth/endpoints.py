# cms_oauth_proxy/oauth/endpoints.py
from fastapi import APIRouter, Depends, Request, Query
from fastapi.responses import RedirectResponse, HTMLResponse, PlainTextResponse
from typing import Annotated, Optional
import logging

from ..dependencies import get_settings, get_token_exchanger
from ..settings import AUTH_ROUTE_PATH, Settings
from .errors import ProviderCommunicationError
from .models import AuthFlowStage, OAuthRequestContext, TokenExchangeFailure, TokenExchangeSuccess
from .opener_messenger import render_result_page
from .redirect_issuer import build_authorization_url
from .token_exchanger import TokenExchanger

logger = logging.getLogger(__name__)
oauth_router = APIRouter()

GENERIC_FAILURE_TEXT = "Authentication failed: the authorization server could not be reached. Please try again."

# Pages carrying a token or an outcome for one popup must never be replayed from a cache
NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


def _request_origin(request: Request) -> str:
    return f"{request.url.scheme}://{request.url.netloc}"


@oauth_router.get(AUTH_ROUTE_PATH, name="oauth_auth", response_class=HTMLResponse)
async def auth(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    token_exchanger: Annotated[TokenExchanger, Depends(get_token_exchanger)],
    code: Annotated[Optional[str], Query()] = None,
    state: Annotated[Optional[str], Query()] = None,
    error: Annotated[Optional[str], Query()] = None,
    error_description: Annotated[Optional[str], Query()] = None,
):
    """
    Single OAuth route for the CMS popup.

    Without a code, redirects the popup to the provider's authorization page.
    With a code, exchanges it for a token and answers with the handshake page
    that hands the outcome to the opener window.
    """
    context = OAuthRequestContext(
        code=code,
        state=state,
        error=error,
        error_description=error_description,
        request_origin=_request_origin(request),
    )
    logger.info(
        f"/auth request from '{context.request_origin}'. Stage: {context.stage.value}, "
        f"Code: {'SET' if context.code else 'NOT_SET'}, State: {'SET' if context.state else 'NOT_SET'}"
    )

    if context.stage is AuthFlowStage.AWAITING_CODE:
        authorization_url = build_authorization_url(settings, context.state)
        logger.info(f"Redirecting to '{settings.provider_name}' authorization page.")
        return RedirectResponse(url=authorization_url, status_code=302)

    try:
        if context.code:
            result = await token_exchanger.exchange(context.code)
        else:
            # Provider redirected back without a code, e.g. the user denied consent
            logger.warning(
                f"Provider '{settings.provider_name}' returned an error instead of a code: {context.error!r}"
            )
            result = TokenExchangeFailure(
                error_code=context.error,
                error_description=context.error_description or context.error,
            )

        page = render_result_page(settings.provider_name, result)
    except ProviderCommunicationError as e:
        logger.error(f"Token exchange infrastructure failure: {e.detail}", exc_info=True)
        return PlainTextResponse(GENERIC_FAILURE_TEXT, status_code=500)
    except Exception as e:
        logger.error(f"Unexpected error in /auth callback: {type(e).__name__}: {e}", exc_info=True)
        return PlainTextResponse(GENERIC_FAILURE_TEXT, status_code=500)

    if isinstance(result, TokenExchangeSuccess):
        logger.info(f"Stage: {AuthFlowStage.DELIVERING_SUCCESS.value}. Serving handshake page.")
        return HTMLResponse(page, status_code=200, headers=NO_STORE_HEADERS)

    logger.info(
        f"Stage: {AuthFlowStage.DELIVERING_ERROR.value}. "
        f"Serving error page for provider error {result.error_code!r}."
    )
    return HTMLResponse(page, status_code=401, headers=NO_STORE_HEADERS)
