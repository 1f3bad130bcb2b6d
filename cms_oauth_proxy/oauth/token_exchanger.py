# cms_oauth_proxy/oauth/token_exchanger.py
from __future__ import annotations

from typing import Any, Dict, TYPE_CHECKING
from pydantic import ValidationError as PydanticValidationError
import logging
import httpx

from .errors import ProviderCommunicationError
from .models import (
    ProviderTokenPayload,
    TokenExchangeFailure,
    TokenExchangeResult,
    TokenExchangeSuccess,
)

if TYPE_CHECKING:
    from ..settings import Settings

logger = logging.getLogger(__name__)


class TokenExchanger:
    """
    Exchanges an authorization code for an access token with the provider.

    Performs exactly one POST per code and never retries: codes are single use,
    so a second attempt with the same code can only fail. Provider-reported
    errors become TokenExchangeFailure; anything that prevents reading a
    meaningful answer raises ProviderCommunicationError.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._http_client = http_client

    def _build_request_body(self, code: str) -> Dict[str, Any]:
        # redirect_uri must be the exact string sent with the authorize redirect
        return {
            "client_id": self._settings.oauth_client_id,
            "client_secret": self._settings.oauth_client_secret.get_secret_value(),
            "code": code,
            "redirect_uri": self._settings.callback_url,
        }

    async def exchange(self, code: str) -> TokenExchangeResult:
        provider_name = self._settings.provider_name
        logger.info(f"Exchanging authorization code with provider '{provider_name}'.")

        try:
            response = await self._http_client.post(
                self._settings.token_url,
                json=self._build_request_body(code),
                headers={"Accept": "application/json"},
                timeout=self._settings.token_exchange_timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise ProviderCommunicationError(
                provider_name,
                f"Timed out waiting for the token endpoint of '{provider_name}': {type(e).__name__}",
            ) from e
        except httpx.HTTPError as e:
            raise ProviderCommunicationError(
                provider_name,
                f"Could not reach the token endpoint of '{provider_name}': {type(e).__name__}: {e}",
            ) from e

        payload = self._parse_payload(response)

        if payload.error:
            logger.warning(
                f"Provider '{provider_name}' rejected the authorization code "
                f"(HTTP {response.status_code}): {payload.error!r}"
            )
            return TokenExchangeFailure(
                error_code=payload.error,
                error_description=payload.error_description or payload.error,
            )

        if not response.is_success:
            raise ProviderCommunicationError(
                provider_name,
                f"Token endpoint of '{provider_name}' answered HTTP {response.status_code} without an error code.",
                status_code=response.status_code,
            )

        if not payload.access_token:
            raise ProviderCommunicationError(
                provider_name,
                f"Token response from '{provider_name}' contained neither an access token nor an error.",
                status_code=response.status_code,
            )

        logger.info(
            f"Provider '{provider_name}' issued an access token "
            f"(token_type: {payload.token_type!r}, scope: {payload.scope!r})."
        )
        return TokenExchangeSuccess(access_token=payload.access_token)

    def _parse_payload(self, response: httpx.Response) -> ProviderTokenPayload:
        provider_name = self._settings.provider_name
        content_type = response.headers.get("content-type", "")
        try:
            body = response.json()
        except ValueError as e:
            raise ProviderCommunicationError(
                provider_name,
                f"Token response from '{provider_name}' is not valid JSON "
                f"(HTTP {response.status_code}, content-type '{content_type}').",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise ProviderCommunicationError(
                provider_name,
                f"Token response from '{provider_name}' is JSON but not an object "
                f"(HTTP {response.status_code}).",
                status_code=response.status_code,
            )

        try:
            return ProviderTokenPayload.model_validate(body)
        except PydanticValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise ProviderCommunicationError(
                provider_name,
                f"Token response from '{provider_name}' has malformed fields: {fields}.",
                status_code=response.status_code,
            ) from e

