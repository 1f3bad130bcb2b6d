# cms_oauth_proxy/oauth/__init__.py
# OAuth authorization-code bridge between a CMS popup and its provider

# Request, result and cross-window message models
from .models import (
    AuthFlowStage,
    OAuthRequestContext,
    ProviderTokenPayload,
    TokenExchangeSuccess,
    TokenExchangeFailure,
    TokenExchangeResult,
    AuthorizingMessage,
    AuthorizationSuccessMessage,
    AuthorizationErrorMessage,
)

# Proxy error types
from .errors import (
    OAuthProxyError,
    ConfigurationError,
    ProviderCommunicationError,
)

# Stage 1: redirect to the provider
from .redirect_issuer import build_authorization_url, generate_state

# Stage 2: code-for-token exchange
from .token_exchanger import TokenExchanger

# Stage 3: popup-to-opener handshake page
from .opener_messenger import (
    build_outcome_message,
    render_error_page,
    render_result_page,
    render_success_page,
)

# The router (oauth.endpoints) is imported by the application factory directly,
# since it depends on the settings module which itself imports oauth.errors.

__all__ = [
    "AuthFlowStage",
    "OAuthRequestContext",
    "ProviderTokenPayload",
    "TokenExchangeSuccess",
    "TokenExchangeFailure",
    "TokenExchangeResult",
    "AuthorizingMessage",
    "AuthorizationSuccessMessage",
    "AuthorizationErrorMessage",
    "OAuthProxyError",
    "ConfigurationError",
    "ProviderCommunicationError",
    "build_authorization_url",
    "generate_state",
    "TokenExchanger",
    "build_outcome_message",
    "render_error_page",
    "render_result_page",
    "render_success_page",
]
