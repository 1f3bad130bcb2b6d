# cms_oauth_proxy/oauth/errors.py
from typing import Any, Dict, Optional


class OAuthProxyError(Exception):
    """
    Base class for proxy-side failures.
    Carries a structured detail dictionary for logging and programmatic access.
    """

    def __init__(self, error: str, detail_message: str):
        self.error = error
        self.detail_message = detail_message
        self.detail: Dict[str, Any] = {
            "error": error,
            "message": detail_message,
        }
        super().__init__(detail_message)


class ConfigurationError(OAuthProxyError):
    """
    Required configuration (client ID, client secret, public base URL) is
    missing or invalid. Raised at startup so the service never begins serving.
    """

    def __init__(self, detail_message: str = "Proxy configuration is missing or invalid."):
        super().__init__(error="configuration_error", detail_message=detail_message)


class ProviderCommunicationError(OAuthProxyError):
    """
    The token exchange could not be completed for infrastructure reasons:
    transport failure, timeout, a body that is not a JSON object, or a response
    that carries neither an access token nor an error.

    Distinct from a provider-reported authorization failure, which is an
    ordinary outcome of the exchange and never raised.
    """

    def __init__(
        self,
        provider_name: str,
        detail_message: str = "Token exchange with the provider failed.",
        status_code: Optional[int] = None,
    ):
        super().__init__(error="provider_communication_error", detail_message=detail_message)
        self.provider_name = provider_name
        self.status_code = status_code
        self.detail["provider_name"] = provider_name
        if status_code is not None:
            self.detail["status_code"] = status_code
