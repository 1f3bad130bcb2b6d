# cms_oauth_proxy/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, SecretStr, ValidationError, field_validator
from typing import Optional
from urllib.parse import urlparse
import logging
from pathlib import Path

from .oauth.errors import ConfigurationError

logger = logging.getLogger(__name__)

# This settings.py file is at <project>/cms_oauth_proxy/settings.py
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DOTENV_PATH = PROJECT_ROOT / ".env"

# Path of the single OAuth route, relative to auth_route_prefix
AUTH_ROUTE_PATH = "/auth"

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"


class Settings(BaseSettings):
    """Process-wide proxy configuration, loaded once from the environment."""

    app_name: str = "CMS OAuth Proxy"
    debug_mode: bool = False
    log_level: str = "INFO"

    # Provider identity and endpoints
    provider_name: str = "github"
    authorize_url: str = GITHUB_AUTHORIZE_URL
    token_url: str = GITHUB_TOKEN_URL
    oauth_scope: str = Field(
        default="repo,user",
        description="Scope requested from the provider; enough to read and write repository content.",
    )

    # Credentials registered with the provider
    oauth_client_id: str = Field(
        validation_alias=AliasChoices("oauth_client_id", "github_client_id"),
        description="Client ID of the OAuth app registered with the provider.",
    )
    oauth_client_secret: SecretStr = Field(
        validation_alias=AliasChoices("oauth_client_secret", "github_client_secret"),
        description="Client secret of the OAuth app. Never leaves the token exchange.",
    )

    # Stable public address of this service. Must match the callback URL
    # registered with the provider, so it is never derived from a request.
    public_base_url: str = Field(
        validation_alias=AliasChoices("public_base_url", "production_url"),
    )
    auth_route_prefix: str = ""

    # None leaves the outbound call bounded only by the hosting environment's deadline
    token_exchange_timeout_seconds: Optional[float] = None

    model_config = SettingsConfigDict(
        env_file=DOTENV_PATH if DOTENV_PATH.exists() else None,
        extra="ignore",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    @field_validator("oauth_client_id")
    @classmethod
    def _client_id_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("OAuth client ID must not be empty.")
        return value

    @field_validator("oauth_client_secret")
    @classmethod
    def _client_secret_not_blank(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("OAuth client secret must not be empty.")
        return value

    @field_validator("public_base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Public base URL must be an absolute http(s) URL, got '{value}'.")
        if parsed.query or parsed.fragment:
            raise ValueError("Public base URL must not carry a query string or fragment.")
        return value

    @field_validator("auth_route_prefix")
    @classmethod
    def _normalize_route_prefix(cls, value: str) -> str:
        value = value.strip().strip("/")
        return f"/{value}" if value else ""

    @field_validator("token_exchange_timeout_seconds", mode="before")
    @classmethod
    def _blank_timeout_is_none(cls, value):
        # TOKEN_EXCHANGE_TIMEOUT_SECONDS= in the environment means "not set"
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def callback_url(self) -> str:
        """The redirect_uri used by both the redirect and the token exchange."""
        return f"{self.public_base_url}{self.auth_route_prefix}{AUTH_ROUTE_PATH}"


def load_settings() -> Settings:
    """
    Builds the Settings instance from the environment and logs it with secrets masked.

    Raises ConfigurationError when a required value is missing or invalid, so the
    application refuses to start instead of failing on the first request.
    """
    logger.info(f"Loading settings. .env path: {DOTENV_PATH} (exists: {DOTENV_PATH.exists()})")
    try:
        settings = Settings()
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        logger.critical(f"Invalid proxy configuration: {problems}")
        raise ConfigurationError(f"Invalid proxy configuration: {problems}") from e

    log_settings(settings)
    return settings


def log_settings(settings: Settings) -> None:
    """Log the effective configuration. The client secret is always masked."""
    logger.info(f"Settings: provider_name: '{settings.provider_name}'")
    logger.info(f"Settings: oauth_client_id: '{settings.oauth_client_id}'")
    logger.info(
        f"Settings: oauth_client_secret: "
        f"{'********' if settings.oauth_client_secret.get_secret_value() else 'None'}"
    )
    logger.info(f"Settings: callback_url: '{settings.callback_url}'")
    logger.info(f"Settings: authorize_url: '{settings.authorize_url}', token_url: '{settings.token_url}'")
    logger.info(f"Settings: debug_mode: {settings.debug_mode}")
