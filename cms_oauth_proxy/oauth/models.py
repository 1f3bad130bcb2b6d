# cms_oauth_proxy/oauth/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Any, Literal, Optional, Union
from enum import Enum
import json


class AuthFlowStage(str, Enum):
    """Stages a single popup navigation passes through. There is no re-entry."""
    AWAITING_CODE = "awaiting_code"
    EXCHANGING_TOKEN = "exchanging_token"
    DELIVERING_SUCCESS = "delivering_success"
    DELIVERING_ERROR = "delivering_error"


class OAuthRequestContext(BaseModel):
    """Per-request view of the /auth query string. Never persisted."""
    code: Optional[str] = None
    state: Optional[str] = None
    # Set when the provider redirects back without a code (e.g. consent denied)
    error: Optional[str] = None
    error_description: Optional[str] = None
    request_origin: str = Field(description="Scheme and host the request arrived on; used for logging only.")

    @property
    def stage(self) -> AuthFlowStage:
        if self.code or self.error:
            return AuthFlowStage.EXCHANGING_TOKEN
        return AuthFlowStage.AWAITING_CODE


class ProviderTokenPayload(BaseModel):
    """JSON body returned by the provider's token endpoint."""
    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = Field(default=None, repr=False)
    error: Optional[str] = None
    error_description: Optional[str] = None
    # Logged only; providers disagree on their types (e.g. scope as a list)
    token_type: Optional[Any] = None
    scope: Optional[Any] = None
    error_uri: Optional[Any] = None


class TokenExchangeSuccess(BaseModel):
    outcome: Literal["success"] = "success"
    access_token: str = Field(repr=False)


class TokenExchangeFailure(BaseModel):
    outcome: Literal["failure"] = "failure"
    error_code: str
    error_description: str


TokenExchangeResult = Annotated[
    Union[TokenExchangeSuccess, TokenExchangeFailure],
    Field(discriminator="outcome"),
]


def _compact_json(payload: dict) -> str:
    return json.dumps(payload, separators=(",", ":"))


class AuthorizingMessage(BaseModel):
    """First handshake message. Carries no secret, so it may go to any origin."""
    provider: str

    def encode(self) -> str:
        return f"authorizing:{self.provider}"


class AuthorizationSuccessMessage(BaseModel):
    """Final message carrying the access token to the acknowledged opener origin."""
    provider: str
    token: str = Field(repr=False)

    def encode(self) -> str:
        payload = _compact_json({"token": self.token, "provider": self.provider})
        return f"authorization:{self.provider}:success:{payload}"


class AuthorizationErrorMessage(BaseModel):
    """Final message reporting a failed authorization to the acknowledged opener origin."""
    provider: str
    description: str
    error_code: Optional[str] = None

    def encode(self) -> str:
        payload = {"message": self.description, "provider": self.provider}
        if self.error_code:
            payload["error"] = self.error_code
        return f"authorization:{self.provider}:error:{_compact_json(payload)}"

