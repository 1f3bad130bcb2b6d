# cms_oauth_proxy/oauth/redirect_issuer.py
from __future__ import annotations

from typing import Optional, TYPE_CHECKING
from urllib.parse import urlencode
import logging
import secrets

if TYPE_CHECKING:
    from ..settings import Settings

logger = logging.getLogger(__name__)

STATE_BYTES_LENGTH = 32


def generate_state() -> str:
    """Generate a cryptographically secure random state parameter for OAuth requests."""
    return secrets.token_urlsafe(STATE_BYTES_LENGTH)


def build_authorization_url(settings: Settings, state: Optional[str] = None) -> str:
    """
    Builds the provider authorization URL for the first leg of the flow.

    A caller-supplied state is forwarded unchanged so the opener can verify it
    on the way back; otherwise a fresh random one is generated. The state is
    never omitted.
    """
    if not state:
        state = generate_state()
        logger.debug("No state supplied by caller; generated a new one.")

    params = {
        "client_id": settings.oauth_client_id,
        "scope": settings.oauth_scope,
        "redirect_uri": settings.callback_url,
        "state": state,
    }
    separator = "&" if "?" in settings.authorize_url else "?"
    return f"{settings.authorize_url}{separator}{urlencode(params)}"
