# cms_oauth_proxy/oauth/opener_messenger.py
from typing import Union
import html
import json

from .models import (
    AuthorizationErrorMessage,
    AuthorizationSuccessMessage,
    AuthorizingMessage,
    TokenExchangeFailure,
    TokenExchangeResult,
    TokenExchangeSuccess,
)

FinalOpenerMessage = Union[AuthorizationSuccessMessage, AuthorizationErrorMessage]

SUCCESS_VISIBLE_TEXT = "Authorizing&hellip; you may close this window."

# Characters that could end the <script> element or open an HTML comment
# inside it. JSON string escapes keep the value identical for the script.
_SCRIPT_UNSAFE_CHARS = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
}


def script_literal(value: str) -> str:
    """Serialize a string as a JavaScript literal that is safe inside an inline <script>."""
    encoded = json.dumps(value)
    for char, escaped in _SCRIPT_UNSAFE_CHARS.items():
        encoded = encoded.replace(char, escaped)
    return encoded


def build_outcome_message(provider: str, result: TokenExchangeResult) -> FinalOpenerMessage:
    if isinstance(result, TokenExchangeSuccess):
        return AuthorizationSuccessMessage(provider=provider, token=result.access_token)
    return AuthorizationErrorMessage(
        provider=provider,
        description=result.error_description,
        error_code=result.error_code,
    )


def render_handshake_page(provider: str, outcome: FinalOpenerMessage, visible_html: str) -> str:
    """
    Renders the popup document that hands the outcome to the opener window.

    The popup first announces itself with an "authorizing" message sent to any
    origin; that message carries nothing secret. The outcome is only sent in
    reply to a message coming back from the opener, and only to the origin of
    that reply, so a page that merely opened the popup never sees the token.
    """
    authorizing = AuthorizingMessage(provider=provider).encode()
    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<title>Authorizing</title>
</head>
<body>
<script>
(function() {{
  var authorizing = {script_literal(authorizing)};
  var outcome = {script_literal(outcome.encode())};
  var delivered = false;
  function receiveMessage(e) {{
    if (delivered || !window.opener || e.source !== window.opener) {{
      return;
    }}
    delivered = true;
    window.removeEventListener("message", receiveMessage, false);
    window.opener.postMessage(outcome, e.origin);
  }}
  window.addEventListener("message", receiveMessage, false);
  if (window.opener) {{
    window.opener.postMessage(authorizing, "*");
  }}
}})();
</script>
<p>{visible_html}</p>
</body>
</html>
"""


def render_success_page(provider: str, result: TokenExchangeSuccess) -> str:
    return render_handshake_page(
        provider,
        build_outcome_message(provider, result),
        SUCCESS_VISIBLE_TEXT,
    )


def render_error_page(provider: str, result: TokenExchangeFailure) -> str:
    # Provider-controlled text: escaped for HTML here, serialized for the script above
    visible = f"Authentication error: {html.escape(result.error_description)}"
    return render_handshake_page(provider, build_outcome_message(provider, result), visible)


def render_result_page(provider: str, result: TokenExchangeResult) -> str:
    if isinstance(result, TokenExchangeSuccess):
        return render_success_page(provider, result)
    return render_error_page(provider, result)
