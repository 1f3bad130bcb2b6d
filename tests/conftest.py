# tests/conftest.py
import json
import re
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from cms_oauth_proxy.main import create_app
from cms_oauth_proxy.settings import Settings

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
)

CLIENT_ID = "ID"
CLIENT_SECRET = "s3cr3t-client-secret-value"
PUBLIC_BASE_URL = "https://host"
AUTHORIZE_URL = "https://provider.example/authorize"
TOKEN_URL = "https://provider.example/token"

# Environment variables Settings may read; cleared so tests only see explicit values
SETTINGS_ENV_VARS = [
    "OAUTH_CLIENT_ID", "GITHUB_CLIENT_ID",
    "OAUTH_CLIENT_SECRET", "GITHUB_CLIENT_SECRET",
    "PUBLIC_BASE_URL", "PRODUCTION_URL",
    "AUTH_ROUTE_PREFIX", "PROVIDER_NAME", "AUTHORIZE_URL", "TOKEN_URL", "OAUTH_SCOPE",
    "TOKEN_EXCHANGE_TIMEOUT_SECONDS", "DEBUG_MODE", "LOG_LEVEL",
]


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "oauth_client_id": CLIENT_ID,
        "oauth_client_secret": CLIENT_SECRET,
        "public_base_url": PUBLIC_BASE_URL,
        "authorize_url": AUTHORIZE_URL,
        "token_url": TOKEN_URL,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class StubProvider:
    """
    Stand-in for the provider token endpoint, mounted through httpx.MockTransport.

    Codes in `valid_codes` can be exchanged once; any other or reused code gets
    GitHub's bad_verification_code answer. A redirect_uri other than
    `expected_redirect_uri` gets redirect_uri_mismatch.
    """

    def __init__(self, expected_redirect_uri: str = f"{PUBLIC_BASE_URL}/auth"):
        self.expected_redirect_uri = expected_redirect_uri
        self.valid_codes: Dict[str, str] = {"abc123": "tok_xyz"}
        self.requests: List[httpx.Request] = []
        # Optional override: fully replace the response for the next calls
        self.responder: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def request_bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(req.content) for req in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responder is not None:
            return self.responder(request)

        body = json.loads(request.content)
        if body.get("redirect_uri") != self.expected_redirect_uri:
            return httpx.Response(200, json={
                "error": "redirect_uri_mismatch",
                "error_description": "The redirect_uri MUST match the registered callback URL for this application.",
            })

        token = self.valid_codes.pop(body.get("code"), None)
        if token is None:
            return httpx.Response(200, json={
                "error": "bad_verification_code",
                "error_description": "The code passed is incorrect or expired.",
            })
        return httpx.Response(200, json={"access_token": token, "token_type": "bearer", "scope": "repo,user"})


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def http_client(stub_provider: StubProvider) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(stub_provider))


@pytest.fixture
def client(settings: Settings, http_client: httpx.AsyncClient):
    app = create_app(settings=settings, http_client=http_client)
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # A developer .env in the project root must not leak into Settings()
    monkeypatch.setitem(Settings.model_config, "env_file", None)
    return monkeypatch


def script_variable(page: str, name: str) -> str:
    """Decode a `var <name> = "<json string>";` literal from a rendered handshake page."""
    match = re.search(rf'^\s*var {name} = (".*");$', page, re.MULTILINE)
    assert match, f"variable '{name}' not found in page"
    return json.loads(match.group(1))


def visible_text(page: str) -> str:
    """The page with every <script> element removed."""
    return re.sub(r"<script>.*?</script>", "", page, flags=re.DOTALL)
