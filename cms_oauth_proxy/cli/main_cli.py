# cms_oauth_proxy/cli/main_cli.py
import typer
from typing import Annotated, Optional
from urllib.parse import urlparse, parse_qs

from .config import PROXY_CLI_API_BASE_URL, PROXY_CLI_SERVER_HOST, PROXY_CLI_SERVER_PORT
from .utils_cli import make_api_request
from ..settings import AUTH_ROUTE_PATH, Settings, load_settings
from ..oauth.errors import ConfigurationError
from ..oauth.redirect_issuer import build_authorization_url

# Main CLI application with help enabled when no arguments are provided
app = typer.Typer(
    name="cms-oauth-proxy",
    help="CMS OAuth Proxy Command Line Interface.",
    no_args_is_help=True
)


def _load_settings_or_exit() -> Settings:
    try:
        return load_settings()
    except ConfigurationError as e:
        typer.secho(f"Configuration Error: {e.detail_message}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.callback()
def main_callback():
    """
    CMS OAuth Proxy CLI.
    Use 'cms-oauth-proxy COMMAND --help' for details on a command.
    """
    pass


@app.command("serve")
def serve(
    host: Annotated[str, typer.Option(help="Interface to bind.")] = PROXY_CLI_SERVER_HOST,
    port: Annotated[int, typer.Option(help="Port to bind.")] = PROXY_CLI_SERVER_PORT,
    log_level: Annotated[str, typer.Option(help="Uvicorn log level.")] = "info",
    reload: Annotated[bool, typer.Option(help="Reload on code changes (development only).")] = False,
):
    """Run the proxy with uvicorn."""
    import uvicorn

    # Fail here, before uvicorn starts, when configuration is incomplete
    _load_settings_or_exit()
    uvicorn.run(
        "cms_oauth_proxy.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level.lower(),
        reload=reload
    )


@app.command("check-config")
def check_config():
    """Load the configuration and print it with the client secret masked."""
    settings = _load_settings_or_exit()
    typer.secho("Configuration OK.", fg=typer.colors.GREEN)
    typer.echo(f"Provider:          {settings.provider_name}")
    typer.echo(f"Client ID:         {settings.oauth_client_id}")
    typer.echo("Client Secret:     ********")
    typer.echo(f"Authorize URL:     {settings.authorize_url}")
    typer.echo(f"Token URL:         {settings.token_url}")
    typer.echo(f"Scope:             {settings.oauth_scope}")
    typer.echo(f"Callback URL:      {settings.callback_url}")


@app.command("authorize-url")
def authorize_url(
    state: Annotated[Optional[str], typer.Option(help="State to forward. A random one is generated if omitted.")] = None,
):
    """Print the provider authorization URL the proxy would redirect to."""
    settings = _load_settings_or_exit()
    typer.echo(build_authorization_url(settings, state))


@app.command("probe")
def probe(
    base_url: Annotated[str, typer.Option(help="Base URL of the running proxy.")] = PROXY_CLI_API_BASE_URL,
    prefix: Annotated[str, typer.Option(help="Route prefix the proxy is mounted under, e.g. '/api'.")] = "",
    state: Annotated[Optional[str], typer.Option(help="State to send with the probe request.")] = None,
    expect_callback: Annotated[Optional[str], typer.Option(help="Fail unless redirect_uri equals this URL.")] = None,
):
    """Call a running proxy's auth route and inspect the redirect it issues."""
    prefix = f"/{prefix.strip('/')}" if prefix.strip("/") else ""
    params = {"state": state} if state else None
    response = make_api_request("GET", f"{prefix}{AUTH_ROUTE_PATH}", base_url, params_payload=params, expected_status=302)

    location = response.headers.get("location", "")
    query = parse_qs(urlparse(location).query)
    redirect_uri = query.get("redirect_uri", [None])[0]
    returned_state = query.get("state", [None])[0]

    typer.echo(f"Location:      {location}")
    typer.echo(f"redirect_uri:  {redirect_uri}")
    typer.echo(f"state:         {returned_state}")

    if state and returned_state != state:
        typer.secho("CLI: Error - state was not forwarded unchanged.", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    if expect_callback and redirect_uri != expect_callback:
        typer.secho(
            f"CLI: Error - redirect_uri '{redirect_uri}' does not match expected '{expect_callback}'.",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)
    typer.secho("Probe OK.", fg=typer.colors.GREEN)


def cli_entry_point():
    """Entry point function for console script registration in pyproject.toml"""
    app()


if __name__ == "__main__":
    cli_entry_point()
