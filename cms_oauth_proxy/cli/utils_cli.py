# cms_oauth_proxy/cli/utils_cli.py
import requests
import typer
from typing import Optional, Dict, Any, Union, List


def make_api_request(
    method: str,
    endpoint: str,
    base_url: str,
    params_payload: Optional[Dict[str, Any]] = None,
    expected_status: Union[int, List[int]] = 200,
) -> requests.Response:
    """
    Makes an HTTP request to a running proxy with console logging and error handling.

    Redirects are never followed: the interesting part of an /auth answer is
    the Location header itself.
    """
    full_url = f"{base_url.rstrip('/')}{endpoint}"

    typer.echo(f"CLI: {method.upper()} {full_url}")
    if params_payload:
        typer.echo(f"CLI: Query Params: {params_payload}")

    try:
        response = requests.request(
            method,
            full_url,
            params=params_payload,
            allow_redirects=False,
            timeout=30
        )
    except requests.exceptions.ConnectionError as e:
        typer.secho(
            f"CLI: Connection Error - Could not connect to proxy at {full_url}. Is the server running? Error: {e}",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)
    except requests.exceptions.RequestException as e:
        typer.secho(f"CLI: Request Error - {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"CLI: Response Status: {response.status_code}")

    # Normalize expected status to list for consistent checking
    expected_statuses = [expected_status] if isinstance(expected_status, int) else expected_status
    if response.status_code not in expected_statuses:
        typer.secho(
            f"CLI: API Error - Expected status {expected_status}, got {response.status_code}. "
            f"Raw response: {response.text[:200]}",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)

    return response
