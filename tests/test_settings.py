# tests/test_settings.py
import pytest
from pydantic import ValidationError

from cms_oauth_proxy.main import create_app
from cms_oauth_proxy.oauth.errors import ConfigurationError
from cms_oauth_proxy.settings import Settings, load_settings

from conftest import CLIENT_SECRET, make_settings


def test_callback_url_is_base_url_plus_auth_route():
    assert make_settings().callback_url == "https://host/auth"


def test_trailing_slash_on_base_url_is_normalized():
    settings = make_settings(public_base_url="  https://host/  ")
    assert settings.public_base_url == "https://host"
    assert settings.callback_url == "https://host/auth"


@pytest.mark.parametrize("prefix", ["api", "/api", "/api/", "api/"])
def test_route_prefix_is_normalized(prefix):
    settings = make_settings(auth_route_prefix=prefix)
    assert settings.auth_route_prefix == "/api"
    assert settings.callback_url == "https://host/api/auth"


def test_missing_client_id_is_rejected(clean_env):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, oauth_client_secret=CLIENT_SECRET, public_base_url="https://host")


def test_blank_client_secret_is_rejected():
    with pytest.raises(ValidationError):
        make_settings(oauth_client_secret="   ")


@pytest.mark.parametrize("base_url", ["host.example", "ftp://host", "https://host/?x=1", "https://host/#frag"])
def test_invalid_public_base_url_is_rejected(base_url):
    with pytest.raises(ValidationError):
        make_settings(public_base_url=base_url)


def test_original_deployment_variable_names_are_accepted(clean_env):
    clean_env.setenv("GITHUB_CLIENT_ID", "gh-id")
    clean_env.setenv("GITHUB_CLIENT_SECRET", "gh-secret")
    clean_env.setenv("PRODUCTION_URL", "https://cms.example.org/")

    settings = Settings(_env_file=None)

    assert settings.oauth_client_id == "gh-id"
    assert settings.oauth_client_secret.get_secret_value() == "gh-secret"
    assert settings.callback_url == "https://cms.example.org/auth"


def test_secret_is_masked_in_repr():
    assert CLIENT_SECRET not in repr(make_settings())


def test_load_settings_raises_configuration_error_without_secret_leak(clean_env):
    clean_env.setenv("OAUTH_CLIENT_ID", "")
    clean_env.setenv("OAUTH_CLIENT_SECRET", CLIENT_SECRET)
    clean_env.setenv("PUBLIC_BASE_URL", "https://host")

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings()

    assert "client ID must not be empty" in str(exc_info.value)
    assert CLIENT_SECRET not in str(exc_info.value)


def test_create_app_refuses_to_start_without_configuration(clean_env):
    clean_env.setenv("OAUTH_CLIENT_ID", "ID")
    clean_env.setenv("OAUTH_CLIENT_SECRET", "")
    clean_env.setenv("PUBLIC_BASE_URL", "https://host")

    with pytest.raises(ConfigurationError):
        create_app()


def test_token_exchange_timeout_defaults_to_none():
    assert make_settings().token_exchange_timeout_seconds is None


def test_blank_timeout_environment_value_means_unset(clean_env):
    clean_env.setenv("OAUTH_CLIENT_ID", "ID")
    clean_env.setenv("OAUTH_CLIENT_SECRET", CLIENT_SECRET)
    clean_env.setenv("PUBLIC_BASE_URL", "https://host")
    clean_env.setenv("TOKEN_EXCHANGE_TIMEOUT_SECONDS", "")

    assert Settings(_env_file=None).token_exchange_timeout_seconds is None

    clean_env.setenv("TOKEN_EXCHANGE_TIMEOUT_SECONDS", "12.5")
    assert Settings(_env_file=None).token_exchange_timeout_seconds == 12.5
