import pytest

from tablegate.core.config import AuthConfig
from tablegate.core.errors import ConfigError
from tablegate.core.identity import IdentityResolver

VALUES = {
    "credential_header": "Authorization",
    "authority_url": "http://127.0.0.1:8090/auth",
    "id_field": "userid",
    "display_name_field": "username",
    "allow_list_field": "allowed_access",
}


def test_from_mapping_applies_defaults():
    config = AuthConfig.from_mapping({**VALUES, "unrelated": "ignored"})

    assert config.credential_header == "Authorization"
    assert config.authority_method == "POST"
    assert config.encoding == "utf-8"
    assert config.connect_timeout == 5.0
    assert config.query_dialect is None


def test_missing_options_are_reported_together():
    with pytest.raises(ConfigError) as excinfo:
        AuthConfig.from_mapping({"credential_header": "Authorization", "id_field": ""})

    message = str(excinfo.value)
    for name in ("authority_url", "id_field", "display_name_field", "allow_list_field"):
        assert name in message
    assert "credential_header" not in message


def test_from_env_reads_prefixed_variables():
    environ = {f"TABLEGATE_{key.upper()}": value for key, value in VALUES.items()}
    environ["TABLEGATE_AUTHORITY_METHOD"] = "get"
    environ["TABLEGATE_CONNECT_TIMEOUT"] = "2.5"

    config = AuthConfig.from_env(environ)

    assert config.authority_url == VALUES["authority_url"]
    assert config.authority_method == "get"
    assert config.connect_timeout == 2.5


def test_from_env_with_nothing_set():
    with pytest.raises(ConfigError, match="missing option 'credential_header'"):
        AuthConfig.from_env({})


def test_invalid_method_is_rejected():
    with pytest.raises(ConfigError, match="authority_method"):
        AuthConfig(**VALUES, authority_method="PUT")


@pytest.mark.parametrize("timeout", ["soon", "-1", "0"])
def test_invalid_timeout_is_rejected(timeout):
    with pytest.raises(ConfigError, match="connect_timeout"):
        AuthConfig.from_mapping({**VALUES, "connect_timeout": timeout})


def test_config_is_immutable():
    config = AuthConfig(**VALUES)

    with pytest.raises(AttributeError):
        config.authority_url = "http://elsewhere"  # type: ignore[misc]


@pytest.mark.parametrize("url", ["ftp://x/auth", "/auth", "not a url"])
def test_invalid_authority_url_is_a_config_error(url):
    with pytest.raises(ConfigError, match="address"):
        AuthConfig(**{**VALUES, "authority_url": url})


def test_method_is_normalized_like_the_transport():
    config = AuthConfig(**VALUES, authority_method=" post ")

    assert IdentityResolver(config).client.method == "POST"
