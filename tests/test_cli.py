import httpx
import pytest
import respx
import structlog
from typer.testing import CliRunner

from conftest import AUTH_URL
from tablegate.cli.cli import app

runner = CliRunner()

ENV = {
    "TABLEGATE_CREDENTIAL_HEADER": "Authorization",
    "TABLEGATE_AUTHORITY_URL": AUTH_URL,
    "TABLEGATE_ID_FIELD": "userid",
    "TABLEGATE_DISPLAY_NAME_FIELD": "username",
    "TABLEGATE_ALLOW_LIST_FIELD": "allowed_access",
    "TABLEGATE_TOKEN": None,
}

IDENTITY = {
    "userid": "001",
    "username": "tapuser001",
    "allowed_access": {"SCHEMA1": ["t1", "t2", "t3"], "SCHEMA2": ["table1"]},
}


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    structlog.reset_defaults()


def test_missing_configuration_exits_with_usage_code():
    env = {key: None for key in ENV}

    result = runner.invoke(app, ["identity", "whoami", "--token", "abc"], env=env)

    assert result.exit_code == 2
    assert "credential_header" in result.output


@respx.mock
def test_whoami_lists_allow_list():
    respx.post(AUTH_URL).mock(return_value=httpx.Response(200, json=IDENTITY))

    result = runner.invoke(app, ["identity", "whoami", "--token", "abc"], env=ENV)

    assert result.exit_code == 0
    assert "tapuser001" in result.output
    assert "SCHEMA1" in result.output


@respx.mock
def test_check_allowed_query():
    respx.post(AUTH_URL).mock(return_value=httpx.Response(200, json=IDENTITY))

    result = runner.invoke(
        app,
        ["identity", "check", "--token", "abc", "--query", "SELECT * FROM SCHEMA1.t1"],
        env=ENV,
    )

    assert result.exit_code == 0
    assert "reason: OWNER" in result.output


@respx.mock
def test_check_disallowed_query_exits_nonzero():
    respx.post(AUTH_URL).mock(return_value=httpx.Response(200, json=IDENTITY))

    result = runner.invoke(
        app,
        ["identity", "check", "--token", "abc", "--query", "SELECT * FROM SCHEMA2.table2"],
        env=ENV,
    )

    assert result.exit_code == 1
    assert "DISALLOWED_REFERENCE" in result.output


def test_check_requires_exactly_one_query_source(tmp_path):
    query_file = tmp_path / "q.sql"
    query_file.write_text("SELECT 1")

    neither = runner.invoke(app, ["identity", "check", "--token", "abc"], env=ENV)
    both = runner.invoke(
        app,
        ["identity", "check", "--token", "abc", "-q", "SELECT 1", "-f", str(query_file)],
        env=ENV,
    )

    assert neither.exit_code == 2
    assert both.exit_code == 2


@respx.mock(assert_all_called=False)
def test_missing_token_reports_identity_error():
    route = respx.post(AUTH_URL).mock(return_value=httpx.Response(200, json=IDENTITY))

    result = runner.invoke(app, ["identity", "whoami"], env=ENV)

    assert result.exit_code == 1
    assert "Could not resolve identity" in result.output
    assert not route.called


def test_non_http_authority_url_exits_with_usage_code():
    env = {**ENV, "TABLEGATE_AUTHORITY_URL": "ftp://x/auth"}

    result = runner.invoke(app, ["identity", "whoami", "--token", "x"], env=env)

    assert result.exit_code == 2
    assert "http(s)" in result.output
