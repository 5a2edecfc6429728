import httpx
import pytest
import respx

from tablegate.core.errors import (
    ConfigError,
    InvalidAddress,
    RemoteCallFailed,
    RemoteCallUnreachable,
    ResponseDecodeError,
    UnsupportedMethod,
)
from tablegate.core.transport import JSON_CODEC, TEXT_CODEC, RemoteCallClient

BASE = "http://127.0.0.1:8090"


@pytest.mark.parametrize("method", ["PUT", "DELETE", "PATCH", ""])
def test_rejects_unsupported_methods(method: str):
    with pytest.raises(UnsupportedMethod):
        RemoteCallClient(f"{BASE}/str", method, codec=TEXT_CODEC)


def test_method_is_case_insensitive():
    assert RemoteCallClient(f"{BASE}/str", "post", codec=TEXT_CODEC).method == "POST"


@pytest.mark.parametrize("url", ["not a url", "ftp://example.com/auth", "/relative/path"])
def test_rejects_non_http_addresses(url: str):
    with pytest.raises(InvalidAddress):
        RemoteCallClient(url, "GET", codec=TEXT_CODEC)


def test_rejects_unknown_encoding():
    with pytest.raises(ConfigError, match="encoding"):
        RemoteCallClient(f"{BASE}/str", "GET", codec=TEXT_CODEC, encoding="no-such-codec")


@respx.mock
def test_text_get():
    route = respx.get(f"{BASE}/str").mock(return_value=httpx.Response(200, text="TestResponse"))

    client = RemoteCallClient(f"{BASE}/str", "GET", codec=TEXT_CODEC)

    assert client.call() == "TestResponse"
    assert route.call_count == 1
    assert route.calls.last.request.content == b""


@respx.mock
def test_text_post_mirrors_payload():
    respx.post(f"{BASE}/strMirror").mock(
        side_effect=lambda request: httpx.Response(200, content=request.content)
    )

    client = RemoteCallClient(f"{BASE}/strMirror", "POST", codec=TEXT_CODEC)

    assert client.call({}, "TestRequest") == "TestRequest"


@respx.mock
def test_post_without_payload_sends_empty_body():
    route = respx.post(f"{BASE}/auth").mock(return_value=httpx.Response(200, json={}))

    RemoteCallClient(f"{BASE}/auth", "POST", codec=JSON_CODEC).call({"Authorization": "x"})

    assert route.calls.last.request.content == b""


@respx.mock
def test_headers_are_attached():
    route = respx.get(f"{BASE}/strheader").mock(return_value=httpx.Response(200, text="ok"))

    client = RemoteCallClient(f"{BASE}/strheader", "GET", codec=TEXT_CODEC)
    client.call({"h1": ["one", "two", "three"], "foo": "bar"})

    sent = route.calls.last.request.headers
    assert sent.get_list("h1") == ["one", "two", "three"]
    assert sent["foo"] == "bar"


@respx.mock
def test_json_round_trip():
    respx.post(f"{BASE}/json").mock(
        side_effect=lambda request: httpx.Response(200, content=request.content)
    )

    client = RemoteCallClient(f"{BASE}/json", "POST", codec=JSON_CODEC)

    assert client.call(payload={"userid": "id1", "tables": ["S.t"]}) == {
        "userid": "id1",
        "tables": ["S.t"],
    }


@respx.mock
def test_non_2xx_keeps_status_and_body_verbatim():
    body = "  invalid session token\n"
    respx.get(f"{BASE}/auth").mock(return_value=httpx.Response(401, text=body))

    client = RemoteCallClient(f"{BASE}/auth", "GET", codec=JSON_CODEC)

    with pytest.raises(RemoteCallFailed) as excinfo:
        client.call({"Authorization": "Bearer nope"})
    assert excinfo.value.status_code == 401
    assert excinfo.value.body == body


@respx.mock
def test_timeout_is_a_hard_failure():
    respx.get(f"{BASE}/slow").mock(side_effect=httpx.ConnectTimeout("timed out"))

    client = RemoteCallClient(f"{BASE}/slow", "GET", codec=TEXT_CODEC, connect_timeout=0.1)

    with pytest.raises(RemoteCallUnreachable):
        client.call()


@respx.mock
def test_undecodable_success_body():
    respx.get(f"{BASE}/json").mock(return_value=httpx.Response(200, text="<html>"))

    client = RemoteCallClient(f"{BASE}/json", "GET", codec=JSON_CODEC)

    with pytest.raises(ResponseDecodeError) as excinfo:
        client.call()
    assert excinfo.value.body == "<html>"


@respx.mock
def test_response_decoded_with_configured_encoding():
    respx.get(f"{BASE}/latin").mock(
        return_value=httpx.Response(200, content="café".encode("latin-1"))
    )

    client = RemoteCallClient(f"{BASE}/latin", "GET", codec=TEXT_CODEC, encoding="latin-1")

    assert client.call() == "café"


@respx.mock
def test_redirect_loop_is_reported_as_unreachable():
    respx.get(f"{BASE}/loop").mock(side_effect=httpx.TooManyRedirects("redirect loop"))

    client = RemoteCallClient(f"{BASE}/loop", "GET", codec=TEXT_CODEC)

    with pytest.raises(RemoteCallUnreachable):
        client.call()


def test_method_surrounding_whitespace_is_ignored():
    assert RemoteCallClient(f"{BASE}/str", " post ", codec=TEXT_CODEC).method == "POST"
