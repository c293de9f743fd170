import httpx
import pytest

from dyc_api.oauth import GOOGLE_TOKEN_URL, GoogleOAuthClient, OAuthError


def _client(handler) -> GoogleOAuthClient:
    return GoogleOAuthClient("cid", "secret", "http://api/cb", transport=httpx.MockTransport(handler))


def test_configured():
    assert GoogleOAuthClient("cid", "secret", "http://api/cb").configured
    assert not GoogleOAuthClient("", "secret", "http://api/cb").configured


def test_authorization_url_carries_state():
    url = GoogleOAuthClient("cid", "secret", "http://api/cb").authorization_url("xyz")

    request = httpx.Request("GET", url)
    assert request.url.params["state"] == "xyz"
    assert request.url.params["redirect_uri"] == "http://api/cb"


def test_fetch_profile(oauth_client):
    profile = oauth_client.fetch_profile("good-code")

    assert profile.provider == "google"
    assert profile.provider_id == "google-123"
    assert profile.email == "ana.perez@example.com"


def test_exchange_sends_code_and_secret():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url).startswith(GOOGLE_TOKEN_URL):
            seen["body"] = request.content.decode()
            return httpx.Response(200, json={"access_token": "tok"})
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"sub": "1", "email": "a@example.com"})

    _client(handler).fetch_profile("the-code")

    assert "code=the-code" in seen["body"]
    assert "client_secret=secret" in seen["body"]
    assert "grant_type=authorization_code" in seen["body"]
    assert seen["auth"] == "Bearer tok"


@pytest.mark.parametrize(
    "token_response, userinfo_response",
    [
        (httpx.Response(400, json={"error": "invalid_grant"}), None),
        (httpx.Response(200, json={}), None),
        (httpx.Response(200, json={"access_token": "tok"}), httpx.Response(500)),
        (httpx.Response(200, json={"access_token": "tok"}), httpx.Response(200, json={"sub": "1"})),
    ],
)
def test_failures_raise_oauth_error(token_response, userinfo_response):
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url).startswith(GOOGLE_TOKEN_URL):
            return token_response
        return userinfo_response

    with pytest.raises(OAuthError):
        _client(handler).fetch_profile("code")
