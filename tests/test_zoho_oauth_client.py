from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from lead_relay.clients.zoho_auth import AuthProviderError, ZohoOAuthClient
from lead_relay.core.config import HTTPSettings
from lead_relay.models.token import RefreshCredential

CREDENTIAL = RefreshCredential(
    client_id="client",
    client_secret="secret",
    refresh_token="refresh",
    accounts_domain="https://accounts.zoho.eu",
)


def _client(handler, **http) -> ZohoOAuthClient:
    return ZohoOAuthClient(HTTPSettings(**http), transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_refresh_posts_form_encoded_grant() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "access_token": "fresh",
                "expires_in": 3600,
                "api_domain": "https://www.zohoapis.eu",
                "token_type": "Bearer",
            },
        )

    grant = await _client(handler).refresh_access_token(CREDENTIAL)

    assert grant.access_token == "fresh"
    assert grant.expires_in == 3600
    assert grant.api_domain == "https://www.zohoapis.eu"

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://accounts.zoho.eu/oauth/v2/token"
    form = parse_qs(request.content.decode())
    assert form == {
        "grant_type": ["refresh_token"],
        "refresh_token": ["refresh"],
        "client_id": ["client"],
        "client_secret": ["secret"],
    }


@pytest.mark.anyio
async def test_refresh_without_expiry_leaves_ttl_unset() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": "fresh"})

    grant = await _client(handler).refresh_access_token(CREDENTIAL)

    assert grant.expires_in is None


@pytest.mark.anyio
async def test_non_success_status_raises_with_status_and_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_client"})

    with pytest.raises(AuthProviderError) as excinfo:
        await _client(handler).refresh_access_token(CREDENTIAL)

    assert excinfo.value.status_code == 400
    assert excinfo.value.body == {"error": "invalid_client"}


@pytest.mark.anyio
async def test_error_payload_with_200_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": "invalid_code"})

    with pytest.raises(AuthProviderError) as excinfo:
        await _client(handler).refresh_access_token(CREDENTIAL)

    assert excinfo.value.status_code == 200


@pytest.mark.anyio
async def test_plain_text_error_body_is_kept() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    with pytest.raises(AuthProviderError) as excinfo:
        await _client(handler).refresh_access_token(CREDENTIAL)

    assert excinfo.value.body == "maintenance"


@pytest.mark.anyio
async def test_timeout_is_retried_once() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, json={"access_token": "fresh", "expires_in": 60})

    grant = await _client(handler).refresh_access_token(CREDENTIAL)

    assert grant.access_token == "fresh"
    assert calls["count"] == 2


@pytest.mark.anyio
async def test_timeout_budget_is_bounded() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        raise httpx.ConnectTimeout("down", request=request)

    with pytest.raises(httpx.TimeoutException):
        await _client(handler, HTTP_TIMEOUT_RETRIES=1).refresh_access_token(CREDENTIAL)

    assert calls["count"] == 2


@pytest.mark.anyio
async def test_exchange_authorization_code_returns_refresh_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"access_token": "a", "refresh_token": "r", "expires_in": 3600},
        )

    grant = await _client(handler).exchange_authorization_code(
        accounts_domain="https://accounts.zoho.com",
        client_id="client",
        client_secret="secret",
        code="1000.code",
        redirect_uri="https://example.com/zoho/callback",
    )

    assert grant.refresh_token == "r"
    form = parse_qs(seen[0].content.decode())
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["1000.code"]


def test_authorization_url_requests_offline_consent() -> None:
    client = ZohoOAuthClient(HTTPSettings())
    url = client.build_authorization_url(
        accounts_domain="https://accounts.zoho.com/",
        client_id="client",
        redirect_uri="https://example.com/zoho/callback",
        scope="ZohoCRM.modules.ALL",
        state="xyz",
    )

    parsed = urlparse(url)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
        "https://accounts.zoho.com/oauth/v2/auth"
    )
    params = parse_qs(parsed.query)
    assert params["access_type"] == ["offline"]
    assert params["prompt"] == ["consent"]
    assert params["response_type"] == ["code"]
    assert params["state"] == ["xyz"]
