try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from lead_relay.clients.zoho_crm import TransientAuthError, UpstreamUpsertError
from lead_relay.main import app
from lead_relay.models.token import TokenGrant
from lead_relay.services.rate_limit import FixedWindowRateLimiter
from lead_relay.services.record_mapper import RecordMapper
from lead_relay.services.token_cache import TokenCache
from lead_relay.services.zoho_tokens import ZohoTokenService
from lead_relay.services.zoho_upsert import UpsertOrchestrator


class RecordingOAuthClient:
    def __init__(self) -> None:
        self.calls = 0

    async def refresh_access_token(self, credential) -> TokenGrant:
        self.calls += 1
        return TokenGrant(access_token=f"token-{self.calls}", expires_in=3600)


class RecordingCRMClient:
    def __init__(self) -> None:
        self.responses: list = []
        self.records = []

    async def upsert(self, access_token: str, record) -> dict:
        self.records.append(record)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture()
def upstream():
    from lead_relay import dependencies
    from lead_relay.core.config import get_settings

    oauth = RecordingOAuthClient()
    crm = RecordingCRMClient()
    tokens = ZohoTokenService(
        oauth_client=oauth,
        credential=get_settings().zoho.credential(),
        cache=TokenCache(),
    )
    orchestrator = UpsertOrchestrator(token_service=tokens, crm_client=crm)
    limiter = FixedWindowRateLimiter(max_hits=3)

    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_upsert_orchestrator: lambda: orchestrator,
            dependencies.get_record_mapper: lambda: RecordMapper(
                default_lead_source="Landing page"
            ),
            dependencies.get_rate_limiter: lambda: limiter,
        }
    )

    yield oauth, crm

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(upstream):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


async def test_contact_is_upserted(upstream, client):
    oauth, crm = upstream
    crm.responses.append(
        {"data": [{"code": "SUCCESS", "action": "insert", "details": {"id": "42"}}]}
    )

    response = await client.post(
        "/api/zoho/contact",
        json={"email": "a@b.com", "attributes": {"first_name": "John"}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["action"] == "insert"
    assert body["zoho"]["details"] == {"id": "42"}
    assert oauth.calls == 1
    fields = crm.records[0].mapped_fields
    assert fields["Email"] == "a@b.com"
    assert fields["First_Name"] == "John"
    assert fields["Lead_Source"] == "Landing page"


async def test_lead_route_shares_the_handler(upstream, client):
    _, crm = upstream
    crm.responses.append({"data": [{"action": "update"}]})

    response = await client.post("/api/zoho/lead", json={"email": "a@b.com"})

    assert response.status_code == 200
    assert response.json()["action"] == "update"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email"},
        {"attributes": {"first_name": "John"}},
        {"email": "a@b.com", "honeypot": "x"},
        {"email": "a@b.com", "attributes": ["first_name", "John"]},
        {"email": "a@b.com", "attributes": "first_name=John"},
    ],
)
async def test_invalid_submissions_make_no_outbound_calls(upstream, client, payload):
    oauth, crm = upstream

    response = await client.post("/api/zoho/contact", json=payload)

    assert response.status_code == 400
    assert "error" in response.json()
    assert oauth.calls == 0
    assert crm.records == []


async def test_malformed_json_is_a_bad_request(upstream, client):
    response = await client.post(
        "/api/zoho/contact",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Bad request"


async def test_upstream_rejection_is_mirrored(upstream, client):
    _, crm = upstream
    crm.responses.append(UpstreamUpsertError(429, {"code": "TOO_MANY_REQUESTS"}))

    response = await client.post("/api/zoho/contact", json={"email": "a@b.com"})

    assert response.status_code == 429
    assert response.json() == {
        "error": "Zoho upsert failed",
        "detail": {"code": "TOO_MANY_REQUESTS"},
    }


async def test_repeated_unauthorized_surfaces_failure(upstream, client):
    oauth, crm = upstream
    crm.responses.extend(
        [TransientAuthError(401, {"code": "INVALID_TOKEN"})] * 2
    )

    response = await client.post("/api/zoho/contact", json={"email": "a@b.com"})

    assert response.status_code == 401
    assert response.json()["detail"] == {"code": "INVALID_TOKEN"}
    assert oauth.calls == 2
    assert len(crm.records) == 2


async def test_network_errors_become_internal_errors(upstream, client):
    _, crm = upstream
    crm.responses.append(httpx.ConnectError("refused"))

    response = await client.post("/api/zoho/contact", json={"email": "a@b.com"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


async def test_timeouts_become_gateway_timeouts(upstream, client):
    _, crm = upstream
    crm.responses.append(httpx.ReadTimeout("slow"))

    response = await client.post("/api/zoho/contact", json={"email": "a@b.com"})

    assert response.status_code == 504


async def test_rate_limit_is_enforced_per_ip(upstream, client):
    _, crm = upstream
    crm.responses.extend([{"data": [{"action": "insert"}]}] * 3)

    statuses = []
    for _ in range(4):
        response = await client.post(
            "/api/zoho/contact",
            json={"email": "a@b.com"},
            headers={"x-forwarded-for": "203.0.113.7"},
        )
        statuses.append(response.status_code)

    assert statuses == [200, 200, 200, 429]
    assert response.json() == {"error": "Too many requests"}

    other = await client.post(
        "/api/zoho/contact",
        json={"email": "a@b.com", "honeypot": "x"},
        headers={"x-forwarded-for": "198.51.100.1"},
    )
    assert other.status_code == 400


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["ts"]


async def test_oauth_callback_acknowledges_code(client):
    response = await client.get("/zoho/callback", params={"code": "1000.abc", "state": "s"})

    assert response.status_code == 200
    assert "Authorization received" in response.text


async def test_oauth_callback_reports_errors(client):
    response = await client.get("/zoho/callback", params={"error": "<access_denied>"})

    assert response.status_code == 400
    assert "&lt;access_denied&gt;" in response.text
