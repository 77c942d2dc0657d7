"""End-to-end capability tests with a mocked API and a fake browser engine."""
import json
from typing import List

import httpx
import pytest

from linkedin_navigator_pkg.client import LinkedInClient, recipient_id_from_urn
from linkedin_navigator_pkg.config import ClientConfig
from linkedin_navigator_pkg.exceptions import (
    CapabilityError,
    NavigationError,
    SubscriptionRequiredError,
    TransportError,
)

from .conftest import FakeEngine

PROFILE_PAYLOAD = {
    "data": {"*elements": ["urn:li:fsd_profile:ACoAAB123"]},
    "included": [
        {
            "$type": "com.linkedin.voyager.dash.identity.profile.Profile",
            "publicIdentifier": "john-doe-123",
            "firstName": "John",
            "lastName": "Doe",
            "headline": "Engineer",
        },
        {"$type": "com.linkedin.voyager.dash.identity.profile.Position", "title": "Engineer"},
        {"$type": "com.linkedin.voyager.dash.identity.profile.Position", "title": "Intern"},
        {"$type": "com.linkedin.voyager.dash.identity.profile.PositionGroup", "name": "Acme"},
        {"$type": "com.linkedin.voyager.dash.organization.Company", "name": "Acme"},
    ],
}


def lead_rows(n: int) -> str:
    return "".join(
        '<li class="artdeco-list__item">'
        f'<span data-anonymize="person-name">Lead {i}</span>'
        '<span data-anonymize="title">VP Sales</span>'
        "</li>"
        for i in range(n)
    )


def conversations(n: int) -> str:
    return "".join(
        '<li class="msg-conversation-listitem">'
        f'<a href="/messaging/thread/{i}/"><h3 class="msg-conversation-listitem__participant-names">'
        f"<span>Person {i}</span></h3></a></li>"
        for i in range(n)
    )


class Recorder:
    """httpx handler that records requests and replays canned responses in order."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


def build_client(config: ClientConfig, make_transport, recorder: Recorder, engine: FakeEngine) -> LinkedInClient:
    return LinkedInClient(config, transport=make_transport(recorder), engine=engine)


# =============================================================================
# FLAGSHIP (API ONLY)
# =============================================================================
class TestProfiles:
    @pytest.mark.asyncio
    async def test_get_profile_single_call_payload_unchanged(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(200, json=PROFILE_PAYLOAD))
        engine = FakeEngine()
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.get_profile("john-doe-123")

        assert result == PROFILE_PAYLOAD
        assert len(recorder.requests) == 1
        request = recorder.requests[0]
        assert request.url.path == "/voyager/api/identity/dash/profiles"
        assert b"memberIdentity=john-doe-123" in request.url.query
        assert b"WebTopCardCore-18" in request.url.query
        assert engine.visited == []

    @pytest.mark.asyncio
    async def test_identifier_is_encoded(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(200, json={}))
        client = build_client(client_config, make_transport, recorder, FakeEngine())

        await client.get_profile("jane doe")

        assert b"memberIdentity=jane%20doe" in recorder.requests[0].url.query

    @pytest.mark.asyncio
    async def test_api_failure_never_falls_back(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(404, text="not found"))
        engine = FakeEngine()
        client = build_client(client_config, make_transport, recorder, engine)

        with pytest.raises(TransportError) as excinfo:
            await client.get_profile("ghost")

        assert excinfo.value.status_code == 404
        assert engine.visited == []

    @pytest.mark.asyncio
    async def test_experience_excludes_position_groups(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(200, json=PROFILE_PAYLOAD))
        client = build_client(client_config, make_transport, recorder, FakeEngine())

        result = await client.get_profile_experience("john-doe-123")

        assert [p["title"] for p in result["positions"]] == ["Engineer", "Intern"]
        assert result["total"] == 2
        assert len(result["positionGroups"]) == 1
        assert len(result["companies"]) == 1

    @pytest.mark.asyncio
    async def test_contact_info_reads_profile_entity(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(200, json=PROFILE_PAYLOAD))
        client = build_client(client_config, make_transport, recorder, FakeEngine())

        result = await client.get_profile_contact_info("john-doe-123")

        assert result["firstName"] == "John"
        assert "_note" in result

    @pytest.mark.asyncio
    async def test_validate_session(self, client_config, make_transport) -> None:
        ok = build_client(client_config, make_transport, Recorder(httpx.Response(200, json={})), FakeEngine())
        expired = build_client(client_config, make_transport, Recorder(httpx.Response(401, text="")), FakeEngine())

        assert await ok.validate_session() is True
        assert await expired.validate_session() is False

    @pytest.mark.asyncio
    async def test_search_people_query(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(200, json={"elements": []}))
        client = build_client(client_config, make_transport, recorder, FakeEngine())

        await client.search_people(keywords="data engineer", network_depths=["F", "S"], count=5)

        query = recorder.requests[0].url.query
        assert recorder.requests[0].url.path == "/voyager/api/search/dash/clusters"
        assert b"keywords:data%20engineer" in query
        assert b"network:List(F,S)" in query
        assert b"count=5" in query


# =============================================================================
# SALES NAVIGATOR (API THEN BROWSER)
# =============================================================================
class TestSalesNavigator:
    @pytest.mark.asyncio
    async def test_forbidden_api_falls_back_to_browser(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(403, text='{"code":"SALES_SEAT_REQUIRED"}'))
        engine = FakeEngine(html=f"<ol>{lead_rows(40)}</ol>")
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.sales_search_leads(keywords="vp sales", count=25)

        assert len(recorder.requests) == 1
        assert engine.visited == ["https://www.linkedin.com/sales/search/people?keywords=vp%20sales"]
        assert result["source"] == "browser_scrape"
        assert result["total"] == 25
        assert len(result["leads"]) == 25
        assert all(lead["source"] == "browser_scrape" for lead in result["leads"])
        assert result["leads"][0]["name"] == "Lead 0"
        assert result["keywords"] == "vp sales"

    @pytest.mark.asyncio
    async def test_api_success_is_returned_as_is(self, client_config, make_transport) -> None:
        payload = {"elements": [{"firstName": "Ann"}], "paging": {"total": 1}}
        recorder = Recorder(httpx.Response(200, json=payload))
        engine = FakeEngine()
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.sales_search_accounts(keywords="fintech")

        assert result == payload
        assert engine.visited == []
        assert recorder.requests[0].url.path == "/sales-api/salesApiAccountSearch"

    @pytest.mark.asyncio
    async def test_both_paths_fail_with_subscription_error(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(403, text="forbidden"))
        engine = FakeEngine(navigate_error=NavigationError("Navigation timed out after 45000ms"))
        client = build_client(client_config, make_transport, recorder, engine)

        with pytest.raises(SubscriptionRequiredError):
            await client.get_lead_lists()

        assert len(engine.visited) == 1

    @pytest.mark.asyncio
    async def test_sales_profile_browser_fallback(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(500, text="boom"))
        engine = FakeEngine(html='<h1 class="profile-topcard-person-entity__name">John Doe</h1>')
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.get_sales_profile("ACwAA123,NAME_SEARCH,abc")

        assert result["name"] == "John Doe"
        assert result["lead_id"] == "ACwAA123,NAME_SEARCH,abc"
        assert result["source"] == "browser_scrape"
        assert engine.visited == ["https://www.linkedin.com/sales/lead/ACwAA123%2CNAME_SEARCH%2Cabc"]

    @pytest.mark.asyncio
    async def test_saved_leads_fallback_reports_load_state(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(403, text="no seat"))
        engine = FakeEngine(found=False)
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.get_saved_leads()

        assert result["loaded"] is False
        assert result["source"] == "browser_scrape"


# =============================================================================
# POLICY COVERAGE PER CAPABILITY
# =============================================================================
BASE = "https://www.linkedin.com"

ACCOUNT_ROW = (
    '<li class="artdeco-list__item">'
    '<a data-anonymize="company-name" href="/sales/company/1035">Acme Corp</a>'
    '<span class="artdeco-entity-lockup__subtitle">Software Development</span>'
    '<span class="artdeco-entity-lockup__caption">501-1K employees</span>'
    "</li>"
)

FALLBACK_CASES = [
    ("sales_search_leads", {"keywords": "cto"}, f"{BASE}/sales/search/people?keywords=cto"),
    ("sales_search_accounts", {"keywords": "fintech"}, f"{BASE}/sales/search/company?keywords=fintech"),
    ("get_sales_profile", {"lead_id": "ACwAA1"}, f"{BASE}/sales/lead/ACwAA1"),
    ("get_saved_leads", {}, f"{BASE}/sales/lists/people"),
    ("get_lead_lists", {}, f"{BASE}/sales/lists/people"),
    ("get_lead_list_members", {"list_id": "701"}, f"{BASE}/sales/lists/people/701"),
    ("get_lead_recommendations", {}, f"{BASE}/sales/home"),
]

API_ONLY_CASES = [
    ("get_own_profile", {}),
    ("get_profile", {"public_identifier": "john-doe-123"}),
    ("get_profile_details", {"public_identifier": "john-doe-123"}),
    ("get_profile_contact_info", {"public_identifier": "john-doe-123"}),
    ("get_profile_skills", {"public_identifier": "john-doe-123"}),
    ("get_profile_experience", {"public_identifier": "john-doe-123"}),
    ("search_people", {"keywords": "cto"}),
    ("get_company", {"universal_name": "acme"}),
    ("search_companies", {"keywords": "acme"}),
    ("send_connection_request", {"profile_urn": "urn:li:fsd_profile:ACoAAB123"}),
]


class TestFallbackPerCapability:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, kwargs, expected_url", FALLBACK_CASES)
    async def test_api_failure_triggers_one_browser_visit(
        self, client_config, make_transport, method, kwargs, expected_url
    ) -> None:
        recorder = Recorder(httpx.Response(500, text="upstream error"))
        engine = FakeEngine(html=f"<ol>{lead_rows(3)}{ACCOUNT_ROW}</ol>")
        client = build_client(client_config, make_transport, recorder, engine)

        result = await getattr(client, method)(**kwargs)

        assert len(recorder.requests) == 1
        assert engine.visited == [expected_url]
        assert result["source"] == "browser_scrape"

    @pytest.mark.asyncio
    async def test_account_fallback_uses_account_rows(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(403, text="forbidden"))
        engine = FakeEngine(html=f"<ol>{lead_rows(3)}{ACCOUNT_ROW}</ol>")
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.sales_search_accounts(keywords="fintech")

        assert result["total"] == 1
        account = result["accounts"][0]
        assert account["name"] == "Acme Corp"
        assert account["industry"] == "Software Development"
        assert account["size"] == "501-1K employees"
        assert account["link"] == "/sales/company/1035"
        assert account["source"] == "browser_scrape"

    @pytest.mark.asyncio
    async def test_list_members_fallback_uses_lead_rows(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(403, text="forbidden"))
        engine = FakeEngine(html=f"<ol>{lead_rows(3)}{ACCOUNT_ROW}</ol>")
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.get_lead_list_members("701", count=2)

        assert result["list_id"] == "701"
        assert [lead["name"] for lead in result["leads"]] == ["Lead 0", "Lead 1"]
        assert result["total"] == 2

    @pytest.mark.asyncio
    async def test_recommendations_fallback_reports_load_state(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(500, text="upstream error"))
        engine = FakeEngine(found=True)
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.get_lead_recommendations()

        assert result["loaded"] is True
        assert "_note" in result


class TestApiOnlyPerCapability:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, kwargs", API_ONLY_CASES)
    async def test_api_failure_propagates_without_browser(self, client_config, make_transport, method, kwargs) -> None:
        recorder = Recorder(httpx.Response(404, text="not found"))
        engine = FakeEngine()
        client = build_client(client_config, make_transport, recorder, engine)

        with pytest.raises(TransportError) as excinfo:
            await getattr(client, method)(**kwargs)

        assert excinfo.value.status_code == 404
        assert len(recorder.requests) == 1
        assert engine.visited == []

    @pytest.mark.asyncio
    async def test_pending_connections_exhaust_every_endpoint(self, client_config, make_transport) -> None:
        recorder = Recorder(
            httpx.Response(404, text="gone"),
            httpx.Response(410, text="gone"),
            httpx.Response(400, text="bad query"),
        )
        engine = FakeEngine()
        client = build_client(client_config, make_transport, recorder, engine)

        with pytest.raises(TransportError) as excinfo:
            await client.get_pending_connections()

        assert excinfo.value.status_code == 400
        assert len(recorder.requests) == 3
        assert recorder.requests[2].url.path == "/voyager/api/graphql"
        assert engine.visited == []


# =============================================================================
# MESSAGING (BROWSER ONLY)
# =============================================================================
class TestMessaging:
    @pytest.mark.asyncio
    async def test_conversations_never_touch_the_api(self, client_config, make_transport) -> None:
        recorder = Recorder()
        engine = FakeEngine(html=f"<ul>{conversations(6)}</ul>")
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.get_conversations(start=2, count=2)

        assert recorder.requests == []
        assert [c["participant_name"] for c in result["conversations"]] == ["Person 2", "Person 3"]
        assert result["total"] == 2
        assert result["source"] == "browser_scrape"

    @pytest.mark.asyncio
    async def test_missing_compose_box_fails_the_call(self, client_config, make_transport) -> None:
        recorder = Recorder()
        engine = FakeEngine(found=False)
        client = build_client(client_config, make_transport, recorder, engine)

        with pytest.raises(CapabilityError) as excinfo:
            await client.send_message("urn:li:fsd_profile:ACoAAB123", "Hello")

        assert "compose box" in excinfo.value.message
        assert recorder.requests == []
        assert engine.visited == [
            "https://www.linkedin.com/messaging/thread/new/?recipient=ACoAAB123",
            "https://www.linkedin.com/messaging/compose/?connId=ACoAAB123",
        ]

    def test_recipient_id_from_urn(self) -> None:
        assert recipient_id_from_urn("urn:li:fsd_profile:ACoAAB123") == "ACoAAB123"
        assert recipient_id_from_urn("urn:li:member:42") == "42"
        assert recipient_id_from_urn("ACoAAB123") == "ACoAAB123"


# =============================================================================
# CONNECTIONS
# =============================================================================
class TestConnections:
    @pytest.mark.asyncio
    async def test_connection_request_payload(self, client_config, make_transport) -> None:
        recorder = Recorder(httpx.Response(200, json={"value": {"invitationUrn": "urn:li:invitation:1"}}))
        client = build_client(client_config, make_transport, recorder, FakeEngine())

        result = await client.send_connection_request("urn:li:fsd_profile:ACoAAB123", message="Hi!")

        request = recorder.requests[0]
        body = json.loads(request.content)
        assert request.method == "POST"
        assert body["inviteeProfileUrn"] == "urn:li:fsd_profile:ACoAAB123"
        assert body["message"] == "Hi!"
        assert len(body["trackingId"]) == 36
        assert result == {"value": {"invitationUrn": "urn:li:invitation:1"}}

    @pytest.mark.asyncio
    async def test_pending_connections_try_next_endpoint(self, client_config, make_transport) -> None:
        recorder = Recorder(
            httpx.Response(404, text="gone"),
            httpx.Response(200, json={"elements": [{"id": "inv-1"}]}),
        )
        client = build_client(client_config, make_transport, recorder, FakeEngine())

        result = await client.get_pending_connections()

        assert result == {"elements": [{"id": "inv-1"}]}
        assert len(recorder.requests) == 2
        assert recorder.requests[1].url.path == "/voyager/api/relationships/invitationViews"


@pytest.mark.asyncio
async def test_aclose_closes_engine(client_config, make_transport) -> None:
    engine = FakeEngine()
    client = build_client(client_config, make_transport, Recorder(), engine)

    await client.aclose()

    assert engine.closed is True


# =============================================================================
# CONVERSATION THREADS (BROWSER ONLY)
# =============================================================================
def thread_messages(n: int) -> str:
    return "".join(
        '<div class="msg-s-message-list__event">'
        '<span class="msg-s-message-group__name">Jane Roe</span>'
        f'<p class="msg-s-event-listitem__body">Message {i}</p>'
        "</div>"
        for i in range(n)
    )


class TestConversationMessages:
    @pytest.mark.asyncio
    async def test_thread_id_builds_url_and_pages(self, client_config, make_transport) -> None:
        recorder = Recorder()
        engine = FakeEngine(html=thread_messages(5))
        client = build_client(client_config, make_transport, recorder, engine)

        result = await client.get_conversation_messages("2-abc==", start=1, count=2)

        assert recorder.requests == []
        assert engine.visited == [f"{BASE}/messaging/thread/2-abc%3D%3D/"]
        assert [m["body"] for m in result["messages"]] == ["Message 1", "Message 2"]
        assert result["total"] == 2
        assert result["conversation_id"] == "2-abc=="
        assert result["source"] == "browser_scrape"
        assert all(m["source"] == "browser_scrape" for m in result["messages"])

    @pytest.mark.asyncio
    async def test_full_thread_url_is_used_as_is(self, client_config, make_transport) -> None:
        recorder = Recorder()
        engine = FakeEngine(html=thread_messages(1))
        client = build_client(client_config, make_transport, recorder, engine)
        url = f"{BASE}/messaging/thread/2-xyz/"

        result = await client.get_conversation_messages(url)

        assert engine.visited == [url]
        assert result["messages"][0]["sender_name"] == "Jane Roe"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_navigation_failure_is_a_capability_error(self, client_config, make_transport) -> None:
        recorder = Recorder()
        engine = FakeEngine(navigate_error=NavigationError("Navigation timed out after 45000ms"))
        client = build_client(client_config, make_transport, recorder, engine)

        with pytest.raises(CapabilityError) as excinfo:
            await client.get_conversation_messages("2-abc")

        assert not isinstance(excinfo.value, SubscriptionRequiredError)
        assert recorder.requests == []
