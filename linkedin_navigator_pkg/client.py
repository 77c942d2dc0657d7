"""LinkedIn capabilities on top of the two transports.

Flagship profile, search and company reads go through the internal API
only. Sales Navigator reads try the API first and fall back to scraping the
Sales Navigator UI once. Messaging has no working API and always drives the
browser.
"""
import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from playwright.async_api import Page

from .config import BASE_URL, ClientConfig
from .engine import BrowserEngine
from .exceptions import ExtractionEmpty, LinkedInError
from .extraction import extract_records, extract_single
from .models import ExtractionResult
from .navigation import random_delay, type_like_human
from .orchestrator import FallbackOrchestrator, TransportPolicy
from .restli import encode_component, join_query, search_clusters_query, sales_search_query
from .selectors import (
    ACCOUNT_SEARCH_RULE,
    CONVERSATION_RULE,
    LEAD_LIST_RULE,
    LEAD_PROFILE_RULE,
    LEAD_ROWS_RULE,
    LEAD_SEARCH_RULE,
    MESSAGE_RULE,
    ExtractionRule,
)
from .session import SessionCredentials
from .transport import DirectTransport

logger = logging.getLogger(__name__)

PROFILE_TOP_CARD_DECORATION = "com.linkedin.voyager.dash.deco.identity.profile.WebTopCardCore-18"
PROFILE_FULL_DECORATION = "com.linkedin.voyager.dash.deco.identity.profile.FullProfileWithEntities-93"
COMPANY_DECORATION = "com.linkedin.voyager.deco.organization.web.WebFullCompanyMain-35"
SALES_PROFILE_DECORATION = (
    "%28entityUrn%2CfirstName%2ClastName%2CfullName%2Cheadline%2CmemberBadges%2Cdegree"
    "%2CprofilePictureDisplayImage%2CpendingInvitation%2CunlockHighlight%2Clocation"
    "%2ClistCount%2Csummary%2CsavedLead%2CdefaultPosition%2CcontactInfo%2CcrmStatus%2Cpositions*%29"
)
URN_PREFIXES = ("urn:li:fsd_profile:", "urn:li:fs_miniProfile:", "urn:li:member:")

COMPOSE_SELECTOR = 'div.msg-form__contenteditable[contenteditable="true"]'
SUBJECT_SELECTOR = 'input[name="subject"]'
SEND_BUTTON_SELECTOR = "button.msg-form__send-button"

SEARCH_WAIT_MS = 20000
PAGE_WAIT_MS = 15000


def find_profile_entity(full_profile: Any) -> Optional[Dict[str, Any]]:
    """Return the Profile entity from a normalized `included` array."""
    included = (full_profile or {}).get("included") or []
    for item in included:
        if "identity.profile.Profile" in (item.get("$type") or ""):
            return item
    return None


def entities_of_type(full_profile: Any, type_fragment: str, exclude: Sequence[str] = ()) -> List[Dict[str, Any]]:
    included = (full_profile or {}).get("included") or []
    matches = []
    for item in included:
        entity_type = item.get("$type") or ""
        if type_fragment in entity_type and not any(x in entity_type for x in exclude):
            matches.append(item)
    return matches


def recipient_id_from_urn(urn: str) -> str:
    for prefix in URN_PREFIXES:
        urn = urn.replace(prefix, "")
    return urn


class LinkedInClient:
    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[DirectTransport] = None,
        engine: Optional[BrowserEngine] = None,
        orchestrator: Optional[FallbackOrchestrator] = None,
    ) -> None:
        self.config = config
        self.credentials = SessionCredentials(li_at=config.li_at, jsessionid=config.jsessionid)
        self.transport = transport or DirectTransport(self.credentials, timeout=config.http_timeout)
        self.engine = engine or BrowserEngine(
            self.credentials,
            headless=config.headless,
            slow_mo_ms=config.slow_mo_ms,
            navigation_timeout_ms=config.navigation_timeout_ms,
            settle_ms=config.settle_ms,
        )
        self.orchestrator = orchestrator or FallbackOrchestrator()

    async def aclose(self) -> None:
        await self.engine.close()
        await self.transport.aclose()

    # -- plumbing -----------------------------------------------------------

    async def _api(self, capability: str, path: str) -> Any:
        return await self.orchestrator.run(
            capability,
            TransportPolicy.API_ONLY,
            api_call=lambda: self.transport.get_json(path),
        )

    async def _sales(self, capability: str, path: str, browser_call) -> Any:
        return await self.orchestrator.run(
            capability,
            TransportPolicy.API_THEN_BROWSER,
            api_call=lambda: self.transport.get_json(path),
            browser_call=browser_call,
        )

    async def _scrape_list(
        self,
        url: str,
        rule: ExtractionRule,
        count: int,
        wait_ms: int = PAGE_WAIT_MS,
        settle: bool = False,
    ) -> ExtractionResult:
        """Load `url` on the shared page and extract up to `count` records."""

        async def extract(page: Page) -> ExtractionResult:
            found = await self.engine.wait_for_content(page, rule.wait_selector, wait_ms)
            if not found:
                logger.info("[%s] no content rendered at %s", rule.name, url.split("?")[0])
            elif settle:
                await self.engine.settle()
            html = await self.engine.snapshot(page)
            return extract_records(html, rule, count)

        async with self.engine.session() as page:
            return await self.engine.navigate_and_extract(page, url, extract)

    # -- session ------------------------------------------------------------

    async def validate_session(self) -> bool:
        try:
            await self.get_own_profile()
            return True
        except LinkedInError as e:
            logger.info("Session validation failed: %s", e)
            return False

    # -- profile ------------------------------------------------------------

    async def get_own_profile(self) -> Any:
        return await self._api("get_own_profile", "/voyager/api/me")

    async def get_profile(self, public_identifier: str) -> Any:
        return await self._api(
            "get_profile",
            "/voyager/api/identity/dash/profiles?" + join_query([
                ("q", "memberIdentity"),
                ("memberIdentity", encode_component(public_identifier)),
                ("decorationId", PROFILE_TOP_CARD_DECORATION),
            ]),
        )

    async def get_profile_details(self, public_identifier: str) -> Any:
        return await self._api(
            "get_profile_details",
            "/voyager/api/identity/dash/profiles?" + join_query([
                ("q", "memberIdentity"),
                ("memberIdentity", encode_component(public_identifier)),
                ("decorationId", PROFILE_FULL_DECORATION),
            ]),
        )

    async def get_profile_contact_info(self, public_identifier: str) -> Dict[str, Any]:
        """Basic identity fields; Voyager no longer returns email/phone/websites."""
        profile = find_profile_entity(await self.get_profile_details(public_identifier))
        if profile is None:
            return {
                "_note": "Profile not found. LinkedIn no longer exposes contact info through the Voyager API.",
            }
        return {
            "publicIdentifier": profile.get("publicIdentifier"),
            "firstName": profile.get("firstName"),
            "lastName": profile.get("lastName"),
            "headline": profile.get("headline"),
            "location": profile.get("locationName") or profile.get("location"),
            "address": profile.get("address"),
            "_note": (
                "LinkedIn deprecated the contact info API endpoint. Email, phone, and website "
                "data are no longer available through Voyager. Use get_profile_details for full profile data."
            ),
        }

    async def get_profile_skills(self, public_identifier: str) -> Dict[str, Any]:
        profile = find_profile_entity(await self.get_profile_details(public_identifier))
        summary = (profile or {}).get("summary") or "N/A"
        return {
            "publicIdentifier": public_identifier,
            "skills": [],
            "_note": (
                "LinkedIn deprecated the skills API endpoint. Skill data is no longer returned "
                "through the Voyager API. The profile summary may mention skills: " + summary
            ),
        }

    async def get_profile_experience(self, public_identifier: str) -> Dict[str, Any]:
        full_profile = await self.get_profile_details(public_identifier)
        positions = entities_of_type(full_profile, "identity.profile.Position", exclude=("PositionGroup",))
        return {
            "positions": positions,
            "positionGroups": entities_of_type(full_profile, "identity.profile.PositionGroup"),
            "companies": entities_of_type(full_profile, "organization.Company"),
            "total": len(positions),
        }

    # -- flagship search / company -------------------------------------------

    async def search_people(
        self,
        keywords: Optional[str] = None,
        current_company: Optional[List[str]] = None,
        past_company: Optional[List[str]] = None,
        industries: Optional[List[str]] = None,
        regions: Optional[List[str]] = None,
        schools: Optional[List[str]] = None,
        title: Optional[str] = None,
        network_depths: Optional[List[str]] = None,
        connection_of: Optional[str] = None,
        start: int = 0,
        count: int = 10,
    ) -> Any:
        query = search_clusters_query(
            keywords,
            "PEOPLE",
            [
                ("currentCompany", current_company),
                ("pastCompany", past_company),
                ("industry", industries),
                ("geoUrn", regions),
                ("schools", schools),
                ("network", network_depths),
                ("connectionOf", [connection_of] if connection_of else None),
                ("title", [encode_component(title)] if title else None),
            ],
            start,
            count,
        )
        return await self._api("search_people", f"/voyager/api/search/dash/clusters?{query}")

    async def get_company(self, universal_name: str) -> Any:
        return await self._api(
            "get_company",
            "/voyager/api/organization/companies?" + join_query([
                ("decorationId", COMPANY_DECORATION),
                ("q", "universalName"),
                ("universalName", encode_component(universal_name)),
            ]),
        )

    async def search_companies(
        self,
        keywords: Optional[str] = None,
        industries: Optional[List[str]] = None,
        regions: Optional[List[str]] = None,
        company_size: Optional[List[str]] = None,
        start: int = 0,
        count: int = 10,
    ) -> Any:
        query = search_clusters_query(
            keywords,
            "COMPANIES",
            [
                ("industry", industries),
                ("geoUrn", regions),
                ("companySize", company_size),
            ],
            start,
            count,
        )
        return await self._api("search_companies", f"/voyager/api/search/dash/clusters?{query}")

    # -- Sales Navigator ------------------------------------------------------

    async def sales_search_leads(
        self,
        keywords: Optional[str] = None,
        title: Optional[str] = None,
        company: Optional[str] = None,
        geography: Optional[str] = None,
        industry: Optional[str] = None,
        seniority_level: Optional[str] = None,
        function_area: Optional[str] = None,
        start: int = 0,
        count: int = 25,
    ) -> Any:
        query = sales_search_query(
            keywords,
            [
                ("TITLE", title),
                ("COMPANY", company),
                ("GEO", geography),
                ("INDUSTRY", industry),
                ("SENIORITY", seniority_level),
                ("FUNCTION", function_area),
            ],
            start,
            count,
        )

        async def scrape() -> Dict[str, Any]:
            url = f"{BASE_URL}/sales/search/people"
            if keywords:
                url += f"?keywords={encode_component(keywords)}"
            result = await self._scrape_list(url, LEAD_SEARCH_RULE, count, wait_ms=SEARCH_WAIT_MS, settle=True)
            return {"leads": result.records, "total": result.total, "keywords": keywords}

        return await self._sales("sales_search_leads", f"/sales-api/salesApiLeadSearch?{query}", scrape)

    async def sales_search_accounts(
        self,
        keywords: Optional[str] = None,
        geography: Optional[str] = None,
        industry: Optional[str] = None,
        start: int = 0,
        count: int = 25,
    ) -> Any:
        query = sales_search_query(
            keywords,
            [("GEO", geography), ("INDUSTRY", industry)],
            start,
            count,
        )

        async def scrape() -> Dict[str, Any]:
            url = f"{BASE_URL}/sales/search/company"
            if keywords:
                url += f"?keywords={encode_component(keywords)}"
            result = await self._scrape_list(url, ACCOUNT_SEARCH_RULE, count, wait_ms=SEARCH_WAIT_MS, settle=True)
            return {"accounts": result.records, "total": result.total, "keywords": keywords}

        return await self._sales("sales_search_accounts", f"/sales-api/salesApiAccountSearch?{query}", scrape)

    async def get_sales_profile(self, lead_id: str) -> Any:
        path = (
            f"/sales-api/salesApiProfiles/(profileId:{encode_component(lead_id)})"
            f"?decoration={SALES_PROFILE_DECORATION}"
        )

        async def scrape() -> Dict[str, Any]:
            async def extract(page: Page):
                await self.engine.wait_for_content(page, LEAD_PROFILE_RULE.wait_selector, PAGE_WAIT_MS)
                return extract_single(await self.engine.snapshot(page), LEAD_PROFILE_RULE)

            async with self.engine.session() as page:
                record = await self.engine.navigate_and_extract(
                    page, f"{BASE_URL}/sales/lead/{encode_component(lead_id)}", extract
                )
            return {**record.model_dump(), "lead_id": lead_id}

        return await self._sales("get_sales_profile", path, scrape)

    async def get_saved_leads(self, start: int = 0, count: int = 25) -> Any:
        async def scrape() -> Dict[str, Any]:
            async with self.engine.session() as page:
                await self.engine.navigate(page, f"{BASE_URL}/sales/lists/people", timeout_ms=30000)
                loaded = await self.engine.wait_for_content(
                    page, 'li[class*="artdeco-list__item"], .lists-nav__list-item', PAGE_WAIT_MS
                )
            return {
                "loaded": loaded,
                "_note": "Navigate to Sales Navigator > Lists > People to view saved leads.",
            }

        return await self._sales(
            "get_saved_leads",
            f"/sales-api/salesApiSavedLeads?q=savedLeads&start={start}&count={count}",
            scrape,
        )

    async def get_lead_lists(self, start: int = 0, count: int = 25) -> Any:
        async def scrape() -> Dict[str, Any]:
            result = await self._scrape_list(f"{BASE_URL}/sales/lists/people", LEAD_LIST_RULE, count)
            return {"lists": result.records, "total": result.total}

        return await self._sales(
            "get_lead_lists",
            f"/sales-api/salesApiLeadLists?q=leadLists&start={start}&count={count}",
            scrape,
        )

    async def get_lead_list_members(self, list_id: str, start: int = 0, count: int = 25) -> Any:
        encoded = encode_component(list_id)

        async def scrape() -> Dict[str, Any]:
            result = await self._scrape_list(f"{BASE_URL}/sales/lists/people/{encoded}", LEAD_ROWS_RULE, count)
            return {"list_id": list_id, "leads": result.records, "total": result.total}

        return await self._sales(
            "get_lead_list_members",
            f"/sales-api/salesApiLeadLists/{encoded}/leadListMembers?q=leadListMembers&start={start}&count={count}",
            scrape,
        )

    async def get_lead_recommendations(self, start: int = 0, count: int = 25) -> Any:
        async def scrape() -> Dict[str, Any]:
            async with self.engine.session() as page:
                await self.engine.navigate(page, f"{BASE_URL}/sales/home", timeout_ms=30000)
                loaded = await self.engine.wait_for_content(
                    page, '.lead-recommendations, [data-view-name="lead-recommendation"]', PAGE_WAIT_MS
                )
            return {"loaded": loaded, "_note": "Lead recommendations loaded in Sales Navigator home."}

        return await self._sales(
            "get_lead_recommendations",
            f"/sales-api/salesApiLeadRecommendations?start={start}&count={count}",
            scrape,
        )

    # -- messaging ------------------------------------------------------------

    async def send_message(self, recipient_urn: str, body: str, subject: Optional[str] = None) -> Any:
        recipient_id = recipient_id_from_urn(recipient_urn)
        encoded = encode_component(recipient_id)

        async def compose() -> Dict[str, Any]:
            async with self.engine.session() as page:
                await self.engine.navigate(page, f"{BASE_URL}/messaging/thread/new/?recipient={encoded}")
                if not await self.engine.wait_for_content(page, COMPOSE_SELECTOR, PAGE_WAIT_MS):
                    # Older accounts still open the compose overlay instead.
                    await self.engine.navigate(page, f"{BASE_URL}/messaging/compose/?connId={encoded}")
                    if not await self.engine.wait_for_content(page, COMPOSE_SELECTOR, 10000):
                        raise ExtractionEmpty(
                            "Message compose box did not appear", url=page.url, selector=COMPOSE_SELECTOR
                        )

                if subject and await page.locator(SUBJECT_SELECTOR).count() > 0:
                    await page.fill(SUBJECT_SELECTOR, subject)
                await type_like_human(page, COMPOSE_SELECTOR, body)
                await asyncio.sleep(0.5)

                send_button = await page.query_selector(SEND_BUTTON_SELECTOR)
                if send_button:
                    await send_button.click()
                else:
                    await page.keyboard.press("Enter")
                await random_delay(1.5, 2.5)

            return {"success": True, "message": f"Message sent to {recipient_id}"}

        return await self.orchestrator.run("send_message", TransportPolicy.BROWSER_ONLY, browser_call=compose)

    async def get_conversations(self, start: int = 0, count: int = 20) -> Any:
        async def scrape() -> Dict[str, Any]:
            result = await self._scrape_list(f"{BASE_URL}/messaging/", CONVERSATION_RULE, start + count)
            conversations = result.records[start:]
            return {"conversations": conversations, "total": len(conversations)}

        return await self.orchestrator.run("get_conversations", TransportPolicy.BROWSER_ONLY, browser_call=scrape)

    async def get_conversation_messages(self, conversation_id: str, start: int = 0, count: int = 20) -> Any:
        if conversation_id.startswith("http"):
            url = conversation_id
        else:
            url = f"{BASE_URL}/messaging/thread/{encode_component(conversation_id)}/"

        async def scrape() -> Dict[str, Any]:
            result = await self._scrape_list(url, MESSAGE_RULE, start + count)
            messages = result.records[start:]
            return {"conversation_id": conversation_id, "messages": messages, "total": len(messages)}

        return await self.orchestrator.run(
            "get_conversation_messages", TransportPolicy.BROWSER_ONLY, browser_call=scrape
        )

    # -- connections ----------------------------------------------------------

    async def send_connection_request(self, profile_urn: str, message: Optional[str] = None) -> Any:
        payload: Dict[str, Any] = {
            "inviteeProfileUrn": profile_urn,
            "trackingId": str(uuid.uuid4()),
        }
        if message:
            payload["message"] = message
        return await self.orchestrator.run(
            "send_connection_request",
            TransportPolicy.API_ONLY,
            api_call=lambda: self.transport.post_json(
                "/voyager/api/voyagerRelationshipsDashMemberRelationships?action=verifyQuotaAndCreate",
                payload,
            ),
        )

    async def get_pending_connections(self, start: int = 0, count: int = 20) -> Any:
        """Sent invitations; the endpoint has moved twice, so try each in turn."""
        endpoints = [
            "/voyager/api/voyagerRelationshipsDashMemberRelationships?"
            "decorationId=com.linkedin.voyager.dash.deco.relationships.InvitationView-2"
            f"&q=sentInvitation&start={start}&count={count}",
            f"/voyager/api/relationships/invitationViews?start={start}&count={count}"
            "&includeInsights=true&q=receivedInvitation",
            f"/voyager/api/graphql?variables=(start:{start},count:{count},invitationType:CONNECTION)"
            "&queryId=voyagerRelationshipsDashSentInvitationViews.b4f93905fc7153eb7abcba3f7e01b03e",
        ]

        async def fetch() -> Any:
            for path in endpoints[:-1]:
                try:
                    return await self.transport.get_json(path)
                except LinkedInError as e:
                    logger.info("Pending invitations endpoint failed (%s); trying next", str(e)[:80])
            return await self.transport.get_json(endpoints[-1])

        return await self.orchestrator.run("get_pending_connections", TransportPolicy.API_ONLY, api_call=fetch)
