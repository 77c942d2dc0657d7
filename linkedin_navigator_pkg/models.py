from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


BROWSER_SOURCE = "browser_scrape"


class RequestDescriptor(BaseModel):
    """A single call against the internal API.

    `path` is either relative to the platform host or an absolute URL.
    """
    path: str
    method: Literal["GET", "POST", "PUT", "DELETE"] = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None


class ResponseEnvelope(BaseModel):
    status_code: int
    data: Any = None
    text: str = ""


# -- Scraped records ------------------------------------------------------
# Every field falls back to a defined value so callers never see None for
# an element that failed to render.


class ScrapedRecord(BaseModel):
    source: str = BROWSER_SOURCE


class LeadRecord(ScrapedRecord):
    name: str = "Unknown"
    title: str = ""
    company: str = ""
    location: str = ""
    summary: str = ""
    tenure: str = ""
    connection_degree: str = ""
    profile_link: str = ""


class AccountRecord(ScrapedRecord):
    name: str = "Unknown"
    industry: str = ""
    size: str = ""
    location: str = ""
    link: str = ""


class ConversationRecord(ScrapedRecord):
    participant_name: str = "Unknown"
    last_message: str = ""
    timestamp: str = ""
    unread: bool = False
    conversation_link: str = ""


class MessageRecord(ScrapedRecord):
    sender_name: str = "Unknown"
    body: str = ""
    timestamp: str = ""


class ProfilePositionRecord(ScrapedRecord):
    name: str = "Unknown"
    headline: str = ""
    company: str = ""
    location: str = ""
    summary: str = ""


class LeadListRecord(ScrapedRecord):
    name: str = "Unknown"
    link: str = ""


class ExtractionResult(BaseModel):
    """Records pulled from one rendered page.

    `total` counts what was extracted, not what the server holds.
    """
    records: List[ScrapedRecord] = Field(default_factory=list)
    total: int = 0


# -- Capability parameters ------------------------------------------------


class Pagination(BaseModel):
    start: int = Field(0, ge=0, description="Pagination start index (default 0)")
    count: int = Field(25, ge=1, le=100, description="Number of results (default 25)")


class ShortPagination(Pagination):
    count: int = Field(20, ge=1, le=100, description="Number of results (default 20)")


class EmptyParams(BaseModel):
    pass


class ProfileParams(BaseModel):
    public_identifier: str = Field(..., min_length=1, description="The LinkedIn public identifier / vanity URL slug")


class SearchPeopleParams(BaseModel):
    keywords: Optional[str] = Field(None, description="Search keywords")
    current_company: Optional[List[str]] = Field(None, description="Filter by current company IDs")
    past_company: Optional[List[str]] = Field(None, description="Filter by past company IDs")
    industries: Optional[List[str]] = Field(None, description="Filter by industry codes")
    regions: Optional[List[str]] = Field(None, description="Filter by geo region URNs")
    schools: Optional[List[str]] = Field(None, description="Filter by school IDs")
    title: Optional[str] = Field(None, description="Filter by job title")
    network_depths: Optional[List[Literal["F", "S", "O"]]] = Field(
        None, description="Network depth: F=1st, S=2nd, O=3rd+"
    )
    connection_of: Optional[str] = Field(None, description="Only people connected to this profile URN id")
    start: int = Field(0, ge=0, description="Pagination start index (default 0)")
    count: int = Field(10, ge=1, le=100, description="Number of results (default 10)")


class CompanyParams(BaseModel):
    universal_name: str = Field(..., min_length=1, description="The company's universal name / vanity URL (e.g. 'google')")


class SearchCompaniesParams(BaseModel):
    keywords: Optional[str] = Field(None, description="Search keywords")
    industries: Optional[List[str]] = Field(None, description="Filter by industry codes")
    regions: Optional[List[str]] = Field(None, description="Filter by geo region URNs")
    company_size: Optional[List[str]] = Field(None, description="Filter by company size codes")
    start: int = Field(0, ge=0, description="Pagination start index (default 0)")
    count: int = Field(10, ge=1, le=100, description="Number of results (default 10)")


class SalesSearchParams(Pagination):
    keywords: Optional[str] = Field(None, description="Search keywords")
    title: Optional[str] = Field(None, description="Filter by job title")
    company: Optional[str] = Field(None, description="Filter by company name")
    geography: Optional[str] = Field(None, description="Filter by geography/location")
    industry: Optional[str] = Field(None, description="Filter by industry")
    seniority_level: Optional[str] = Field(None, description="Filter by seniority level (e.g. 'VP', 'Director', 'Manager')")
    function_area: Optional[str] = Field(None, description="Filter by function/department (e.g. 'Engineering', 'Sales')")


class SalesAccountSearchParams(Pagination):
    keywords: Optional[str] = Field(None, description="Search keywords")
    geography: Optional[str] = Field(None, description="Filter by geography/location")
    industry: Optional[str] = Field(None, description="Filter by industry")


class SalesProfileParams(BaseModel):
    lead_id: str = Field(..., min_length=1, description="The Sales Navigator lead/profile ID")


class LeadListMembersParams(Pagination):
    list_id: str = Field(..., min_length=1, description="The lead list ID")


class SendMessageParams(BaseModel):
    recipient_urn: str = Field(..., min_length=1, description="The recipient's profile URN (e.g. 'urn:li:fsd_profile:ACoAAB...')")
    body: str = Field(..., min_length=1, description="The message body text")
    subject: Optional[str] = Field(None, description="Message subject (required for InMail)")


class ConversationMessagesParams(ShortPagination):
    conversation_id: str = Field(..., min_length=1, description="The conversation thread ID or full thread URL")


class ConnectionRequestParams(BaseModel):
    profile_urn: str = Field(..., min_length=1, description="The profile URN (e.g. 'urn:li:fsd_profile:ACoAAB...')")
    message: Optional[str] = Field(None, max_length=300, description="Optional personalized message (max 300 chars)")
