"""Capability registry shared by the MCP server and the HTTP app.

Each entry names a LinkedInClient method, describes it, and carries the
pydantic model that validates its arguments before the call is made.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from mcp.types import Tool
from pydantic import BaseModel, ValidationError

from .client import LinkedInClient
from .exceptions import LinkedInError
from .models import (
    CompanyParams,
    ConnectionRequestParams,
    ConversationMessagesParams,
    EmptyParams,
    LeadListMembersParams,
    Pagination,
    ProfileParams,
    SalesAccountSearchParams,
    SalesProfileParams,
    SalesSearchParams,
    SearchCompaniesParams,
    SearchPeopleParams,
    SendMessageParams,
    ShortPagination,
)
from .response import build_error, build_response

logger = logging.getLogger(__name__)

SALES_NOTE = " (requires Sales Navigator subscription)"


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    params: Type[BaseModel]
    method: Optional[str] = None

    @property
    def method_name(self) -> str:
        return self.method or self.name


TOOL_SPECS: List[ToolSpec] = [
    ToolSpec("validate_session", "Validate that the LinkedIn session cookie is still active and working", EmptyParams),
    ToolSpec("get_own_profile", "Get the authenticated user's own LinkedIn profile information", EmptyParams),
    ToolSpec("get_profile", "Get a LinkedIn profile by public identifier (vanity URL slug, e.g. 'john-doe-123')", ProfileParams),
    ToolSpec("get_profile_details", "Get detailed profile information including experience, education, and skills", ProfileParams),
    ToolSpec("get_profile_contact_info", "Get contact information (email, phone, websites) for a LinkedIn profile", ProfileParams),
    ToolSpec("get_profile_skills", "Get the skills listed on a LinkedIn profile", ProfileParams),
    ToolSpec("get_profile_experience", "Get the work experience listed on a LinkedIn profile", ProfileParams),
    ToolSpec(
        "search_people",
        "Search for people on LinkedIn with various filters (keywords, company, industry, location, title, school, network depth)",
        SearchPeopleParams,
    ),
    ToolSpec("get_company", "Get detailed information about a company by its universal name (vanity URL slug)", CompanyParams),
    ToolSpec("search_companies", "Search for companies on LinkedIn by keywords, industry, region, or size", SearchCompaniesParams),
    ToolSpec("sales_search_leads", "Search for leads using LinkedIn Sales Navigator" + SALES_NOTE, SalesSearchParams),
    ToolSpec(
        "sales_search_accounts",
        "Search for accounts (companies) using LinkedIn Sales Navigator" + SALES_NOTE,
        SalesAccountSearchParams,
    ),
    ToolSpec("get_sales_profile", "Get a lead's profile from Sales Navigator" + SALES_NOTE, SalesProfileParams),
    ToolSpec("get_saved_leads", "Get your saved leads from Sales Navigator" + SALES_NOTE, Pagination),
    ToolSpec("get_lead_lists", "Get all lead lists from Sales Navigator" + SALES_NOTE, Pagination),
    ToolSpec(
        "get_lead_list_members",
        "Get the leads within a specific Sales Navigator lead list" + SALES_NOTE,
        LeadListMembersParams,
    ),
    ToolSpec("get_lead_recommendations", "Get lead recommendations from Sales Navigator" + SALES_NOTE, Pagination),
    ToolSpec(
        "send_message",
        "Send a message to a LinkedIn member. For InMail, include a subject. "
        "The recipient URN should be in the format 'urn:li:fsd_profile:MEMBER_ID'",
        SendMessageParams,
    ),
    ToolSpec("get_conversations", "Get recent conversation threads from the LinkedIn inbox", ShortPagination),
    ToolSpec("get_conversation_messages", "Get messages from a specific LinkedIn conversation thread", ConversationMessagesParams),
    ToolSpec(
        "send_connection_request",
        "Send a connection request to a LinkedIn member with an optional personalized message (max 300 characters)",
        ConnectionRequestParams,
    ),
    ToolSpec("get_pending_connections", "Get pending outgoing connection requests", ShortPagination),
]

TOOLS_BY_NAME: Dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_SPECS}


def create_tools() -> List[Tool]:
    """MCP tool definitions, with JSON schemas generated from the param models."""
    return [
        Tool(name=spec.name, description=spec.description, inputSchema=spec.params.model_json_schema())
        for spec in TOOL_SPECS
    ]


def describe_tools() -> List[Dict[str, Any]]:
    return [
        {"name": spec.name, "description": spec.description, "parameters": spec.params.model_json_schema()}
        for spec in TOOL_SPECS
    ]


def _session_message(valid: bool) -> Dict[str, Any]:
    return {
        "valid": valid,
        "message": (
            "Session is valid. The LinkedIn cookie is active."
            if valid
            else "Session is invalid. The LinkedIn cookie may have expired. Please update LI_AT_COOKIE."
        ),
    }


async def handle_tool_call(client: LinkedInClient, name: str, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate, dispatch and wrap one call. Never raises."""
    spec = TOOLS_BY_NAME.get(name)
    if spec is None:
        return build_error(name, ValueError(f"Unknown tool: {name}"))

    try:
        params = spec.params.model_validate(arguments or {})
    except ValidationError as e:
        return build_error(name, ValueError(f"Invalid arguments: {e.errors(include_url=False)}"))

    try:
        method = getattr(client, spec.method_name)
        result = await method(**params.model_dump())
    except Exception as e:
        logger.error("Tool %s failed: %s", name, e, exc_info=not isinstance(e, LinkedInError))
        return build_error(name, e)

    if name == "validate_session":
        result = _session_message(bool(result))
    return build_response(name, result)
