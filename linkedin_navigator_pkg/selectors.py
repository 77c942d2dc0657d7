"""DOM-to-record rules for every page the browser path scrapes.

Selectors prefer `data-anonymize` attributes and long-lived BEM class names
over generated class names; alternatives are comma-joined so the first one
present in document order wins. When the UI changes, this is the only file
that should need editing.
"""
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Type

from .models import (
    AccountRecord,
    ConversationRecord,
    LeadListRecord,
    LeadRecord,
    MessageRecord,
    ProfilePositionRecord,
    ScrapedRecord,
)

# Sales Navigator renders grey placeholder rows containing this element
# until the real results arrive.
SKELETON_SELECTOR = ".dummy-text"


@dataclass(frozen=True)
class FieldRule:
    selector: str
    fallback: str = ""
    attribute: Optional[str] = None
    # Used when the element exists but its text is empty (e.g. <time datetime>).
    fallback_attribute: Optional[str] = None
    collapse_whitespace: bool = False
    absolute_url: bool = False


@dataclass(frozen=True)
class FlagRule:
    """A boolean field: true when the item carries `item_class` or contains `selector`."""
    item_class: Optional[str] = None
    selector: Optional[str] = None


@dataclass(frozen=True)
class ExtractionRule:
    name: str
    record_type: Type[ScrapedRecord]
    root_selector: Optional[str]
    wait_selector: str
    fields: Dict[str, FieldRule]
    required_selector: Optional[str] = None
    skip_selector: Optional[str] = None
    flags: Dict[str, FlagRule] = field(default_factory=dict)


LEAD_SEARCH_RULE = ExtractionRule(
    name="lead_search",
    record_type=LeadRecord,
    root_selector="li.artdeco-list__item",
    wait_selector='[data-anonymize="person-name"]',
    required_selector='[data-anonymize="person-name"]',
    skip_selector=SKELETON_SELECTOR,
    fields={
        "name": FieldRule('[data-anonymize="person-name"]', fallback="Unknown"),
        "title": FieldRule('[data-anonymize="title"]'),
        "company": FieldRule('[data-anonymize="company-name"]'),
        "location": FieldRule('[data-anonymize="location"]'),
        "summary": FieldRule('[data-anonymize="person-blurb"]'),
        "tenure": FieldRule('[data-anonymize="job-title"]', collapse_whitespace=True),
        "connection_degree": FieldRule(".artdeco-entity-lockup__badge", collapse_whitespace=True),
        "profile_link": FieldRule('a[href*="/sales/lead/"]', attribute="href"),
    },
)

ACCOUNT_SEARCH_RULE = ExtractionRule(
    name="account_search",
    record_type=AccountRecord,
    root_selector="li.artdeco-list__item",
    wait_selector='[data-anonymize="company-name"]',
    required_selector='[data-anonymize="company-name"]',
    skip_selector=SKELETON_SELECTOR,
    fields={
        "name": FieldRule('[data-anonymize="company-name"]', fallback="Unknown"),
        "industry": FieldRule(".artdeco-entity-lockup__subtitle"),
        "size": FieldRule(".artdeco-entity-lockup__caption"),
        "location": FieldRule('[data-anonymize="location"]'),
        "link": FieldRule('a[href*="/sales/company/"]', attribute="href"),
    },
)

CONVERSATION_RULE = ExtractionRule(
    name="conversation_list",
    record_type=ConversationRecord,
    root_selector="li.msg-conversation-listitem",
    wait_selector="li.msg-conversation-listitem",
    fields={
        "participant_name": FieldRule(
            "h3.msg-conversation-listitem__participant-names span, "
            ".msg-conversation-card__participant-names",
            fallback="Unknown",
        ),
        "last_message": FieldRule(
            "p.msg-conversation-listitem__message-snippet, "
            ".msg-conversation-card__message-snippet"
        ),
        "timestamp": FieldRule(
            "time.msg-conversation-listitem__time-stamp, "
            ".msg-conversation-card__time-stamp",
            fallback_attribute="datetime",
        ),
        "conversation_link": FieldRule("a", attribute="href", absolute_url=True),
    },
    flags={
        "unread": FlagRule(
            item_class="msg-conversation-listitem--unread",
            selector=".msg-conversation-card--unread",
        ),
    },
)

MESSAGE_RULE = ExtractionRule(
    name="conversation_messages",
    record_type=MessageRecord,
    root_selector=".msg-s-message-list__event",
    wait_selector=".msg-s-message-list__event",
    fields={
        "sender_name": FieldRule(
            ".msg-s-message-group__name, .msg-s-event-listitem__sender-name",
            fallback="Unknown",
        ),
        "body": FieldRule(".msg-s-event-listitem__body, .msg-s-message-group__body"),
        "timestamp": FieldRule(
            "time.msg-s-message-group__timestamp, time.msg-s-event-listitem__timestamp",
            fallback_attribute="datetime",
        ),
    },
)

# Document-scoped: the lead page has one top card, not a list.
LEAD_PROFILE_RULE = ExtractionRule(
    name="lead_profile",
    record_type=ProfilePositionRecord,
    root_selector=None,
    wait_selector=".profile-topcard",
    fields={
        "name": FieldRule(
            '.profile-topcard-person-entity__name, [data-anonymize="person-name"]',
            fallback="Unknown",
        ),
        "headline": FieldRule('.profile-topcard__summary-position, [data-anonymize="headline"]'),
        "company": FieldRule('.profile-topcard__summary-position a, [data-anonymize="company-name"]'),
        "location": FieldRule('.profile-topcard__location-data, [data-anonymize="location"]'),
        "summary": FieldRule(".profile-topcard__summary-content"),
    },
)

LEAD_LIST_RULE = ExtractionRule(
    name="lead_lists",
    record_type=LeadListRecord,
    root_selector='.lists-nav__list-item, li[class*="artdeco-list"]',
    wait_selector='.lists-nav__list-item, li[class*="artdeco-list"]',
    fields={
        "name": FieldRule("a", fallback="Unknown"),
        "link": FieldRule("a", attribute="href"),
    },
)

# Saved leads and list members render the same lead rows as search results.
LEAD_ROWS_RULE = replace(
    LEAD_SEARCH_RULE,
    name="lead_rows",
    wait_selector='li[class*="artdeco-list__item"]',
)
