"""Pure HTML-to-record extraction.

Nothing here touches the browser: the engine hands over a rendered HTML
snapshot and these functions map it to records using an ExtractionRule.
That keeps the brittle, UI-coupled part testable against saved fixtures.
"""
import logging
import re
from typing import Dict, List, Union

from bs4 import BeautifulSoup, Tag

from .config import BASE_URL
from .models import ExtractionResult, ScrapedRecord
from .selectors import ExtractionRule, FieldRule, FlagRule

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def read_field(scope: Union[BeautifulSoup, Tag], rule: FieldRule) -> str:
    """Resolve one field, falling back to `rule.fallback` when absent or empty."""
    el = scope.select_one(rule.selector)
    if el is None:
        return rule.fallback

    if rule.attribute:
        value = (el.get(rule.attribute) or "").strip()
    else:
        value = el.get_text().strip()
        if not value and rule.fallback_attribute:
            value = (el.get(rule.fallback_attribute) or "").strip()

    if rule.collapse_whitespace:
        value = _WHITESPACE.sub(" ", value)
    if rule.absolute_url and value.startswith("/"):
        value = f"{BASE_URL}{value}"
    return value or rule.fallback


def read_flag(item: Tag, rule: FlagRule) -> bool:
    if rule.item_class and rule.item_class in (item.get("class") or []):
        return True
    if rule.selector and item.select_one(rule.selector) is not None:
        return True
    return False


def is_skipped(item: Tag, rule: ExtractionRule) -> bool:
    """Skeleton placeholders and rows without the primary element are dropped."""
    if rule.skip_selector and item.select_one(rule.skip_selector) is not None:
        return True
    if rule.required_selector and item.select_one(rule.required_selector) is None:
        return True
    return False


def build_record(scope: Union[BeautifulSoup, Tag], rule: ExtractionRule) -> ScrapedRecord:
    values: Dict[str, object] = {
        name: read_field(scope, field_rule) for name, field_rule in rule.fields.items()
    }
    if isinstance(scope, Tag):
        for name, flag_rule in rule.flags.items():
            values[name] = read_flag(scope, flag_rule)
    return rule.record_type(**values)


def extract_records(html: str, rule: ExtractionRule, count: int) -> ExtractionResult:
    """Map list items to records in DOM order, keeping at most `count`.

    The cap counts kept records only, so skipped skeleton rows never eat
    into it. `total` is the number of records extracted from this page.
    """
    if rule.root_selector is None:
        raise ValueError(f"rule {rule.name!r} is document-scoped; use extract_single()")

    soup = parse_html(html)
    records: List[ScrapedRecord] = []
    skipped = 0
    for item in soup.select(rule.root_selector):
        if len(records) >= count:
            break
        if is_skipped(item, rule):
            skipped += 1
            continue
        records.append(build_record(item, rule))

    logger.debug("[%s] extracted %d records (%d skipped)", rule.name, len(records), skipped)
    return ExtractionResult(records=records, total=len(records))


def extract_single(html: str, rule: ExtractionRule) -> ScrapedRecord:
    """Read one record from the whole document (e.g. a profile top card)."""
    return build_record(parse_html(html), rule)
