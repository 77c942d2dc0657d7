"""Fallback Orchestrator.

Each capability declares a TransportPolicy. A run walks an explicit state
machine; the allowed moves live in TRANSITIONS so the policy can be audited
without reading exception plumbing:

    PENDING --try_api--> API_ATTEMPTED --ok--> SUCCEEDED
                             |  \\--error--> FAILED              (API_ONLY)
                             \\--try_browser--> FALLBACK_ATTEMPTED (API_THEN_BROWSER)
    PENDING --try_browser--> FALLBACK_ATTEMPTED --ok--> SUCCEEDED
                                                 \\--error--> FAILED

There is no edge out of FALLBACK_ATTEMPTED back into a browser attempt, so
the browser is tried at most once per run, and none back into the API.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel

from .exceptions import CapabilityError, LinkedInError, SubscriptionRequiredError
from .models import BROWSER_SOURCE, ScrapedRecord
from .scraper_logging import add_debug

logger = logging.getLogger(__name__)

SUBSCRIPTION_STATUS_CODES = {402, 403}
SUBSCRIPTION_MARKERS = ("SALES_SEAT",)

Call = Callable[[], Awaitable[Any]]


class TransportPolicy(str, Enum):
    API_ONLY = "api_only"
    BROWSER_ONLY = "browser_only"
    API_THEN_BROWSER = "api_then_browser"


class FallbackState(str, Enum):
    PENDING = "pending"
    API_ATTEMPTED = "api_attempted"
    FALLBACK_ATTEMPTED = "fallback_attempted"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FallbackEvent(str, Enum):
    TRY_API = "try_api"
    TRY_BROWSER = "try_browser"
    OK = "ok"
    ERROR = "error"


TRANSITIONS: Dict[Tuple[FallbackState, FallbackEvent], FallbackState] = {
    (FallbackState.PENDING, FallbackEvent.TRY_API): FallbackState.API_ATTEMPTED,
    (FallbackState.PENDING, FallbackEvent.TRY_BROWSER): FallbackState.FALLBACK_ATTEMPTED,
    (FallbackState.API_ATTEMPTED, FallbackEvent.OK): FallbackState.SUCCEEDED,
    (FallbackState.API_ATTEMPTED, FallbackEvent.ERROR): FallbackState.FAILED,
    (FallbackState.API_ATTEMPTED, FallbackEvent.TRY_BROWSER): FallbackState.FALLBACK_ATTEMPTED,
    (FallbackState.FALLBACK_ATTEMPTED, FallbackEvent.OK): FallbackState.SUCCEEDED,
    (FallbackState.FALLBACK_ATTEMPTED, FallbackEvent.ERROR): FallbackState.FAILED,
}


@dataclass
class FallbackRun:
    capability: str
    policy: TransportPolicy
    state: FallbackState = FallbackState.PENDING
    trail: List[FallbackState] = field(default_factory=lambda: [FallbackState.PENDING])
    debug: List[str] = field(default_factory=list)
    api_error: Optional[BaseException] = None
    browser_error: Optional[BaseException] = None

    def fire(self, event: FallbackEvent) -> FallbackState:
        try:
            new_state = TRANSITIONS[(self.state, event)]
        except KeyError:
            raise RuntimeError(
                f"{self.capability}: illegal transition {self.state.value} --{event.value}-->"
            ) from None
        self.state = new_state
        self.trail.append(new_state)
        return new_state


def status_of(error: BaseException) -> Optional[int]:
    return getattr(error, "status_code", None)


def is_subscription_signal(error: Optional[BaseException]) -> bool:
    if error is None:
        return False
    if isinstance(error, SubscriptionRequiredError):
        return True
    if status_of(error) in SUBSCRIPTION_STATUS_CODES:
        return True
    text = str(error)
    return any(marker in text for marker in SUBSCRIPTION_MARKERS)


def classify_failure(
    capability: str,
    error: BaseException,
    related: Optional[BaseException] = None,
) -> CapabilityError:
    """Relabel a terminal failure for the caller.

    A permission signal on either the final error or the earlier API error
    becomes SubscriptionRequiredError; anything else is a CapabilityError.
    """
    if isinstance(error, CapabilityError):
        return error
    message = error.message if isinstance(error, LinkedInError) else str(error)
    for candidate in (error, related):
        if is_subscription_signal(candidate):
            return SubscriptionRequiredError(
                message, capability=capability, status_code=status_of(candidate)
            )
    return CapabilityError(message, capability=capability, status_code=status_of(error))


def _tag(value: Any) -> Any:
    if isinstance(value, ScrapedRecord):
        return value.model_copy(update={"source": BROWSER_SOURCE}).model_dump()
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [_tag(v) for v in value]
    return value


def tag_browser_result(result: Any) -> Any:
    """Mark browser output with its provenance and flatten records to dicts."""
    if isinstance(result, ScrapedRecord):
        return _tag(result)
    if isinstance(result, dict):
        tagged = {key: _tag(value) for key, value in result.items()}
        tagged["source"] = BROWSER_SOURCE
        return tagged
    return result


class FallbackOrchestrator:
    """Runs capabilities under their TransportPolicy.

    Holds no per-call state: every call walks its own FallbackRun, so
    overlapping calls never see each other's trail.
    """

    async def run(
        self,
        capability: str,
        policy: TransportPolicy,
        api_call: Optional[Call] = None,
        browser_call: Optional[Call] = None,
    ) -> Any:
        return await self.execute(FallbackRun(capability=capability, policy=policy), api_call, browser_call)

    async def execute(
        self,
        run: FallbackRun,
        api_call: Optional[Call] = None,
        browser_call: Optional[Call] = None,
    ) -> Any:
        """Drive `run` from PENDING to a terminal state and return the result.

        The run is left with its trail and debug tags filled in, so a caller
        that keeps it can audit what happened.
        """
        capability, policy = run.capability, run.policy
        if policy is not TransportPolicy.BROWSER_ONLY and api_call is None:
            raise ValueError(f"{capability}: policy {policy.value} needs an api_call")
        if policy is not TransportPolicy.API_ONLY and browser_call is None:
            raise ValueError(f"{capability}: policy {policy.value} needs a browser_call")

        if policy is TransportPolicy.BROWSER_ONLY:
            run.fire(FallbackEvent.TRY_BROWSER)
            return await self._attempt_browser(run, browser_call)

        run.fire(FallbackEvent.TRY_API)
        try:
            result = await api_call()
        except Exception as e:
            run.api_error = e
            add_debug(run.debug, f"API_FAIL:{status_of(e) or type(e).__name__}")
            if policy is TransportPolicy.API_ONLY:
                run.fire(FallbackEvent.ERROR)
                logger.info("%s failed [%s]: %s", capability, " | ".join(run.debug), e)
                raise
            logger.warning(
                "%s: API path failed [%s] (%s); falling back to browser",
                capability,
                " | ".join(run.debug),
                str(e)[:120],
            )
            run.fire(FallbackEvent.TRY_BROWSER)
            return await self._attempt_browser(run, browser_call)

        run.fire(FallbackEvent.OK)
        add_debug(run.debug, "API_OK")
        logger.debug("%s succeeded [%s]", capability, " | ".join(run.debug))
        return result

    async def _attempt_browser(self, run: FallbackRun, browser_call: Call) -> Any:
        try:
            result = await browser_call()
        except Exception as e:
            run.browser_error = e
            run.fire(FallbackEvent.ERROR)
            add_debug(run.debug, f"BROWSER_FAIL:{type(e).__name__}")
            classified = classify_failure(run.capability, e, run.api_error)
            logger.error(
                "%s failed after %s [%s]: %s",
                run.capability,
                " -> ".join(s.value for s in run.trail),
                " | ".join(run.debug),
                classified,
            )
            raise classified from e

        run.fire(FallbackEvent.OK)
        add_debug(run.debug, "BROWSER_OK")
        logger.info("%s served by browser [%s]", run.capability, " | ".join(run.debug))
        return tag_browser_result(result)
