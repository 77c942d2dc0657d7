"""Errors raised by the LinkedIn access layer.

Hierarchy:
    LinkedInError (base)
    ├── ConfigurationError         - missing or invalid credentials at startup
    ├── TransportError             - non-2xx status or network failure on the API path
    ├── ParseError                 - API body is not well-formed JSON
    ├── NavigationError            - browser navigation timed out or failed
    ├── ExtractionEmpty            - expected content never rendered
    └── CapabilityError            - every available transport failed
        └── SubscriptionRequiredError - the platform refused for lack of a Sales Navigator seat
"""
from typing import Optional


class LinkedInError(Exception):
    """Base exception for all LinkedIn access errors."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        self.message = message
        self.url = url
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.url:
            return f"{self.message} (URL: {self.url})"
        return self.message


class ConfigurationError(LinkedInError):
    """Raised when the client cannot be built from the supplied settings."""


class TransportError(LinkedInError):
    """Raised when the internal API answers outside 2xx or is unreachable.

    `status_code` is None for network-level failures (DNS, reset, timeout).
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, url)
        self.status_code = status_code


class ParseError(LinkedInError):
    """Raised when a 2xx body cannot be decoded as JSON."""

    def __init__(self, message: str, url: Optional[str] = None, body: str = "") -> None:
        super().__init__(message, url)
        self.body = body


class NavigationError(LinkedInError):
    """Raised when the browser cannot reach a page within its timeout."""


class ExtractionEmpty(LinkedInError):
    """The awaited selector never appeared; callers treat this as no content."""

    def __init__(self, message: str, url: Optional[str] = None, selector: str = "") -> None:
        super().__init__(message, url)
        self.selector = selector


class CapabilityError(LinkedInError):
    """Raised after every transport available to a capability has failed."""

    def __init__(
        self,
        message: str,
        capability: str = "",
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.capability = capability
        self.status_code = status_code


class SubscriptionRequiredError(CapabilityError):
    """The platform denied access (402/403 or a SALES_SEAT marker)."""
