"""Start-URL navigation.

The capture loop needs basic document readiness before the initial capture,
so navigation always waits for ``domcontentloaded``.  Connection, DNS, TLS and
missing-file failures are reported as ``NavigationError`` with a short reason;
anything else from Playwright (including a timeout) propagates unchanged.
"""

from __future__ import annotations

import logging

from playwright.sync_api import Error as PlaywrightError, Page, Response

from uiscout.exceptions import NavigationError

logger = logging.getLogger(__name__)

READY_STATE = "domcontentloaded"

# Chromium net error codes that mean the start URL cannot be reached at all.
UNREACHABLE_ERRORS: tuple[str, ...] = (
    "ERR_NAME_NOT_RESOLVED",
    "ERR_CONNECTION_REFUSED",
    "ERR_CONNECTION_RESET",
    "ERR_CONNECTION_CLOSED",
    "ERR_ADDRESS_UNREACHABLE",
    "ERR_INTERNET_DISCONNECTED",
    "ERR_SSL_PROTOCOL_ERROR",
    "ERR_CERT_AUTHORITY_INVALID",
    "ERR_CERT_COMMON_NAME_INVALID",
    "ERR_FILE_NOT_FOUND",
)


def unreachable_reason(message: str) -> str | None:
    """Map a Playwright error message to a readable reason, or ``None``.

    ``"net::ERR_NAME_NOT_RESOLVED at https://x"`` -> ``"name not resolved"``.
    """
    for code in UNREACHABLE_ERRORS:
        if code in message:
            return code.removeprefix("ERR_").replace("_", " ").lower()
    return None


def goto_ready(page: Page, url: str, *, timeout_ms: int = 30_000) -> Response | None:
    """Navigate to *url* and wait until the DOM is parsed.

    Returns:
        The main-frame ``Response``, or ``None`` for same-document navigations.

    Raises:
        NavigationError: The URL is unreachable.
        PlaywrightTimeout: The document did not become ready in *timeout_ms*.
    """
    logger.debug("goto %s (wait_until=%s, timeout=%dms)", url, READY_STATE, timeout_ms)
    try:
        return page.goto(url, wait_until=READY_STATE, timeout=timeout_ms)
    except PlaywrightError as exc:
        reason = unreachable_reason(str(exc))
        if reason is None:
            raise
        logger.warning("Navigation to %s failed: %s", url, reason)
        raise NavigationError(url, reason) from exc
