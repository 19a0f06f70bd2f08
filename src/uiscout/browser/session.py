"""Browser session lifecycle: launch, cookie import/export, teardown.

Usage::

    from uiscout.browser.session import BrowserSession, build_browser_profile

    profile = build_browser_profile(headless=False)
    with BrowserSession(profile, credentials_path=Path("cookies.json")) as page:
        page.goto("https://app.example.com")

The credential file uses Playwright's storage-state shape
(``{"cookies": [...]}``) so it can be exchanged with other tooling.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any

from playwright.sync_api import Error as PlaywrightError

from uiscout.browser.mutation_probe import install_mutation_probe
from uiscout.exceptions import BrowserStartupError

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, Page, Playwright

    from uiscout.settings.config import BrowserSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Browser profile
# ---------------------------------------------------------------------------


@dataclass
class BrowserProfile:
    """All Playwright launch + context arguments for a single session."""

    # Arguments for pw.chromium.launch()
    launch_args: dict[str, Any] = field(default_factory=dict)

    # Arguments for browser.new_context()
    context_args: dict[str, Any] = field(default_factory=dict)


def build_browser_profile(
    *,
    headless: bool = False,
    sandbox: bool = True,
    user_agent: str = "",
    viewport_width: int = 1366,
    viewport_height: int = 900,
) -> BrowserProfile:
    """Build a ``BrowserProfile`` for a capture session.

    Args:
        headless: Run browser in headless mode.
        sandbox: Keep Chromium's sandbox enabled (disable inside containers).
        user_agent: Force this user-agent; Playwright's default otherwise.
        viewport_width: Viewport width in CSS px.
        viewport_height: Viewport height in CSS px.
    """
    profile = BrowserProfile()
    profile.launch_args["headless"] = headless
    profile.launch_args["chromium_sandbox"] = sandbox

    ctx = profile.context_args
    ctx["viewport"] = {"width": viewport_width, "height": viewport_height}
    if user_agent:
        ctx["user_agent"] = user_agent
    return profile


def profile_from_settings(settings: BrowserSettings, *, headless: bool | None = None) -> BrowserProfile:
    """Build a profile from the ``browser`` settings section."""
    return build_browser_profile(
        headless=settings.headless if headless is None else headless,
        sandbox=settings.sandbox,
        user_agent=settings.user_agent,
        viewport_width=settings.viewport_width,
        viewport_height=settings.viewport_height,
    )


# ---------------------------------------------------------------------------
# Credential file
# ---------------------------------------------------------------------------


def load_cookies(path: Path | None) -> list[dict[str, Any]]:
    """Read cookies from *path*.

    A missing, unreadable, or malformed file means "no cookies"; it is
    logged, never raised.
    """
    if path is None:
        return []
    if not path.is_file():
        logger.info("No credential file at %s, starting without cookies", path)
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable credential file %s: %s", path, e)
        return []
    cookies = data.get("cookies") if isinstance(data, dict) else None
    if not isinstance(cookies, list):
        logger.warning("Credential file %s has no cookie list, ignoring it", path)
        return []
    return cookies


def save_cookies(path: Path, cookies: list[dict[str, Any]]) -> None:
    """Write *cookies* to *path* as ``{"cookies": [...]}``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"cookies": cookies}, indent=2), encoding="utf-8")
    logger.info("Saved %d cookie(s) to %s", len(cookies), path)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class BrowserSession:
    """Context manager yielding a ready-to-drive ``Page``.

    On entry: launch Chromium, create a context, import cookies, install
    the mutation probe, open a page.  On exit: export cookies (when a
    credential path is configured), close context and browser.

    Args:
        profile: Launch and context arguments.
        credentials_path: Optional cookie file read on entry and written on exit.

    Raises:
        BrowserStartupError: From ``__enter__`` when the browser cannot start.
    """

    def __init__(self, profile: BrowserProfile, credentials_path: Path | None = None) -> None:
        self.profile = profile
        self.credentials_path = credentials_path

        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self.page: Page | None = None

    def __enter__(self) -> Page:
        from playwright.sync_api import sync_playwright

        try:
            self._pw = sync_playwright().start()
            self._browser = self._pw.chromium.launch(**self.profile.launch_args)
            self._context = self._browser.new_context(**self.profile.context_args)
        except Exception as e:
            # Driver, executable, and launch failures all abort the run.
            self._shutdown()
            raise BrowserStartupError(f"Could not start browser: {e}") from e

        cookies = load_cookies(self.credentials_path)
        if cookies:
            try:
                self._context.add_cookies(cookies)
                logger.info("Imported %d cookie(s) from %s", len(cookies), self.credentials_path)
            except PlaywrightError as e:
                logger.warning("Cookie import failed, continuing without cookies: %s", e)

        try:
            install_mutation_probe(self._context)
            self.page = self._context.new_page()
        except Exception as e:
            self._shutdown()
            raise BrowserStartupError(f"Could not open a page: {e}") from e
        return self.page

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self.credentials_path is not None and self._context is not None:
            try:
                save_cookies(self.credentials_path, self._context.cookies())
            except (PlaywrightError, OSError) as e:
                logger.warning("Failed to export cookies to %s: %s", self.credentials_path, e)
        self._shutdown()

    def _shutdown(self) -> None:
        for closer in (self._context, self._browser):
            if closer is None:
                continue
            try:
                closer.close()
            except PlaywrightError as e:
                logger.debug("Error during browser teardown: %s", e)
        if self._pw is not None:
            self._pw.stop()
        self._context = self._browser = self._pw = None
