"""Unit tests for browser profile building, cookie files, and session lifecycle."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from playwright.sync_api import Error as PlaywrightError

from uiscout.browser.session import (
    BrowserSession,
    build_browser_profile,
    load_cookies,
    profile_from_settings,
    save_cookies,
)
from uiscout.exceptions import BrowserStartupError

COOKIE = {"name": "sid", "value": "abc", "domain": "app.test", "path": "/"}


class TestBrowserProfile:
    """Tests for profile construction."""

    def test_defaults(self) -> None:
        profile = build_browser_profile()
        assert profile.launch_args == {"headless": False, "chromium_sandbox": True}
        assert profile.context_args == {"viewport": {"width": 1366, "height": 900}}

    def test_user_agent_and_viewport(self) -> None:
        profile = build_browser_profile(headless=True, user_agent="UA/1.0", viewport_width=800, viewport_height=600)
        assert profile.launch_args["headless"] is True
        assert profile.context_args["user_agent"] == "UA/1.0"
        assert profile.context_args["viewport"] == {"width": 800, "height": 600}

    def test_from_settings_with_headless_override(self) -> None:
        from uiscout.settings.config import BrowserSettings

        browser = BrowserSettings(headless=False, sandbox=False)
        assert profile_from_settings(browser).launch_args["headless"] is False
        profile = profile_from_settings(browser, headless=True)
        assert profile.launch_args == {"headless": True, "chromium_sandbox": False}


class TestCookieFile:
    """Tests for the credential file helpers."""

    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "auth" / "cookies.json"
        save_cookies(path, [COOKIE])
        assert json.loads(path.read_text()) == {"cookies": [COOKIE]}
        assert load_cookies(path) == [COOKIE]

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_cookies(tmp_path / "nope.json") == []

    def test_no_path(self) -> None:
        assert load_cookies(None) == []

    @pytest.mark.parametrize("content", ["{not json", "[]", '{"cookies": "sid=abc"}', "{}"])
    def test_invalid_file_ignored(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "cookies.json"
        path.write_text(content)
        assert load_cookies(path) == []


@pytest.fixture()
def playwright_stack():
    """Patch ``sync_playwright`` and return the mocked driver chain."""
    pw = MagicMock(name="playwright")
    browser = pw.chromium.launch.return_value
    context = browser.new_context.return_value
    page = context.new_page.return_value
    context.cookies.return_value = [COOKIE]
    with patch("playwright.sync_api.sync_playwright") as sync_pw:
        sync_pw.return_value.start.return_value = pw
        yield pw, browser, context, page


class TestBrowserSession:
    """Tests for the ``BrowserSession`` context manager."""

    def test_lifecycle(self, playwright_stack, tmp_path: Path) -> None:
        pw, browser, context, page = playwright_stack
        cookie_file = tmp_path / "cookies.json"
        save_cookies(cookie_file, [COOKIE])

        with BrowserSession(build_browser_profile(headless=True), credentials_path=cookie_file) as entered:
            assert entered is page

        pw.chromium.launch.assert_called_once_with(headless=True, chromium_sandbox=True)
        context.add_cookies.assert_called_once_with([COOKIE])
        script = context.add_init_script.call_args.kwargs["script"]
        assert "MutationObserver" in script
        context.close.assert_called_once()
        browser.close.assert_called_once()
        pw.stop.assert_called_once()
        assert json.loads(cookie_file.read_text()) == {"cookies": [COOKIE]}

    def test_no_credentials_path_skips_cookie_io(self, playwright_stack) -> None:
        _, _, context, _ = playwright_stack
        with BrowserSession(build_browser_profile()):
            pass
        context.add_cookies.assert_not_called()
        context.cookies.assert_not_called()

    def test_launch_failure(self, playwright_stack) -> None:
        pw, _, _, _ = playwright_stack
        pw.chromium.launch.side_effect = Exception("Executable doesn't exist")

        with pytest.raises(BrowserStartupError, match="Executable doesn't exist"):
            with BrowserSession(build_browser_profile()):
                pass

        pw.stop.assert_called_once()

    def test_page_open_failure_tears_down(self, playwright_stack) -> None:
        pw, browser, context, _ = playwright_stack
        context.new_page.side_effect = PlaywrightError("Target page, context or browser has been closed")

        with pytest.raises(BrowserStartupError, match="Could not open a page"):
            with BrowserSession(build_browser_profile()):
                pass

        context.close.assert_called_once()
        browser.close.assert_called_once()
        pw.stop.assert_called_once()

    def test_observer_install_failure_tears_down(self, playwright_stack) -> None:
        pw, browser, context, _ = playwright_stack
        context.add_init_script.side_effect = PlaywrightError("Browser has been closed")

        with pytest.raises(BrowserStartupError):
            with BrowserSession(build_browser_profile()):
                pass

        context.new_page.assert_not_called()
        browser.close.assert_called_once()
        pw.stop.assert_called_once()

    def test_teardown_after_error_in_body(self, playwright_stack) -> None:
        pw, browser, context, _ = playwright_stack
        with pytest.raises(RuntimeError):
            with BrowserSession(build_browser_profile()):
                raise RuntimeError("boom")
        context.close.assert_called_once()
        browser.close.assert_called_once()
        pw.stop.assert_called_once()
