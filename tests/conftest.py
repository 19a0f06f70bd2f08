"""uiscout test configuration — shared fixtures for unit and integration tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PAGES_DIR = FIXTURES_DIR / "pages"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from uiscout.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Page doubles
# ---------------------------------------------------------------------------


def node(
    text: str = "",
    *,
    tag: str = "BUTTON",
    role: str | None = None,
    id: str = "",
    classes: str = "",
    aria_label: str | None = None,
) -> dict[str, Any]:
    """Raw NodeRecord payload as returned by the snapshot script."""
    return {
        "tag": tag,
        "role": role,
        "id": id,
        "classes": classes,
        "name": None,
        "type": None,
        "ariaLabel": aria_label,
        "text": text,
        "bbox": {"x": 0, "y": 0, "width": 100, "height": 30, "top": 0, "right": 100, "bottom": 30, "left": 0},
    }


def snapshot_payload(title: str = "App", nodes: list | None = None, dialogs: list | None = None) -> dict[str, Any]:
    return {"title": title, "nodes": nodes or [], "dialogs": dialogs or []}


def make_element(
    text: str = "",
    *,
    tag: str = "BUTTON",
    aria_label: str | None = None,
    classes: str | None = None,
    role: str | None = None,
    input_type: str | None = None,
    box: tuple[float, float] | None = (100, 30),
) -> MagicMock:
    """``ElementHandle`` double with text, attributes, tag name, and size."""
    el = MagicMock(name=f"element<{tag}:{text or aria_label}>")
    el.inner_text.return_value = text
    attrs = {"aria-label": aria_label, "class": classes, "role": role, "type": input_type}
    el.get_attribute.side_effect = lambda name: attrs.get(name)
    el.evaluate.return_value = tag
    el.bounding_box.return_value = (
        None if box is None else {"x": 0, "y": 0, "width": box[0], "height": box[1]}
    )
    el.query_selector_all.return_value = []
    return el


class FakePage:
    """Scriptable stand-in for a Playwright ``Page``.

    ``state`` holds the snapshot payload returned by the next snapshot
    evaluate; tests mutate it (directly or from a click side effect) to
    simulate UI changes.  Selector queries are served from ``selectors``.
    """

    def __init__(self, payload: dict[str, Any] | None = None) -> None:
        self.state: dict[str, Any] = payload or snapshot_payload()
        self.observer_state: dict[str, Any] = {"added": 0, "removed": 0, "lastSpikeAt": 0, "now": 1_000_000}
        self.selectors: dict[str, list[Any]] = {}
        self.url = "https://app.test/"
        self.waits: list[int] = []
        self.goto = MagicMock(return_value=None)
        self.screenshot = MagicMock(return_value=b"")
        self.add_init_script = MagicMock()

    def evaluate(self, script: str, arg: Any = None) -> Any:
        if arg is not None:
            return self.state
        return self.observer_state

    def query_selector(self, selector: str) -> Any:
        matches = self.selectors.get(selector) or []
        return matches[0] if matches else None

    def query_selector_all(self, selector: str) -> list[Any]:
        return list(self.selectors.get(selector) or [])

    def wait_for_timeout(self, ms: int) -> None:
        self.waits.append(ms)

    def content(self) -> str:
        return f"<html><head><title>{self.state.get('title', '')}</title></head></html>"


@pytest.fixture()
def fake_page() -> FakePage:
    return FakePage()


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that drive a real Chromium browser")
