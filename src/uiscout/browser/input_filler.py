"""Best-effort canned input filling.

Runs after each click so forms revealed by the click carry plausible values
in the post-fill capture.  Never influences proposal scoring.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

logger = logging.getLogger(__name__)

FILLABLE_SELECTOR = (
    'input:not([type="hidden"]):not([type="checkbox"]):not([type="radio"]), textarea'
)

DEFAULT_FILL_LIMIT = 3

_CANNED_VALUES: dict[str, str] = {
    "email": "test@example.com",
    "number": "123",
}
_DEFAULT_VALUE = "Test"


def value_for_type(input_type: str | None) -> str:
    """Return the canned value for an ``<input type>`` (``text`` when absent)."""
    return _CANNED_VALUES.get((input_type or "text").lower(), _DEFAULT_VALUE)


def fill_inputs(page: Page, limit: int = DEFAULT_FILL_LIMIT) -> int:
    """Fill up to *limit* visible text-capable fields; return how many succeeded.

    Fields are visited in document order.  A field that fails to fill is
    skipped without counting against *limit*.
    """
    filled = 0
    if limit <= 0:
        return filled

    for handle in page.query_selector_all(FILLABLE_SELECTOR):
        try:
            if not _is_visible(handle):
                continue
            value = value_for_type(handle.get_attribute("type"))
            handle.fill(value)
        except PlaywrightError as e:
            logger.debug("Skipping unfillable field: %s", e)
            continue
        filled += 1
        if filled >= limit:
            break

    if filled:
        logger.info("Filled %d input(s)", filled)
    return filled


def _is_visible(handle: ElementHandle) -> bool:
    box = handle.bounding_box()
    return bool(box) and box["width"] >= 2 and box["height"] >= 2
