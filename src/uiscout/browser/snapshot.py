"""Structured snapshot extraction.

Collects every visible interactive control plus any dialog-like container
in one ``page.evaluate`` call, so the resulting ``Snapshot`` reflects a
single instant of the page.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError

from uiscout.exceptions import PageUnavailableError
from uiscout.models.snapshot import MAX_DIALOG_TEXT, MAX_NODE_TEXT, MAX_NODES, Snapshot

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger(__name__)

CONTROL_SELECTOR = "button, a, input, textarea, select, [role]"
DIALOG_SELECTOR = '[role="dialog"], [aria-modal="true"], .modal, [data-modal]'

# Returns ``{nodes, dialogs, title}`` with the same keys as ``Snapshot.from_dict`` expects.
_SNAPSHOT_JS = """
({controlSelector, dialogSelector, maxNodes, maxNodeText, maxDialogText}) => {
    const visible = (el) => {
        const r = el.getBoundingClientRect();
        const style = window.getComputedStyle(el);
        return r.width > 0 && r.height > 0
            && style.visibility !== 'hidden'
            && style.display !== 'none';
    };
    const classesOf = (el) => (typeof el.className === 'string'
        ? el.className
        : (el.getAttribute('class') || ''));
    const nodes = Array.from(document.querySelectorAll(controlSelector))
        .filter(visible)
        .slice(0, maxNodes)
        .map(n => ({
            tag: n.tagName,
            role: n.getAttribute('role'),
            id: n.id,
            classes: classesOf(n),
            name: n.getAttribute('name'),
            type: n.getAttribute('type'),
            ariaLabel: n.getAttribute('aria-label'),
            text: (n.innerText || '').trim().slice(0, maxNodeText),
            bbox: n.getBoundingClientRect().toJSON(),
        }));
    const dialogs = Array.from(document.querySelectorAll(dialogSelector)).map(d => ({
        tag: d.tagName,
        id: d.id,
        classes: classesOf(d),
        text: (d.innerText || '').trim().slice(0, maxDialogText),
    }));
    return { nodes, dialogs, title: document.title };
}
"""


def extract_snapshot(page: Page) -> Snapshot:
    """Return a ``Snapshot`` of the visible controls and dialogs on *page*.

    Controls are filtered to those with a non-zero client rect that are not
    hidden through ``visibility`` or ``display``, and capped at the first
    ``MAX_NODES`` in document order.  Dialogs are not visibility-filtered.

    Raises:
        PageUnavailableError: The page is closed, crashed, or its execution
            context was destroyed mid-evaluation.
    """
    try:
        raw = page.evaluate(
            _SNAPSHOT_JS,
            {
                "controlSelector": CONTROL_SELECTOR,
                "dialogSelector": DIALOG_SELECTOR,
                "maxNodes": MAX_NODES,
                "maxNodeText": MAX_NODE_TEXT,
                "maxDialogText": MAX_DIALOG_TEXT,
            },
        )
    except PlaywrightError as e:
        raise PageUnavailableError(f"Snapshot extraction failed: {e}") from e

    snapshot = Snapshot.from_dict(raw or {})
    logger.debug(
        "Snapshot '%s': %d nodes, %d dialogs",
        snapshot.title,
        len(snapshot.nodes),
        len(snapshot.dialogs),
    )
    return snapshot
