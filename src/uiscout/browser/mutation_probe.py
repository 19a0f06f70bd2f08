"""In-page DOM mutation probe.

An init script installs a ``MutationObserver`` on every document load and
keeps running counters on ``window.__UISCOUT_OBS__``.  The capture loop only
polls it.  A recent "spike" (one observer batch adding and removing
at least ``SPIKE_THRESHOLD`` nodes between them) buys one extra short settle
delay before the next capture.  It is a debounce hint, not a
quiescence wait.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError

if TYPE_CHECKING:
    from playwright.sync_api import BrowserContext, Page

logger = logging.getLogger(__name__)

PROBE_GLOBAL = "__UISCOUT_OBS__"
SPIKE_THRESHOLD = 30

_PROBE_INIT_JS = """
(() => {
    const state = { added: 0, removed: 0, lastSpikeAt: 0 };
    const install = () => {
        const obs = new MutationObserver(muts => {
            let batch = 0;
            for (const m of muts) {
                const added = m.addedNodes ? m.addedNodes.length : 0;
                const removed = m.removedNodes ? m.removedNodes.length : 0;
                state.added += added;
                state.removed += removed;
                batch += added + removed;
            }
            if (batch >= %(threshold)d) state.lastSpikeAt = Date.now();
        });
        obs.observe(document.documentElement, { childList: true, subtree: true });
    };
    if (document.documentElement) {
        install();
    } else {
        document.addEventListener('readystatechange', install, { once: true });
    }
    window.%(name)s = state;
})();
""" % {"threshold": SPIKE_THRESHOLD, "name": PROBE_GLOBAL}

_READ_PROBE_JS = """
() => {
    const s = window.%(name)s || { added: 0, removed: 0, lastSpikeAt: 0 };
    return { added: s.added, removed: s.removed, lastSpikeAt: s.lastSpikeAt, now: Date.now() };
}
""" % {"name": PROBE_GLOBAL}


@dataclass(frozen=True)
class MutationState:
    """Point-in-time read of the probe counters, on the page's own clock."""

    added: int = 0
    removed: int = 0
    last_spike_at: float = 0.0
    page_now: float = 0.0

    def spiked_within(self, window_ms: float) -> bool:
        """True when a spike was recorded less than *window_ms* ago."""
        if not self.last_spike_at:
            return False
        return (self.page_now - self.last_spike_at) < window_ms


def install_mutation_probe(target: Page | BrowserContext) -> None:
    """Register the probe as an init script on a page or a whole context."""
    target.add_init_script(script=_PROBE_INIT_JS)


def read_mutation_state(page: Page) -> MutationState:
    """Poll the probe. A page without the probe reads as all zeros."""
    try:
        raw = page.evaluate(_READ_PROBE_JS) or {}
    except PlaywrightError as e:
        logger.debug("Mutation probe read failed: %s", e)
        return MutationState()
    return MutationState(
        added=int(raw.get("added") or 0),
        removed=int(raw.get("removed") or 0),
        last_spike_at=float(raw.get("lastSpikeAt") or 0),
        page_now=float(raw.get("now") or 0),
    )
