"""Heuristic next-action proposer.

Picks at most one element to click, in this order of preference:

1. A control inside the first dialog-like container (modals are never left
   open: if nothing scores, the first control is forced).
2. The best-scoring visible control on the page, when its score is positive.
   Every control is scored as a button, so any visible control that is not
   vetoed qualifies.
3. The first expandable / menu / stateful toggle.

Scoring is plain lowercase substring matching against keyword vocabularies;
there is no tokenization and no notion of task intent.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError

from uiscout.browser.snapshot import DIALOG_SELECTOR, extract_snapshot
from uiscout.models.action import ActionKind, ProposalLabel, ProposedAction

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

    from uiscout.models.snapshot import Snapshot
    from uiscout.settings.config import PolicySettings

logger = logging.getLogger(__name__)

DIALOG_CONTROL_SELECTOR = 'button, [role="button"], a'
CANDIDATE_SELECTOR = 'button, [role="button"], a, input, [aria-expanded]'
FALLBACK_SELECTOR = '[aria-expanded], [role="menu"], [data-state]'

# Elements smaller than this (CSS px) on either axis are treated as hidden.
MIN_CLICKABLE_PX = 2

VETOED = -1


@dataclass(frozen=True)
class Vocabulary:
    """Keyword sets used by ``score``."""

    verbs: tuple[str, ...] = (
        "create",
        "new",
        "add",
        "filter",
        "edit",
        "settings",
        "save",
        "submit",
        "next",
        "continue",
        "done",
        "apply",
    )
    destructive: tuple[str, ...] = ("delete", "remove", "archive", "reset")
    highlight_classes: re.Pattern[str] = field(
        default=re.compile(r"primary|cta|confirm|submit", re.IGNORECASE)
    )

    @classmethod
    def from_policy(cls, policy: PolicySettings) -> Vocabulary:
        return cls(
            verbs=tuple(v.lower() for v in policy.verbs),
            destructive=tuple(d.lower() for d in policy.destructive),
        )


DEFAULT_VOCABULARY = Vocabulary()


@dataclass(frozen=True)
class Candidate:
    """The scoreable view of an element."""

    text: str = ""
    aria_label: str = ""
    classes: str = ""
    tag: str = ""
    role: str = ""

    @property
    def haystack(self) -> str:
        return (self.text or self.aria_label).lower()

    @property
    def is_button(self) -> bool:
        return self.role == "button" or self.tag.upper() == "BUTTON"


def score(
    candidate: Candidate,
    allow_destructive: bool,
    hints: Iterable[str] = (),
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> int:
    """Score *candidate* as a next click.

    Returns ``-1`` for a destructive label when destructive actions are not
    allowed; no bonus can outweigh the veto.  Otherwise the sum of +2 per
    verb substring, +3 per hint substring, +1 for a button, +1 for a
    call-to-action class.
    """
    hay = candidate.haystack
    if not allow_destructive and any(word in hay for word in vocabulary.destructive):
        return VETOED

    total = 0
    total += 2 * sum(1 for verb in vocabulary.verbs if verb in hay)
    total += 3 * sum(1 for hint in hints if hint and hint in hay)
    if candidate.is_button:
        total += 1
    if vocabulary.highlight_classes.search(candidate.classes or ""):
        total += 1
    return total


def propose(
    page: Page,
    allow_destructive: bool,
    hints: Iterable[str] = (),
    *,
    snapshot: Snapshot | None = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> ProposedAction | None:
    """Return the next action for *page*, or ``None`` when nothing qualifies.

    Args:
        page: Live Playwright page.
        allow_destructive: Lift the destructive-keyword veto.
        hints: Lowercase keywords worth +3 each.
        snapshot: Snapshot of the current state; extracted when omitted.
        vocabulary: Keyword sets for scoring.
    """
    hints = tuple(hints)
    if snapshot is None:
        snapshot = extract_snapshot(page)

    if snapshot.has_dialogs:
        action = _propose_in_dialog(page, allow_destructive, hints, vocabulary)
        if action is not None:
            return action

    action = _propose_best_control(page, allow_destructive, hints, vocabulary)
    if action is not None:
        return action

    menu = page.query_selector(FALLBACK_SELECTOR)
    if menu is not None:
        logger.debug("No positive candidate; falling back to first toggle")
        return ProposedAction(kind=ActionKind.CLICK, element=menu, label=ProposalLabel.FALLBACK_MENU)

    return None


def _propose_in_dialog(
    page: Page,
    allow_destructive: bool,
    hints: tuple[str, ...],
    vocabulary: Vocabulary,
) -> ProposedAction | None:
    container = page.query_selector(DIALOG_SELECTOR)
    if container is None:
        return None

    controls = container.query_selector_all(DIALOG_CONTROL_SELECTOR)
    for handle in controls:
        text = _safe_inner_text(handle)
        # Everything inside a dialog is scored as a button.
        candidate = Candidate(
            text=text,
            classes=_safe_attribute(handle, "class"),
            tag="BUTTON",
            role="button",
        )
        value = score(candidate, allow_destructive, hints, vocabulary)
        if value > 0:
            logger.debug("Dialog control '%s' scored %d", text, value)
            return ProposedAction(
                kind=ActionKind.CLICK,
                element=handle,
                label=ProposalLabel.DIALOG_VERB_MATCH,
                text=text,
                score=value,
            )

    if controls:
        first = controls[0]
        text = _safe_inner_text(first)
        logger.debug("No dialog control scored; forcing first control '%s'", text)
        return ProposedAction(
            kind=ActionKind.CLICK,
            element=first,
            label=ProposalLabel.DIALOG_FIRST_BUTTON,
            text=text,
        )
    return None


def _propose_best_control(
    page: Page,
    allow_destructive: bool,
    hints: tuple[str, ...],
    vocabulary: Vocabulary,
) -> ProposedAction | None:
    best: ElementHandle | None = None
    best_candidate: Candidate | None = None
    best_score = VETOED

    for handle in page.query_selector_all(CANDIDATE_SELECTOR):
        if not _is_clickable_size(handle):
            continue
        candidate = _read_candidate(handle)
        value = score(candidate, allow_destructive, hints, vocabulary)
        if value > best_score:
            best, best_candidate, best_score = handle, candidate, value

    if best is None or best_candidate is None or best_score <= 0:
        return None

    logger.debug("Best control '%s' scored %d", best_candidate.text or best_candidate.aria_label, best_score)
    return ProposedAction(
        kind=ActionKind.CLICK,
        element=best,
        label=ProposalLabel.BEST_VERB_MATCH,
        text=best_candidate.text or best_candidate.aria_label,
        score=best_score,
    )


def _read_candidate(handle: ElementHandle) -> Candidate:
    # Links, inputs and toggles are scored as buttons, like dialog controls.
    return Candidate(
        text=_safe_inner_text(handle),
        aria_label=_safe_attribute(handle, "aria-label"),
        classes=_safe_attribute(handle, "class"),
        tag="BUTTON",
        role="button",
    )


def _is_clickable_size(handle: ElementHandle) -> bool:
    try:
        box = handle.bounding_box()
    except PlaywrightError:
        return False
    return bool(box) and box["width"] >= MIN_CLICKABLE_PX and box["height"] >= MIN_CLICKABLE_PX


def _safe_inner_text(handle: ElementHandle) -> str:
    try:
        return (handle.inner_text() or "").strip()
    except PlaywrightError:
        return ""


def _safe_attribute(handle: ElementHandle, name: str) -> str:
    try:
        return handle.get_attribute(name) or ""
    except PlaywrightError:
        return ""
