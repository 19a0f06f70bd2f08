"""Capture orchestrator: the explore-and-record state machine.

One run drives a single page strictly sequentially::

    INIT       goto start URL, optional hold, capture "initial"
    ITERATE    propose -> (none: stop)
      BEFORE         capture "before:<label>"
      ACT            click (bounded timeout)
      SETTLE         fixed delay, plus one extra delay after a mutation spike
      AFTER-PREFILL  capture "after:<label>"
      FILL           canned values into a few visible inputs
      AFTER-POSTFILL capture "after:<label>:postFill", carry its fingerprint
    TERMINATE  no proposal, or step budget spent

Every iteration capture is compared against the fingerprint carried *into*
the iteration.  A fault anywhere between BEFORE and AFTER-POSTFILL abandons
the iteration and leaves that fingerprint untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from uiscout.browser.fingerprint import fingerprint
from uiscout.browser.input_filler import DEFAULT_FILL_LIMIT, fill_inputs
from uiscout.browser.mutation_probe import read_mutation_state
from uiscout.browser.navigation import goto_ready
from uiscout.browser.proposer import DEFAULT_VOCABULARY, Vocabulary, propose
from uiscout.browser.snapshot import extract_snapshot
from uiscout.models.action import ActionPhase, ActionRecord
from uiscout.models.run import CaptureResult, RunSummary, TerminationReason

if TYPE_CHECKING:
    from playwright.sync_api import Page

    from uiscout.dataset.storage import RunDirectory
    from uiscout.models.action import ProposedAction
    from uiscout.settings.config import CaptureSettings

logger = logging.getLogger(__name__)

INITIAL_REASON = "initial"


@dataclass(frozen=True)
class LoopTiming:
    """Delays and timeouts of one iteration, in milliseconds."""

    click_timeout_ms: int = 4_000
    settle_ms: int = 600
    spike_window_ms: int = 1_500
    spike_settle_ms: int = 400
    navigation_timeout_ms: int = 30_000

    @classmethod
    def from_settings(cls, capture: CaptureSettings, navigation_timeout_ms: int = 30_000) -> LoopTiming:
        return cls(
            click_timeout_ms=capture.click_timeout_ms,
            settle_ms=capture.settle_ms,
            spike_window_ms=capture.spike_window_ms,
            spike_settle_ms=capture.spike_settle_ms,
            navigation_timeout_ms=navigation_timeout_ms,
        )


class CaptureOrchestrator:
    """Drive a page through propose / act / capture cycles.

    Args:
        page: Live Playwright page with the mutation probe installed.
        run_dir: Artifact writer for this run.
        max_steps: Maximum number of ITERATE cycles.
        allow_destructive: Lift the destructive-keyword veto.
        hints: Lowercase keywords boosting matching controls.
        hold_ms: Pause after the first navigation (manual sign-in etc.).
        vocabulary: Keyword sets for the proposer.
        timing: Delays and timeouts.
        fill_limit: Max inputs filled per iteration.
    """

    def __init__(
        self,
        page: Page,
        run_dir: RunDirectory,
        *,
        max_steps: int = 10,
        allow_destructive: bool = False,
        hints: Iterable[str] = (),
        hold_ms: int = 0,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        timing: LoopTiming | None = None,
        fill_limit: int = DEFAULT_FILL_LIMIT,
    ) -> None:
        self.page = page
        self.run_dir = run_dir
        self.max_steps = max_steps
        self.allow_destructive = allow_destructive
        self.hints = tuple(hints)
        self.hold_ms = hold_ms
        self.vocabulary = vocabulary
        self.timing = timing or LoopTiming()
        self.fill_limit = fill_limit

        self.last_fingerprint = ""
        self._summary = RunSummary(run_dir=str(run_dir.root))

    @property
    def summary(self) -> RunSummary:
        return self._summary

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def capture(self, reason: str, last_fingerprint: str) -> CaptureResult:
        """Snapshot the page and persist a step unless nothing changed.

        Args:
            reason: Recorded in the step's ``meta.json``.
            last_fingerprint: Fingerprint to compare against; equal means skip.
        """
        snapshot = extract_snapshot(self.page)
        fp = fingerprint(snapshot)
        if fp == last_fingerprint:
            logger.debug("Skipping unchanged capture (%s)", reason)
            self._summary.captures_skipped += 1
            return CaptureResult(skipped=True, fingerprint=fp)

        step_dir = self.run_dir.write_step(self.page, snapshot, fp, reason)
        self._summary.steps_written += 1
        return CaptureResult(skipped=False, fingerprint=fp, step_dir=step_dir)

    def start(self, start_url: str) -> CaptureResult:
        """INIT: navigate, hold, and capture the initial state."""
        self._summary.start_url = start_url
        logger.info("Navigating to %s", start_url)
        goto_ready(self.page, start_url, timeout_ms=self.timing.navigation_timeout_ms)
        if self.hold_ms > 0:
            logger.info("Holding %d ms before the first capture", self.hold_ms)
            self.page.wait_for_timeout(self.hold_ms)

        result = self.capture(INITIAL_REASON, "")
        self.last_fingerprint = result.fingerprint
        return result

    def run(self, start_url: str) -> RunSummary:
        """Run INIT then up to ``max_steps`` ITERATE cycles."""
        self.start(start_url)

        for step in range(self.max_steps):
            action = propose(
                self.page,
                self.allow_destructive,
                self.hints,
                vocabulary=self.vocabulary,
            )
            if action is None:
                logger.info("No further action proposed after %d iteration(s)", step)
                self._summary.termination_reason = TerminationReason.NO_PROPOSAL
                break

            self._summary.iterations += 1
            logger.info(
                "Iteration %d/%d: %s '%s' (score=%d)",
                step + 1,
                self.max_steps,
                action.label.value,
                action.text[:60],
                action.score,
            )
            try:
                self._iterate(action)
            except Exception as e:
                self._summary.iterations_abandoned += 1
                logger.warning("Iteration %d abandoned: %s", step + 1, e)
        else:
            self._summary.termination_reason = TerminationReason.MAX_STEPS_REACHED

        self._summary.last_fingerprint = self.last_fingerprint
        return self._summary

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _iterate(self, action: ProposedAction) -> None:
        label = action.record_label
        carried = self.last_fingerprint

        before = self.capture(f"before:{label}", carried)
        if not before.skipped:
            self._record(before, ActionRecord.for_action(action, ActionPhase.BEFORE))

        action.element.click(timeout=self.timing.click_timeout_ms)
        self._settle()

        after = self.capture(f"after:{label}", carried)
        if not after.skipped:
            self._record(after, ActionRecord.for_action(action, ActionPhase.AFTER_PRE_FILL))

        fill_inputs(self.page, limit=self.fill_limit)

        post_fill = self.capture(f"after:{label}:postFill", carried)
        if not post_fill.skipped:
            self._record(post_fill, ActionRecord.auto_fill())
            self.last_fingerprint = post_fill.fingerprint

    def _settle(self) -> None:
        self.page.wait_for_timeout(self.timing.settle_ms)
        state = read_mutation_state(self.page)
        if state.spiked_within(self.timing.spike_window_ms):
            logger.debug("Mutation spike detected, settling %d ms more", self.timing.spike_settle_ms)
            self.page.wait_for_timeout(self.timing.spike_settle_ms)

    def _record(self, result: CaptureResult, record: ActionRecord) -> None:
        if result.step_dir is not None:
            self.run_dir.write_action(result.step_dir, record)
