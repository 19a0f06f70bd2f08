"""Top-level capture run.

Wires settings, the browser session, the run directory, and the
orchestrator together and produces a ``RunSummary``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from uiscout.browser.proposer import Vocabulary
from uiscout.browser.session import BrowserSession, profile_from_settings
from uiscout.capture.orchestrator import CaptureOrchestrator, LoopTiming
from uiscout.dataset.storage import RunDirectory
from uiscout.dataset.viewer import write_dataset_index

if TYPE_CHECKING:
    from uiscout.models.run import RunSummary
    from uiscout.settings.config import Settings

logger = logging.getLogger(__name__)


def slugify(text: str) -> str:
    """Lowercase, collapse non-alphanumerics to ``-``, trim edge dashes."""
    return re.sub(r"[^a-z0-9]+", "-", str(text).lower()).strip("-")


def default_run_dir(task: str, settings: Settings) -> Path:
    """``<capture.output_dir>/<slug(task)>``."""
    return Path(settings.capture.output_dir) / (slugify(task) or "run")


def run_capture(
    *,
    task: str,
    start_url: str,
    output_dir: Path | None = None,
    max_steps: int | None = None,
    allow_destructive: bool | None = None,
    hints: Iterable[str] | None = None,
    hold_ms: int | None = None,
    credentials_path: Path | None = None,
    headless: bool | None = None,
    settings: Settings | None = None,
) -> RunSummary:
    """Explore *start_url* and record steps into a run directory.

    Any argument left as ``None`` falls back to the ``capture`` / ``browser``
    settings sections.

    Raises:
        BrowserStartupError: The browser could not be launched.
        NavigationError: The start URL is unreachable.
    """
    if settings is None:
        from uiscout.settings import get_settings

        settings = get_settings()
    capture = settings.capture

    max_steps = capture.max_steps if max_steps is None else max_steps
    allow_destructive = capture.allow_destructive if allow_destructive is None else allow_destructive
    hints = tuple(capture.hints if hints is None else hints)
    hold_ms = capture.hold_ms if hold_ms is None else hold_ms

    run_dir = RunDirectory(output_dir or default_run_dir(task, settings))
    run_dir.write_run_metadata(task, start_url, max_steps, allow_destructive)
    logger.info("Run directory: %s", run_dir.root)

    profile = profile_from_settings(settings.browser, headless=headless)
    with BrowserSession(profile, credentials_path=credentials_path) as page:
        orchestrator = CaptureOrchestrator(
            page,
            run_dir,
            max_steps=max_steps,
            allow_destructive=allow_destructive,
            hints=hints,
            hold_ms=hold_ms,
            vocabulary=Vocabulary.from_policy(settings.policy),
            timing=LoopTiming.from_settings(capture, navigation_timeout_ms=settings.browser.timeout_ms),
            fill_limit=capture.fill_limit,
        )
        summary = orchestrator.run(start_url)

    write_dataset_index(run_dir.root)
    logger.info(
        "Run finished (%s): %d step(s) written, %d capture(s) skipped",
        summary.termination_reason.value,
        summary.steps_written,
        summary.captures_skipped,
    )
    return summary
