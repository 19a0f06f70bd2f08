"""Run-directory writer for captured steps.

Layout of a run directory::

    metadata.json
    index.html
    step-001/
        screenshot.png      full-page render
        page.html           serialized DOM
        dom_snapshot.json   NodeRecord list
        aria_snapshot.json  {dialogs, title}
        meta.json           {reason, timestamp, fingerprint, url, title}
        action.json         {type, label, phase}  (optional)

Step ordinals are recomputed from the directory listing on every write, so
a run pointed at a populated directory continues the numbering.  Only one
writer per directory is supported.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

from uiscout.models.action import ActionRecord
from uiscout.models.run import RunMetadata, RunSettingsRecord, StepMeta

if TYPE_CHECKING:
    from playwright.sync_api import Page

    from uiscout.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

STEP_DIR_PATTERN = re.compile(r"^step-\d{3}")
STEP_ORDINAL_WIDTH = 3

SCREENSHOT_FILE = "screenshot.png"
HTML_FILE = "page.html"
DOM_SNAPSHOT_FILE = "dom_snapshot.json"
ARIA_SNAPSHOT_FILE = "aria_snapshot.json"
META_FILE = "meta.json"
ACTION_FILE = "action.json"
RUN_METADATA_FILE = "metadata.json"


def save_json(path: Path, payload: Any) -> None:
    """Write *payload* as two-space indented UTF-8 JSON."""
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False, default=str), encoding="utf-8")


def step_dir_name(ordinal: int) -> str:
    return f"step-{ordinal:0{STEP_ORDINAL_WIDTH}d}"


class RunDirectory:
    """Artifact writer rooted at one run's output directory.

    Args:
        root: The run directory; created (with parents) when absent.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Step numbering
    # ------------------------------------------------------------------

    def step_dirs(self) -> list[Path]:
        """Existing step directories, sorted by name."""
        if not self.root.is_dir():
            return []
        return sorted(p for p in self.root.iterdir() if STEP_DIR_PATTERN.match(p.name))

    def next_ordinal(self) -> int:
        """1 + the number of step entries already on disk."""
        return len(self.step_dirs()) + 1

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def write_run_metadata(self, task: str, start_url: str, max_steps: int, allow_destructive: bool) -> Path:
        """Write ``metadata.json`` for the run."""
        meta = RunMetadata(
            task=task,
            start_url=start_url,
            settings=RunSettingsRecord(max_steps=max_steps, allow_destructive=allow_destructive),
        )
        path = self.root / RUN_METADATA_FILE
        save_json(path, meta.model_dump(mode="json", by_alias=True))
        return path

    def write_step(self, page: Page, snapshot: Snapshot, fingerprint: str, reason: str) -> Path:
        """Materialize a new step directory for the current page state.

        Returns:
            The created ``step-NNN`` directory.
        """
        step_dir = self.root / step_dir_name(self.next_ordinal())
        step_dir.mkdir(parents=True, exist_ok=True)

        try:
            page.screenshot(path=str(step_dir / SCREENSHOT_FILE), full_page=True)
            (step_dir / HTML_FILE).write_text(page.content(), encoding="utf-8")
            save_json(step_dir / DOM_SNAPSHOT_FILE, snapshot.nodes_payload())
            save_json(step_dir / ARIA_SNAPSHOT_FILE, snapshot.aria_payload())

            meta = StepMeta(reason=reason, fingerprint=fingerprint, url=page.url, title=snapshot.title)
            save_json(step_dir / META_FILE, meta.model_dump(mode="json"))
        except Exception:
            # A partial step must not consume an ordinal.
            shutil.rmtree(step_dir, ignore_errors=True)
            raise

        logger.info("Captured %s (%s)", step_dir.name, reason)
        return step_dir

    def write_action(self, step_dir: Path, record: ActionRecord) -> Path:
        """Attach an ``action.json`` to an existing step."""
        path = step_dir / ACTION_FILE
        save_json(path, record.to_json_dict())
        return path

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def read_step_meta(self, step_dir: Path) -> dict[str, Any]:
        """Return a step's ``meta.json``, or ``{}`` when missing or corrupt."""
        try:
            return json.loads((step_dir / META_FILE).read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
