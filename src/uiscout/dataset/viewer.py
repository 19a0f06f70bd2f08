"""Static HTML viewer for a run directory.

Renders ``index.html`` next to the step directories: a side list of steps
linking to each screenshot and saved page, shown in an iframe.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from uiscout.dataset.storage import HTML_FILE, SCREENSHOT_FILE, RunDirectory

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
INDEX_FILE = "index.html"


def write_dataset_index(run_dir: Path, template_name: str = "index.html.j2") -> Path:
    """Render the viewer page for *run_dir* and return its path."""
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    template = env.get_template(template_name)

    run = RunDirectory(run_dir)
    steps = [
        {
            "name": step.name,
            "screenshot": f"./{step.name}/{SCREENSHOT_FILE}",
            "html": f"./{step.name}/{HTML_FILE}",
            "reason": run.read_step_meta(step).get("reason", ""),
        }
        for step in run.step_dirs()
    ]

    path = run.root / INDEX_FILE
    path.write_text(template.render(steps=steps), encoding="utf-8")
    logger.info("Dataset viewer written to %s (%d steps)", path, len(steps))
    return path
