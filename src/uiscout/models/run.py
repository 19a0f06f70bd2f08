"""Models for capture results, step metadata, and run bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TerminationReason(str, Enum):
    """Why the exploration loop stopped."""

    NO_PROPOSAL = "no_proposal"
    MAX_STEPS_REACHED = "max_steps_reached"


@dataclass(frozen=True)
class CaptureResult:
    """Outcome of a single ``capture`` call."""

    skipped: bool
    fingerprint: str
    step_dir: Path | None = None


class StepMeta(BaseModel):
    """The ``meta.json`` document of a step."""

    reason: str
    timestamp: str = Field(default_factory=utc_now_iso)
    fingerprint: str
    url: str
    title: str


class RunSettingsRecord(BaseModel):
    """Settings echoed into ``metadata.json``."""

    model_config = ConfigDict(populate_by_name=True)

    max_steps: int = Field(alias="maxSteps")
    allow_destructive: bool = Field(alias="allowDestructive")


class RunMetadata(BaseModel):
    """The run-level ``metadata.json`` document."""

    task: str
    start_url: str
    created_at: str = Field(default_factory=utc_now_iso)
    settings: RunSettingsRecord


class RunSummary(BaseModel):
    """Counters reported at the end of a run."""

    run_dir: str = ""
    start_url: str = ""
    steps_written: int = 0
    captures_skipped: int = 0
    iterations: int = 0
    iterations_abandoned: int = 0
    termination_reason: TerminationReason = TerminationReason.MAX_STEPS_REACHED
    last_fingerprint: str = ""
