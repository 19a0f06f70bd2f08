"""Action models for the heuristic proposer and the step action records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle


class ActionKind(str, Enum):
    """Interactions the capture loop performs."""

    CLICK = "click"
    FILL = "fill"


class ActionPhase(str, Enum):
    """When an action record was captured relative to its action."""

    BEFORE = "before"
    AFTER_PRE_FILL = "after-preFill"
    AFTER_POST_FILL = "after-postFill"


class ProposalLabel(str, Enum):
    """Why the proposer picked an element."""

    DIALOG_VERB_MATCH = "dialog-verb-match"
    DIALOG_FIRST_BUTTON = "dialog-first-button"
    BEST_VERB_MATCH = "best-verb-match"
    FALLBACK_MENU = "fallback-menu"


AUTO_FILL_LABEL = "auto-fill"


@dataclass
class ProposedAction:
    """A single next action bound to a live element handle.

    Only valid for the iteration it was proposed in; never serialized.
    """

    kind: ActionKind
    element: ElementHandle
    label: ProposalLabel
    text: str = ""
    score: int = 0

    @property
    def record_label(self) -> str:
        """Label used in step reasons and ``action.json``.

        A scoring dialog control is recorded under its own text; every other
        proposal under its ``ProposalLabel`` value.
        """
        if self.label is ProposalLabel.DIALOG_VERB_MATCH:
            return self.text
        return self.label.value


class ActionRecord(BaseModel):
    """The ``action.json`` document attached to a captured step."""

    type: str
    label: str
    phase: ActionPhase

    @classmethod
    def for_action(cls, action: ProposedAction, phase: ActionPhase) -> ActionRecord:
        return cls(type=action.kind.value, label=action.record_label, phase=phase)

    @classmethod
    def auto_fill(cls) -> ActionRecord:
        return cls(type=ActionKind.FILL.value, label=AUTO_FILL_LABEL, phase=ActionPhase.AFTER_POST_FILL)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
