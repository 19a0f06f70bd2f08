"""Snapshot models for the structured page summary.

A ``Snapshot`` is taken in a single ``page.evaluate`` round-trip so all of
its records describe the same instant of the page's lifetime.  The JSON
shapes produced by ``to_dict`` are what dataset consumers read from
``dom_snapshot.json`` and ``aria_snapshot.json``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

MAX_NODES = 400
MAX_NODE_TEXT = 120
MAX_DIALOG_TEXT = 200


@dataclass(frozen=True)
class BoundingBox:
    """Client rect of an element at capture time."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> BoundingBox:
        data = data or {}
        return cls(
            x=float(data.get("x") or 0),
            y=float(data.get("y") or 0),
            width=float(data.get("width") or 0),
            height=float(data.get("height") or 0),
        )

    def to_dict(self) -> dict[str, float]:
        """Serialize in ``DOMRect.toJSON()`` shape."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "top": self.y,
            "right": self.x + self.width,
            "bottom": self.y + self.height,
            "left": self.x,
        }


@dataclass(frozen=True)
class NodeRecord:
    """One visible interactive control."""

    tag: str
    role: str | None = None
    id: str | None = None
    classes: str | None = None
    name: str | None = None
    type: str | None = None
    aria_label: str | None = None
    text: str = ""
    bbox: BoundingBox = field(default_factory=BoundingBox)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NodeRecord:
        return cls(
            tag=data.get("tag") or "",
            role=data.get("role"),
            id=data.get("id"),
            classes=data.get("classes"),
            name=data.get("name"),
            type=data.get("type"),
            aria_label=data.get("ariaLabel"),
            text=(data.get("text") or "")[:MAX_NODE_TEXT],
            bbox=BoundingBox.from_dict(data.get("bbox")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag": self.tag,
            "role": self.role,
            "id": self.id,
            "classes": self.classes,
            "name": self.name,
            "type": self.type,
            "ariaLabel": self.aria_label,
            "text": self.text,
            "bbox": self.bbox.to_dict(),
        }

    @property
    def display_key(self) -> str:
        """First non-empty of text, aria label, id, class list."""
        return self.text or self.aria_label or self.id or self.classes or ""


@dataclass(frozen=True)
class DialogRecord:
    """One modal/dialog-like container."""

    tag: str
    id: str = ""
    classes: str = ""
    text: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DialogRecord:
        return cls(
            tag=data.get("tag") or "",
            id=data.get("id") or "",
            classes=data.get("classes") or "",
            text=(data.get("text") or "")[:MAX_DIALOG_TEXT],
        )

    def to_dict(self) -> dict[str, Any]:
        return {"tag": self.tag, "id": self.id, "classes": self.classes, "text": self.text}


@dataclass(frozen=True)
class Snapshot:
    """Structured summary of a page's visible controls and dialogs."""

    title: str = ""
    nodes: tuple[NodeRecord, ...] = ()
    dialogs: tuple[DialogRecord, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        """Build from the raw ``page.evaluate`` payload, enforcing the node cap."""
        nodes = tuple(NodeRecord.from_dict(n) for n in (data.get("nodes") or [])[:MAX_NODES])
        dialogs = tuple(DialogRecord.from_dict(d) for d in data.get("dialogs") or [])
        return cls(title=data.get("title") or "", nodes=nodes, dialogs=dialogs)

    @property
    def has_dialogs(self) -> bool:
        return bool(self.dialogs)

    def nodes_payload(self) -> list[dict[str, Any]]:
        """Payload written to ``dom_snapshot.json``."""
        return [n.to_dict() for n in self.nodes]

    def aria_payload(self) -> dict[str, Any]:
        """Payload written to ``aria_snapshot.json``."""
        return {"dialogs": [d.to_dict() for d in self.dialogs], "title": self.title}
