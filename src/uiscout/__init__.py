"""uiscout — heuristic UI explorer and step-capture dataset builder."""

__version__ = "0.1.0"
