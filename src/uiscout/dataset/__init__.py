"""On-disk dataset layout: run metadata, per-step artifacts, and the viewer page."""
