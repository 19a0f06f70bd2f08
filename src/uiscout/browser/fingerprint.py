"""Snapshot fingerprinting for change detection.

The digest only depends on the title and the ``(role, display key)`` pairs
of the first ``FINGERPRINT_NODES`` nodes, in order.  It is not an element
identity; two different pages with the same controls hash the same.
"""

from __future__ import annotations

import hashlib

from uiscout.models.snapshot import Snapshot

FINGERPRINT_NODES = 100


def canonical_form(snapshot: Snapshot) -> str:
    """Return the newline-joined string that ``fingerprint`` hashes."""
    lines = [snapshot.title]
    for node in snapshot.nodes[:FINGERPRINT_NODES]:
        # A missing role renders as "null" so digests match earlier datasets.
        role = node.role if node.role is not None else "null"
        lines.append(f"{role}|{node.display_key}")
    return "\n".join(lines)


def fingerprint(snapshot: Snapshot) -> str:
    """Return the SHA-1 hex digest of ``canonical_form(snapshot)``."""
    return hashlib.sha1(canonical_form(snapshot).encode("utf-8")).hexdigest()
