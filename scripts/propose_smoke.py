#!/usr/bin/env python3
"""Smoke test for snapshot extraction and action proposal.

Opens each URL, extracts a snapshot, and reports what the proposer would
click next, without clicking anything.  Useful for checking the keyword
vocabulary against a new app before a full capture run.

Usage:
    python scripts/propose_smoke.py
    python scripts/propose_smoke.py --url "https://the-internet.herokuapp.com/add_remove_elements/"
    python scripts/propose_smoke.py --hints "login,sign in" --allow-destructive

Prerequisites:
    - Playwright browsers installed:
        playwright install chromium
"""

from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path

from rich.console import Console
from rich.table import Table

from uiscout.browser.fingerprint import fingerprint
from uiscout.browser.navigation import goto_ready
from uiscout.browser.proposer import Vocabulary, propose
from uiscout.browser.session import BrowserSession, profile_from_settings
from uiscout.browser.snapshot import extract_snapshot
from uiscout.settings import get_settings, parse_hints

console = Console()

TEST_URLS = [
    "https://the-internet.herokuapp.com/add_remove_elements/",
    "https://the-internet.herokuapp.com/entry_ad",
    "https://the-internet.herokuapp.com/login",
    "https://demoqa.com/text-box",
]


def probe_url(page, url: str, allow_destructive: bool, hints: tuple[str, ...], vocabulary: Vocabulary) -> dict:
    """Navigate to *url* and report the snapshot and proposal."""
    result = {"url": url, "success": False, "nodes": 0, "dialogs": 0, "fingerprint": "", "proposal": "", "error": ""}
    try:
        goto_ready(page, url, timeout_ms=get_settings().browser.timeout_ms)
        snapshot = extract_snapshot(page)
        result["nodes"] = len(snapshot.nodes)
        result["dialogs"] = len(snapshot.dialogs)
        result["fingerprint"] = fingerprint(snapshot)[:12]

        action = propose(page, allow_destructive, hints, snapshot=snapshot, vocabulary=vocabulary)
        if action is not None:
            result["proposal"] = f"{action.label.value}: {action.text[:40]} ({action.score})"
        result["success"] = True
    except Exception as e:
        result["error"] = str(e)
    return result


def main() -> None:
    parser = argparse.ArgumentParser(description="uiscout proposer smoke test")
    parser.add_argument("--url", help="Probe a single URL instead of the built-in list")
    parser.add_argument("--hints", default="", help="Comma-separated hint keywords")
    parser.add_argument("--allow-destructive", action="store_true")
    parser.add_argument("--output", default="data/smoke", help="Where to write the results JSON")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = get_settings()
    urls = [args.url] if args.url else TEST_URLS
    hints = tuple(parse_hints(args.hints))
    vocabulary = Vocabulary.from_policy(settings.policy)
    output_base = Path(args.output)
    output_base.mkdir(parents=True, exist_ok=True)

    results = []
    with BrowserSession(profile_from_settings(settings.browser, headless=True)) as page:
        for i, url in enumerate(urls):
            console.print(f"[bold cyan]({i + 1}/{len(urls)})[/bold cyan] {url}")
            start = time.time()
            result = probe_url(page, url, args.allow_destructive, hints, vocabulary)
            result["elapsed_sec"] = round(time.time() - start, 1)
            results.append(result)
            if result["error"]:
                console.print(f"  Error: [red]{result['error']}[/red]")

    table = Table(show_header=True, header_style="bold")
    table.add_column("URL", max_width=40)
    table.add_column("Status")
    table.add_column("Nodes", justify="right")
    table.add_column("Dialogs", justify="right")
    table.add_column("Fingerprint")
    table.add_column("Proposal")
    for r in results:
        status = "[green]OK[/green]" if r["success"] else "[red]FAIL[/red]"
        short_url = r["url"][:38] + "…" if len(r["url"]) > 40 else r["url"]
        table.add_row(short_url, status, str(r["nodes"]), str(r["dialogs"]), r["fingerprint"], r["proposal"] or "-")
    console.print(table)

    results_path = output_base / "propose_smoke.json"
    results_path.write_text(json.dumps(results, indent=2, default=str))
    console.print(f"\nDetailed results: {results_path}")


if __name__ == "__main__":
    main()
